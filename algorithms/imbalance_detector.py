"""Compare opposing lifts and flag level or ratio imbalances."""
from __future__ import annotations
from dataclasses import dataclass
from types import MappingProxyType
from typing import Callable, Iterable, Mapping, Optional, Sequence, Union

from models import (
    ImbalanceFocus,
    MissingPairData,
    PersonalRecord,
    StrengthFinding,
    StrengthLevel,
    UserProfile,
)
from .exercise_names import normalize_exercise_name, title_case
from .math_tools import MathTools
from .strength_classifier import StrengthClassifier, default_classifier
from .strength_standards import STRENGTH_RATIOS, get_strength_ratio_standards
from .weight_converter import WeightConverter

PairResult = Union[StrengthFinding, MissingPairData]

IMBALANCE_TYPES = (
    "Horizontal Push vs. Pull",
    "Vertical Push vs. Pull",
    "Hamstring vs. Quad",
    "Adductor vs. Abductor",
)

SUMMARY_IMBALANCED = (
    "Based on your personal records, some strength imbalances were identified "
    "that could be improved."
)
SUMMARY_BALANCED = (
    "Great job! Your strength ratios appear to be well-balanced based on your "
    "logged personal records."
)


def default_ratio(weight1_kg: float, weight2_kg: float) -> float:
    return weight1_kg / weight2_kg


@dataclass(frozen=True)
class ImbalancePairConfig:
    imbalance_type: str
    lift1_options: tuple[str, ...]
    lift2_options: tuple[str, ...]
    ratio_calculation: Callable[[float, float], float] = default_ratio


IMBALANCE_CONFIG: Mapping[str, ImbalancePairConfig] = MappingProxyType(
    {
        "Horizontal Push vs. Pull": ImbalancePairConfig(
            "Horizontal Push vs. Pull",
            ("bench press", "chest press", "butterfly"),
            ("seated row", "reverse flys"),
        ),
        "Vertical Push vs. Pull": ImbalancePairConfig(
            "Vertical Push vs. Pull",
            ("overhead press", "shoulder press"),
            ("lat pulldown",),
        ),
        "Hamstring vs. Quad": ImbalancePairConfig(
            "Hamstring vs. Quad",
            ("leg curl",),
            ("leg extension",),
        ),
        "Adductor vs. Abductor": ImbalancePairConfig(
            "Adductor vs. Abductor",
            ("adductor",),
            ("abductor",),
        ),
    }
)


def find_best_pr(
    records: Iterable[PersonalRecord], exercise_names: Sequence[str]
) -> Optional[PersonalRecord]:
    """Return the heaviest record whose exercise is one of ``exercise_names``.

    Weights are compared in kg; a later record replaces the current best only
    when it is strictly heavier, so the first of equal records wins.
    """
    wanted = {normalize_exercise_name(n) for n in exercise_names}
    best: Optional[PersonalRecord] = None
    best_kg = 0.0
    for record in records:
        if normalize_exercise_name(record.exercise_name) not in wanted:
            continue
        if not MathTools.is_valid_weight(record.weight):
            continue
        weight_kg = WeightConverter.to_kg(record.weight, record.weight_unit)
        if best is None or weight_kg > best_kg:
            best = record
            best_kg = weight_kg
    return best


def guiding_level(level1: StrengthLevel, level2: StrengthLevel) -> StrengthLevel:
    """Return the weaker of two tiers, or N/A if either is unclassified."""
    if level1 == StrengthLevel.NA or level2 == StrengthLevel.NA:
        return StrengthLevel.NA
    return StrengthLevel.from_rank(min(level1.rank, level2.rank))


class ImbalanceDetector:
    """Detect strength imbalances between opposing lifts."""

    def __init__(
        self,
        classifier: StrengthClassifier | None = None,
        ratio_bands: Mapping = STRENGTH_RATIOS,
    ) -> None:
        self.classifier = classifier or default_classifier
        self.ratio_bands = ratio_bands

    def detect(
        self,
        config: ImbalancePairConfig,
        records: Sequence[PersonalRecord],
        profile: UserProfile,
    ) -> PairResult:
        lift1 = find_best_pr(records, config.lift1_options)
        lift2 = find_best_pr(records, config.lift2_options)
        if lift1 is None or lift2 is None:
            return MissingPairData(imbalance_type=config.imbalance_type)

        weight1_kg = WeightConverter.to_kg(lift1.weight, lift1.weight_unit)
        weight2_kg = WeightConverter.to_kg(lift2.weight, lift2.weight_unit)
        if weight2_kg == 0:
            return MissingPairData(imbalance_type=config.imbalance_type)

        level1 = self.classifier.classify(lift1, profile)
        level2 = self.classifier.classify(lift2, profile)
        ratio = config.ratio_calculation(weight1_kg, weight2_kg)

        band = get_strength_ratio_standards(
            config.imbalance_type,
            profile.gender,
            guiding_level(level1, level2),
            self.ratio_bands,
        )

        # A tier mismatch outranks an in-band ratio.
        if level1 != StrengthLevel.NA and level2 != StrengthLevel.NA and level1 != level2:
            focus = ImbalanceFocus.LEVEL_IMBALANCE
        elif band is not None and not band.contains(ratio):
            focus = ImbalanceFocus.RATIO_IMBALANCE
        else:
            focus = ImbalanceFocus.BALANCED

        return StrengthFinding(
            imbalance_type=config.imbalance_type,
            lift1_name=title_case(lift1.exercise_name),
            lift1_weight=lift1.weight,
            lift1_unit=lift1.weight_unit,
            lift1_level=level1,
            lift2_name=title_case(lift2.exercise_name),
            lift2_weight=lift2.weight,
            lift2_unit=lift2.weight_unit,
            lift2_level=level2,
            user_ratio=MathTools.format_ratio(ratio),
            target_ratio=MathTools.format_ratio(band.target_ratio) if band else "N/A",
            balanced_range=(
                MathTools.format_range(band.lower_bound, band.upper_bound) if band else "N/A"
            ),
            imbalance_focus=focus,
        )

    def detect_all(
        self,
        records: Sequence[PersonalRecord],
        profile: UserProfile,
        configs: Mapping[str, ImbalancePairConfig] = IMBALANCE_CONFIG,
    ) -> list[PairResult]:
        records = list(records)
        return [
            self.detect(configs[t], records, profile) for t in IMBALANCE_TYPES if t in configs
        ]


def has_imbalance(findings: Iterable[PairResult]) -> bool:
    """Return True if any finding with data is not Balanced."""
    return any(
        f.has_data and f.imbalance_focus != ImbalanceFocus.BALANCED for f in findings
    )


def summarize(findings: Iterable[PairResult]) -> str:
    return SUMMARY_IMBALANCED if has_imbalance(findings) else SUMMARY_BALANCED


def detect(
    config: ImbalancePairConfig, records: Sequence[PersonalRecord], profile: UserProfile
) -> PairResult:
    return ImbalanceDetector().detect(config, records, profile)
