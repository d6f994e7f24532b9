"""Static strength standards and balanced-ratio bands.

Threshold ratios are ``weight lifted (kg) / base value (kg)`` where the base
value is bodyweight (``bw``) or skeletal muscle mass (``smm``).
"""
from __future__ import annotations
from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping, Optional

from models import ExerciseCategory, StrengthLevel
from .exercise_names import normalize_exercise_name

GENDERS = ("Male", "Female")
BASE_TYPES = ("bw", "smm")
CLASSIFIED_LEVELS = (
    StrengthLevel.BEGINNER,
    StrengthLevel.INTERMEDIATE,
    StrengthLevel.ADVANCED,
    StrengthLevel.ELITE,
)


@dataclass(frozen=True)
class StandardRatios:
    intermediate: float
    advanced: float
    elite: float

    def for_level(self, level: StrengthLevel) -> float:
        if level == StrengthLevel.BEGINNER:
            return 0.0
        return getattr(self, level.value.lower())


@dataclass(frozen=True)
class StrengthStandardEntry:
    base_type: str
    category: ExerciseCategory
    standards: Mapping[str, StandardRatios]


@dataclass(frozen=True)
class RatioBand:
    target_ratio: float
    lower_bound: float
    upper_bound: float

    def contains(self, ratio: float) -> bool:
        return self.lower_bound <= ratio <= self.upper_bound


def _entry(base_type: str, category: ExerciseCategory, male: tuple, female: tuple) -> StrengthStandardEntry:
    return StrengthStandardEntry(
        base_type,
        category,
        MappingProxyType({"Male": StandardRatios(*male), "Female": StandardRatios(*female)}),
    )


_UPPER = ExerciseCategory.UPPER_BODY
_LOWER = ExerciseCategory.LOWER_BODY
_CORE = ExerciseCategory.CORE

STRENGTH_STANDARDS: Mapping[str, StrengthStandardEntry] = MappingProxyType(
    {
        "abdominal crunch": _entry("bw", _CORE, (0.75, 1.0, 1.3), (0.60, 0.85, 1.15)),
        "abductor": _entry("bw", _LOWER, (1.5, 2.0, 2.5), (1.25, 1.75, 2.25)),
        "adductor": _entry("bw", _LOWER, (1.1, 1.6, 2.1), (1.00, 1.50, 2.25)),
        "back extension": _entry("bw", _CORE, (0.80, 1.10, 1.50), (0.65, 0.95, 1.35)),
        "bench press": _entry("bw", _UPPER, (1.0, 1.5, 2.0), (0.75, 1.0, 1.25)),
        "bicep curl": _entry("bw", _UPPER, (0.35, 0.5, 0.75), (0.40, 0.70, 1.00)),
        "butterfly": _entry("bw", _UPPER, (0.85, 1.15, 1.55), (0.60, 0.90, 1.30)),
        "chest press": _entry("bw", _UPPER, (0.80, 1.15, 1.50), (0.55, 0.90, 1.25)),
        "glutes": _entry("smm", _LOWER, (2.0, 2.5, 3.0), (2.2, 2.8, 3.4)),
        "hip thrust": _entry("bw", _LOWER, (2.0, 3.0, 4.0), (1.50, 2.25, 3.00)),
        "lat pulldown": _entry("bw", _UPPER, (0.9, 1.2, 1.5), (0.70, 0.95, 1.30)),
        "leg curl": _entry("bw", _LOWER, (0.95, 1.25, 1.75), (0.75, 1.05, 1.45)),
        "leg extension": _entry("bw", _LOWER, (1.5, 1.75, 2.5), (1.0, 1.25, 2.0)),
        "leg press": _entry("bw", _LOWER, (2.2, 3.2, 4.3), (2.00, 3.25, 4.50)),
        "overhead press": _entry("bw", _UPPER, (0.75, 1.0, 1.3), (0.50, 0.85, 1.20)),
        "reverse flys": _entry("bw", _UPPER, (0.25, 0.40, 0.60), (0.20, 0.35, 0.55)),
        "rotary torso": _entry("smm", _CORE, (0.8, 1.0, 1.2), (0.7, 0.9, 1.1)),
        "seated row": _entry("bw", _UPPER, (1.0, 1.5, 2.0), (0.75, 1.25, 1.75)),
        "shoulder press": _entry("bw", _UPPER, (0.75, 1.0, 1.3), (0.50, 0.85, 1.20)),
        "squat": _entry("bw", _LOWER, (1.25, 1.75, 2.25), (1.0, 1.5, 2.0)),
        "triceps": _entry("bw", _UPPER, (0.50, 0.75, 1.0), (0.75, 1.25, 1.50)),
    }
)


def _bands(beginner: tuple, intermediate: tuple, advanced: tuple, elite: tuple) -> Mapping[StrengthLevel, RatioBand]:
    return MappingProxyType(
        {
            StrengthLevel.BEGINNER: RatioBand(*beginner),
            StrengthLevel.INTERMEDIATE: RatioBand(*intermediate),
            StrengthLevel.ADVANCED: RatioBand(*advanced),
            StrengthLevel.ELITE: RatioBand(*elite),
        }
    )


# Push/pull bands are shared by the horizontal and vertical pairs.
_PUSH_PULL = MappingProxyType(
    {
        "Female": _bands(
            (0.55, 0.50, 0.60), (0.62, 0.60, 0.65), (0.67, 0.65, 0.70), (0.67, 0.65, 0.70)
        ),
        "Male": _bands(
            (0.60, 0.55, 0.65), (0.70, 0.65, 0.75), (0.75, 0.70, 0.80), (0.75, 0.70, 0.80)
        ),
    }
)

STRENGTH_RATIOS: Mapping[str, Mapping[str, Mapping[StrengthLevel, RatioBand]]] = MappingProxyType(
    {
        "Vertical Push vs. Pull": _PUSH_PULL,
        "Horizontal Push vs. Pull": _PUSH_PULL,
        "Hamstring vs. Quad": MappingProxyType(
            {
                "Female": _bands(
                    (0.63, 0.60, 0.67), (0.68, 0.65, 0.72), (0.74, 0.70, 0.78), (0.74, 0.70, 0.78)
                ),
                "Male": _bands(
                    (0.60, 0.55, 0.65), (0.65, 0.60, 0.70), (0.71, 0.67, 0.75), (0.71, 0.67, 0.75)
                ),
            }
        ),
        "Adductor vs. Abductor": MappingProxyType(
            {
                "Female": _bands(
                    (0.75, 0.65, 0.85), (0.80, 0.70, 0.90), (0.85, 0.75, 0.95), (0.85, 0.75, 0.95)
                ),
                "Male": _bands(
                    (0.75, 0.65, 0.85), (0.82, 0.75, 0.90), (0.87, 0.80, 0.95), (0.87, 0.80, 0.95)
                ),
            }
        ),
    }
)


def get_strength_standard(
    exercise_name: str, table: Mapping[str, StrengthStandardEntry] = STRENGTH_STANDARDS
) -> Optional[StrengthStandardEntry]:
    return table.get(normalize_exercise_name(exercise_name))


def get_strength_standard_type(
    exercise_name: str, table: Mapping[str, StrengthStandardEntry] = STRENGTH_STANDARDS
) -> Optional[str]:
    """Return ``"bw"``, ``"smm"`` or None when the exercise has no standard."""
    entry = get_strength_standard(exercise_name, table)
    return entry.base_type if entry is not None else None


def get_exercise_category(exercise_name: str) -> Optional[ExerciseCategory]:
    entry = get_strength_standard(exercise_name)
    return entry.category if entry is not None else None


def classified_exercises() -> list[str]:
    return sorted(STRENGTH_STANDARDS)


def get_strength_ratio_standards(
    imbalance_type: str,
    gender: Optional[str],
    level: StrengthLevel,
    table: Mapping[str, Mapping[str, Mapping[StrengthLevel, RatioBand]]] = STRENGTH_RATIOS,
) -> Optional[RatioBand]:
    """Return the balanced band for a pair at the guiding ``level``."""
    if level == StrengthLevel.NA:
        return None
    by_gender = table.get(imbalance_type)
    if by_gender is None:
        return None
    by_level = by_gender.get(gender) if gender else None
    if by_level is None:
        return None
    return by_level.get(level)


def validate_standards(table: Mapping[str, StrengthStandardEntry]) -> None:
    """Raise ``ValueError`` if a standards table row is malformed."""
    for name, entry in table.items():
        if normalize_exercise_name(name) != name:
            raise ValueError(f"{name}: key is not a normalized exercise name")
        if entry.base_type not in BASE_TYPES:
            raise ValueError(f"{name}: unknown base type {entry.base_type!r}")
        for gender in GENDERS:
            ratios = entry.standards.get(gender)
            if ratios is None:
                raise ValueError(f"{name}: missing {gender} standards")
            if not 0 < ratios.intermediate < ratios.advanced < ratios.elite:
                raise ValueError(f"{name}: {gender} thresholds must be positive and increasing")


def validate_ratio_bands(table: Mapping[str, Mapping[str, Mapping[StrengthLevel, RatioBand]]]) -> None:
    """Raise ``ValueError`` if a ratio band is incomplete or inverted."""
    for imbalance_type, by_gender in table.items():
        for gender in GENDERS:
            by_level = by_gender.get(gender)
            if by_level is None:
                raise ValueError(f"{imbalance_type}: missing {gender} bands")
            for level in CLASSIFIED_LEVELS:
                band = by_level.get(level)
                if band is None:
                    raise ValueError(f"{imbalance_type}: missing {gender} {level.value} band")
                if not 0 < band.lower_bound <= band.target_ratio <= band.upper_bound:
                    raise ValueError(f"{imbalance_type}: {gender} {level.value} band is inverted")
