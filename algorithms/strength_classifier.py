from __future__ import annotations
from typing import Mapping, Optional

from models import PersonalRecord, StrengthLevel, StrengthThresholds, UserProfile
from .math_tools import MathTools
from .strength_standards import (
    GENDERS,
    STRENGTH_STANDARDS,
    StrengthStandardEntry,
    get_strength_standard,
    validate_standards,
)
from .weight_converter import WeightConverter


class StrengthClassifier:
    """Classify lifts into strength tiers relative to bodyweight or muscle mass."""

    AGE_THRESHOLD: int = 40
    AGE_RATE: float = 0.01

    def __init__(
        self,
        standards: Mapping[str, StrengthStandardEntry] = STRENGTH_STANDARDS,
        age_threshold: int | None = None,
        age_rate: float | None = None,
    ) -> None:
        if standards is not STRENGTH_STANDARDS:
            validate_standards(standards)
        self.standards = standards
        self.age_threshold = self.AGE_THRESHOLD if age_threshold is None else age_threshold
        self.age_rate = self.AGE_RATE if age_rate is None else age_rate

    def age_factor(self, age: int | None) -> float:
        """Return the divisor applied to threshold weights for older lifters."""
        if age and age > self.age_threshold:
            return 1 + (age - self.age_threshold) * self.age_rate
        return 1.0

    @staticmethod
    def base_value_kg(entry: StrengthStandardEntry, profile: UserProfile) -> Optional[float]:
        """Return bodyweight or skeletal muscle mass in kg, or None if unusable."""
        if profile.gender not in GENDERS:
            return None
        if entry.base_type == "bw":
            value, unit = profile.weight_value, profile.weight_unit
        else:
            value, unit = profile.skeletal_muscle_mass_value, profile.skeletal_muscle_mass_unit
        if not value or not unit or not MathTools.is_valid_weight(value):
            return None
        return WeightConverter.to_kg(value, unit)

    def get_strength_thresholds(
        self, exercise_name: str, profile: UserProfile, output_unit: str
    ) -> Optional[StrengthThresholds]:
        """Return the weight needed for each tier in ``output_unit``.

        Thresholds are ``(ratio * base_kg) / age_factor`` converted to
        ``output_unit`` and rounded up to a whole unit. None when the exercise
        has no standard or the profile lacks the data the standard needs.
        """
        entry = get_strength_standard(exercise_name, self.standards)
        if entry is None:
            return None
        base_kg = self.base_value_kg(entry, profile)
        if base_kg is None:
            return None
        ratios = entry.standards.get(profile.gender)
        if ratios is None:
            return None
        factor = self.age_factor(profile.age)

        def threshold(ratio: float) -> int:
            weight_kg = (ratio * base_kg) / factor
            return MathTools.ceil_threshold(WeightConverter.from_kg(weight_kg, output_unit))

        return StrengthThresholds(
            intermediate=threshold(ratios.intermediate),
            advanced=threshold(ratios.advanced),
            elite=threshold(ratios.elite),
        )

    def classify(self, record: PersonalRecord, profile: UserProfile) -> StrengthLevel:
        if not MathTools.is_valid_weight(record.weight):
            return StrengthLevel.NA
        thresholds = self.get_strength_thresholds(
            record.exercise_name, profile, record.weight_unit
        )
        if thresholds is None:
            return StrengthLevel.NA
        if record.weight >= thresholds.elite:
            return StrengthLevel.ELITE
        if record.weight >= thresholds.advanced:
            return StrengthLevel.ADVANCED
        if record.weight >= thresholds.intermediate:
            return StrengthLevel.INTERMEDIATE
        return StrengthLevel.BEGINNER


default_classifier = StrengthClassifier()


def classify(record: PersonalRecord, profile: UserProfile) -> StrengthLevel:
    return default_classifier.classify(record, profile)


def get_strength_thresholds(
    exercise_name: str, profile: UserProfile, output_unit: str
) -> Optional[StrengthThresholds]:
    return default_classifier.get_strength_thresholds(exercise_name, profile, output_unit)
