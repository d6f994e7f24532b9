from __future__ import annotations
import datetime
from enum import Enum
from typing import Literal, Optional

from pydantic import BaseModel, Field

WeightUnit = Literal["kg", "lbs"]


class StrengthLevel(str, Enum):
    BEGINNER = "Beginner"
    INTERMEDIATE = "Intermediate"
    ADVANCED = "Advanced"
    ELITE = "Elite"
    NA = "N/A"

    @property
    def rank(self) -> int:
        """Ordinal rank; ``N/A`` ranks below every classified level."""
        return LEVEL_RANKS[self]

    @classmethod
    def from_rank(cls, rank: int) -> "StrengthLevel":
        for level, value in LEVEL_RANKS.items():
            if value == rank:
                return level
        return cls.NA

    def next_level(self) -> Optional["StrengthLevel"]:
        """Return the tier above this one, or None for Elite and N/A."""
        if self in (StrengthLevel.ELITE, StrengthLevel.NA):
            return None
        return StrengthLevel.from_rank(self.rank + 1)


LEVEL_RANKS = {
    StrengthLevel.BEGINNER: 0,
    StrengthLevel.INTERMEDIATE: 1,
    StrengthLevel.ADVANCED: 2,
    StrengthLevel.ELITE: 3,
    StrengthLevel.NA: -1,
}


class ImbalanceFocus(str, Enum):
    BALANCED = "Balanced"
    LEVEL_IMBALANCE = "Level Imbalance"
    RATIO_IMBALANCE = "Ratio Imbalance"


class ExerciseCategory(str, Enum):
    UPPER_BODY = "Upper Body"
    LOWER_BODY = "Lower Body"
    CORE = "Core"
    FULL_BODY = "Full Body"
    CARDIO = "Cardio"
    OTHER = "Other"


class PersonalRecord(BaseModel):
    exercise_name: str
    weight: float
    weight_unit: WeightUnit = "kg"
    date: datetime.date = Field(default_factory=datetime.date.today)
    category: ExerciseCategory = ExerciseCategory.OTHER
    id: Optional[int] = None


class FitnessGoal(BaseModel):
    description: str
    is_primary: bool = False


class UserProfile(BaseModel):
    gender: Optional[str] = None
    age: Optional[int] = None
    weight_value: Optional[float] = None
    weight_unit: Optional[WeightUnit] = None
    skeletal_muscle_mass_value: Optional[float] = None
    skeletal_muscle_mass_unit: Optional[WeightUnit] = None
    fitness_goals: list[FitnessGoal] = Field(default_factory=list)


class StrengthThresholds(BaseModel):
    """Absolute weights, in one unit, needed to reach each tier."""

    intermediate: int
    advanced: int
    elite: int

    def for_level(self, level: StrengthLevel) -> int:
        if level == StrengthLevel.BEGINNER:
            return 0
        return getattr(self, level.value.lower())


class ProgressProjection(BaseModel):
    percentage: float
    weight_remaining: float
    next_level: StrengthLevel


class StrengthFinding(BaseModel):
    imbalance_type: str
    lift1_name: str
    lift1_weight: float
    lift1_unit: WeightUnit
    lift1_level: StrengthLevel
    lift2_name: str
    lift2_weight: float
    lift2_unit: WeightUnit
    lift2_level: StrengthLevel
    user_ratio: str
    target_ratio: str
    balanced_range: str
    imbalance_focus: ImbalanceFocus
    has_data: Literal[True] = True


class MissingPairData(BaseModel):
    imbalance_type: str
    has_data: Literal[False] = False


class InsightAnalysis(BaseModel):
    imbalance_type: str
    insight: Optional[str] = None
    recommendation: Optional[str] = None


class InsightAnalyses(BaseModel):
    """Reply expected from the language model."""

    analyses: list[InsightAnalysis] = Field(default_factory=list)
