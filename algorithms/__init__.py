from .math_tools import MathTools
from .weight_converter import WeightConverter
from .exercise_names import normalize_exercise_name, title_case
from .strength_classifier import StrengthClassifier
from .imbalance_detector import ImbalanceDetector, ImbalancePairConfig
from .progress_projection import ProgressProjector

__all__ = [
    "MathTools",
    "WeightConverter",
    "normalize_exercise_name",
    "title_case",
    "StrengthClassifier",
    "ImbalanceDetector",
    "ImbalancePairConfig",
    "ProgressProjector",
]
