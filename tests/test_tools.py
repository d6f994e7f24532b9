import os
import sys
import math
import unittest

sys.path.append(os.path.dirname(os.path.dirname(__file__)))
from algorithms import MathTools, WeightConverter, normalize_exercise_name, title_case
from algorithms.exercise_names import LIFT_NAME_ALIASES


class MathToolsTestCase(unittest.TestCase):
    def test_clamp(self) -> None:
        self.assertEqual(MathTools.clamp(5, 0, 10), 5)
        self.assertEqual(MathTools.clamp(-1, 0, 10), 0)
        self.assertEqual(MathTools.clamp(11, 0, 10), 10)
        with self.assertRaises(ValueError):
            MathTools.clamp(1, 2, 1)

    def test_is_valid_weight(self) -> None:
        self.assertTrue(MathTools.is_valid_weight(0))
        self.assertTrue(MathTools.is_valid_weight(102.5))
        self.assertFalse(MathTools.is_valid_weight(-1))
        self.assertFalse(MathTools.is_valid_weight(math.nan))
        self.assertFalse(MathTools.is_valid_weight(math.inf))
        self.assertFalse(MathTools.is_valid_weight(None))
        self.assertFalse(MathTools.is_valid_weight(True))

    def test_ceil_threshold(self) -> None:
        self.assertEqual(MathTools.ceil_threshold(105.1), 106)
        self.assertEqual(MathTools.ceil_threshold(80.0), 80)
        self.assertIsInstance(MathTools.ceil_threshold(64.2), int)

    def test_format_ratio(self) -> None:
        self.assertEqual(MathTools.format_ratio(0.6), "0.60:1")
        self.assertEqual(MathTools.format_ratio(1.5), "1.50:1")
        self.assertEqual(MathTools.format_range(0.55, 0.65), "0.55-0.65:1")


class WeightConverterTestCase(unittest.TestCase):
    def test_to_kg(self) -> None:
        self.assertAlmostEqual(WeightConverter.to_kg(100, "lbs"), 45.3592)
        self.assertEqual(WeightConverter.to_kg(100, "kg"), 100)

    def test_from_kg(self) -> None:
        self.assertAlmostEqual(WeightConverter.from_kg(45.3592, "lbs"), 100.0)
        self.assertEqual(WeightConverter.from_kg(60, "kg"), 60)

    def test_round_trip(self) -> None:
        for weight in (0.0, 1.0, 57.5, 100.0, 225.0, 412.3):
            for unit in WeightConverter.UNITS:
                back = WeightConverter.from_kg(WeightConverter.to_kg(weight, unit), unit)
                self.assertAlmostEqual(back, weight, delta=0.01)

    def test_convert(self) -> None:
        self.assertEqual(WeightConverter.convert(80, "kg", "kg"), 80)
        self.assertAlmostEqual(WeightConverter.convert(100, "kg", "lbs"), 220.462, places=2)

    def test_rounded_helpers(self) -> None:
        self.assertEqual(WeightConverter.kg_to_lb(100), 220.46)
        self.assertEqual(WeightConverter.lb_to_kg(220), 99.79)


class ExerciseNameTestCase(unittest.TestCase):
    def test_basic_normalization(self) -> None:
        self.assertEqual(normalize_exercise_name("  Bench   Press "), "bench press")
        self.assertEqual(normalize_exercise_name("(Leg Press)"), "leg press")
        self.assertEqual(normalize_exercise_name("Curl (EZ)"), "curl ez")
        self.assertEqual(normalize_exercise_name(""), "")
        self.assertEqual(normalize_exercise_name(None), "")

    def test_prefixes_removed(self) -> None:
        self.assertEqual(normalize_exercise_name("EGYM Chest Press"), "chest press")
        self.assertEqual(normalize_exercise_name("Machine Leg Curl"), "leg curl")
        self.assertEqual(normalize_exercise_name("egym machine leg extension"), "leg extension")

    def test_aliases(self) -> None:
        self.assertEqual(normalize_exercise_name("Lat Pull Down"), "lat pulldown")
        self.assertEqual(normalize_exercise_name("Bench Presses"), "bench press")
        self.assertEqual(normalize_exercise_name("Rows"), "seated row")
        self.assertEqual(normalize_exercise_name("Hip Adduction"), "adductor")
        self.assertEqual(normalize_exercise_name("Chest Press"), "chest press")

    def test_idempotent(self) -> None:
        names = [
            "EGYM Machine Seated Rows",
            "Reverse Flies (Cable)",
            "  LAT  pulldowns ",
            "machine machine squat",
            *LIFT_NAME_ALIASES.keys(),
        ]
        for name in names:
            once = normalize_exercise_name(name)
            self.assertEqual(normalize_exercise_name(once), once, name)

    def test_title_case(self) -> None:
        self.assertEqual(title_case("seated row"), "Seated Row")
        self.assertEqual(title_case("EGYM chest press"), "Egym Chest Press")
        self.assertEqual(title_case(""), "")


if __name__ == "__main__":
    unittest.main()
