import os
import sys
import unittest

sys.path.append(os.path.dirname(os.path.dirname(__file__)))
from models import FitnessGoal, PersonalRecord, UserProfile
from algorithms.imbalance_detector import SUMMARY_BALANCED, detect, IMBALANCE_CONFIG
from insight_service import (
    DEFAULT_INSIGHT,
    DEFAULT_RECOMMENDATION,
    NOT_ENOUGH_DATA,
    InsightService,
    InsightUnavailableError,
    build_prompt,
    diagnose,
    should_retry_with_fallback,
)

PROFILE = UserProfile(
    gender="Male",
    age=30,
    weight_value=65.0,
    weight_unit="kg",
    fitness_goals=[FitnessGoal(description="Improve posture", is_primary=True)],
)


class RecordingPrompt:
    """Fake model call that fails with the queued errors before answering."""

    def __init__(self, errors=(), output=None) -> None:
        self.errors = list(errors)
        self.output = output if output is not None else {"analyses": []}
        self.calls = []

    def __call__(self, payload: dict, model: str) -> dict:
        self.calls.append((payload, model))
        if self.errors:
            raise self.errors.pop(0)
        return self.output


def records(*pairs):
    return [PersonalRecord(exercise_name=n, weight=w) for n, w in pairs]


class FallbackTestCase(unittest.TestCase):
    def test_retry_patterns(self) -> None:
        self.assertTrue(should_retry_with_fallback(RuntimeError("503 Service Unavailable")))
        self.assertTrue(should_retry_with_fallback(RuntimeError("model is overloaded")))
        self.assertTrue(should_retry_with_fallback(RuntimeError("RESOURCE_EXHAUSTED")))
        self.assertFalse(should_retry_with_fallback(RuntimeError("401 Unauthorized")))
        self.assertFalse(should_retry_with_fallback(RuntimeError("invalid argument 503")))
        self.assertFalse(should_retry_with_fallback(RuntimeError("boom")))

    def test_fallback_on_capacity_error(self) -> None:
        prompt = RecordingPrompt([RuntimeError("503 overloaded")], {"analyses": []})
        service = InsightService(prompt_fn=prompt)
        with self.assertLogs("insight_service", level="INFO") as logs:
            self.assertEqual(service.execute_with_fallback({"prompt": "x"}), {"analyses": []})
        self.assertEqual(
            [model for _, model in prompt.calls], ["gemini-2.5-flash-lite", "gemini-2.5-flash"]
        )
        self.assertTrue(any("FallbackAttempt" in line for line in logs.output))
        self.assertTrue(any("FallbackSuccess" in line for line in logs.output))

    def test_no_fallback_on_auth_error(self) -> None:
        prompt = RecordingPrompt([PermissionError("unauthorized")])
        service = InsightService(prompt_fn=prompt)
        with self.assertRaises(PermissionError):
            service.execute_with_fallback({"prompt": "x"})
        self.assertEqual(len(prompt.calls), 1)

    def test_both_models_fail(self) -> None:
        prompt = RecordingPrompt([RuntimeError("429 quota"), RuntimeError("503")])
        service = InsightService(prompt_fn=prompt, primary_model="a", fallback_model="b")
        with self.assertLogs("insight_service", level="ERROR"):
            with self.assertRaises(InsightUnavailableError):
                service.execute_with_fallback({"prompt": "x"})
        self.assertEqual([model for _, model in prompt.calls], ["a", "b"])

    def test_missing_endpoint(self) -> None:
        with self.assertRaises(InsightUnavailableError):
            InsightService().execute_with_fallback({"prompt": "x"})


class DiagnosisTestCase(unittest.TestCase):
    def test_strong_push_weak_pull(self) -> None:
        finding = detect(
            IMBALANCE_CONFIG["Horizontal Push vs. Pull"],
            records(("Bench Press", 100), ("Seated Row", 40)),
            PROFILE,
        )
        diagnosis, focus = diagnose(finding)
        self.assertIn("Bench Press is highly developed (Advanced)", diagnosis)
        self.assertIn("Seated Row", focus)

    def test_both_beginner(self) -> None:
        finding = detect(
            IMBALANCE_CONFIG["Horizontal Push vs. Pull"],
            records(("Bench Press", 60), ("Seated Row", 30)),
            PROFILE,
        )
        diagnosis, _ = diagnose(finding)
        self.assertIn("'Beginner' range", diagnosis)

    def test_ratio_names_weaker_lift(self) -> None:
        finding = detect(
            IMBALANCE_CONFIG["Hamstring vs. Quad"],
            records(("Leg Curl", 62), ("Leg Extension", 110)),
            PROFILE,
        )
        _, focus = diagnose(finding)
        self.assertIn("(Leg Curl)", focus)

    def test_weaker_lift_compares_against_equal_lifts(self) -> None:
        profile = UserProfile(gender="Male", age=30, weight_value=80.0, weight_unit="kg")
        finding = detect(
            IMBALANCE_CONFIG["Horizontal Push vs. Pull"],
            records(("Bench Press", 100), ("Seated Row", 110)),
            profile,
        )
        self.assertEqual(finding.imbalance_focus, "Ratio Imbalance")
        _, focus = diagnose(finding)
        self.assertIn("(Bench Press)", focus)

    def test_prompt_contains_profile(self) -> None:
        prompt = build_prompt([], PROFILE)
        self.assertIn("Primary: Improve posture", prompt)
        self.assertIn("Skeletal Muscle Mass: Not Provided", prompt)
        self.assertIn("- Weight: 65.0 kg", prompt)


class AnalyzeTestCase(unittest.TestCase):
    def test_not_enough_data(self) -> None:
        service = InsightService(prompt_fn=RecordingPrompt())
        result = service.analyze(records(("Bench Press", 0)), PROFILE)
        self.assertEqual(result, {"summary": NOT_ENOUGH_DATA, "findings": []})

    def test_balanced_skips_model(self) -> None:
        prompt = RecordingPrompt()
        service = InsightService(prompt_fn=prompt)
        result = service.analyze(records(("Bench Press", 30), ("Seated Row", 50)), PROFILE)
        self.assertEqual(result["summary"], SUMMARY_BALANCED)
        self.assertEqual(prompt.calls, [])

    def test_merges_model_output(self) -> None:
        prompt = RecordingPrompt(
            output={
                "analyses": [
                    {
                        "imbalance_type": "Horizontal Push vs. Pull",
                        "insight": "Your pressing outpaces your rowing.",
                        "recommendation": "Add two rowing sessions per week.",
                    }
                ]
            }
        )
        service = InsightService(prompt_fn=prompt)
        result = service.analyze(
            records(
                ("Bench Press", 100),
                ("Seated Row", 40),
                ("Leg Curl", 40),
                ("Leg Extension", 60),
            ),
            PROFILE,
        )
        self.assertEqual(len(result["findings"]), 2)
        self.assertIn("2 potential strength imbalance(s)", result["summary"])
        horizontal, hamstring = result["findings"]
        self.assertEqual(horizontal["insight"], "Your pressing outpaces your rowing.")
        self.assertEqual(horizontal["imbalance_focus"], "Level Imbalance")
        self.assertEqual(hamstring["insight"], DEFAULT_INSIGHT)
        self.assertEqual(hamstring["recommendation"], DEFAULT_RECOMMENDATION)
        payload, _ = prompt.calls[0]
        self.assertEqual(len(payload["imbalances"]), 2)
        self.assertIn("Horizontal Push vs. Pull", payload["prompt"])

    def test_malformed_reply_is_unavailable(self) -> None:
        lifts = records(("Bench Press", 100), ("Seated Row", 40))
        for output in (["not", "an", "object"], {"analyses": [{"imbalance_type": ["a"]}]}):
            service = InsightService(prompt_fn=RecordingPrompt(output=output))
            with self.assertLogs("insight_service", level="ERROR"):
                with self.assertRaises(InsightUnavailableError):
                    service.analyze(lifts, PROFILE)

    def test_reply_without_analyses_uses_defaults(self) -> None:
        service = InsightService(prompt_fn=RecordingPrompt(output={}))
        result = service.analyze(records(("Bench Press", 100), ("Seated Row", 40)), PROFILE)
        finding = result["findings"][0]
        self.assertEqual(finding["insight"], DEFAULT_INSIGHT)
        self.assertEqual(finding["recommendation"], DEFAULT_RECOMMENDATION)


if __name__ == "__main__":
    unittest.main()
