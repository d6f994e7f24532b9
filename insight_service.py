"""Narrative strength-balance insights from a language model.

Ratios and tiers are decided by :mod:`algorithms.imbalance_detector`; the
model only receives the finished findings and writes commentary for them.
"""
from __future__ import annotations
import logging
from typing import Callable, Iterable

import requests
from pydantic import ValidationError

from models import (
    ImbalanceFocus,
    InsightAnalyses,
    PersonalRecord,
    StrengthFinding,
    StrengthLevel,
    UserProfile,
)
from algorithms.imbalance_detector import (
    IMBALANCE_CONFIG,
    SUMMARY_BALANCED,
    ImbalanceDetector,
    ImbalancePairConfig,
)
from algorithms.weight_converter import WeightConverter

logger = logging.getLogger(__name__)

PromptFn = Callable[[dict, str], dict]

FALLBACK_ERROR_PATTERNS = (
    "503",
    "overloaded",
    "unavailable",
    "429",
    "quota",
    "resource exhausted",
    "resource_exhausted",
)
NON_RETRYABLE_PATTERNS = (
    "validation",
    "invalid",
    "malformed",
    "unauthorized",
    "forbidden",
    "auth",
    "api_key",
    "not found",
    "access denied",
    "safety",
    "blocked",
)

NOT_ENOUGH_DATA = (
    "Not enough data for AI analysis. Please log at least one personal record with weight."
)
DEFAULT_INSIGHT = "AI analysis could not be generated for this imbalance."
DEFAULT_RECOMMENDATION = "Please consult a fitness professional for guidance."

_STRONG = (StrengthLevel.ADVANCED, StrengthLevel.ELITE)
_DEVELOPING = (StrengthLevel.BEGINNER, StrengthLevel.INTERMEDIATE)


class InsightUnavailableError(RuntimeError):
    """Raised when neither the primary nor the fallback model answered."""


def should_retry_with_fallback(error: BaseException) -> bool:
    """Return True for transient capacity errors worth one fallback attempt."""
    message = str(error)
    lower = message.lower()
    if any(p in lower for p in NON_RETRYABLE_PATTERNS):
        return False
    return any(p in message or p in lower for p in FALLBACK_ERROR_PATTERNS)


def diagnose(
    finding: StrengthFinding, config: ImbalancePairConfig | None = None
) -> tuple[str, str]:
    """Return the system diagnosis and recommendation focus for a finding."""
    name1, name2 = finding.lift1_name, finding.lift2_name
    level1, level2 = finding.lift1_level, finding.lift2_level
    if level1 in _STRONG and level2 in _DEVELOPING:
        return (
            f"Your {name1} is highly developed ({level1.value}), but its opposing muscle "
            f"group, trained by {name2}, is lagging behind ({level2.value}). This gap can "
            "increase injury risk.",
            f"Bring the {name2} to at least an 'Advanced' level to support the primary lift. "
            f"Matching the {name1} weight is not the goal; prioritize health.",
        )
    if level2 in _STRONG and level1 in _DEVELOPING:
        return (
            f"Your {name2} is highly developed ({level2.value}), but its opposing muscle "
            f"group, trained by {name1}, is lagging behind ({level1.value}). This gap can "
            "increase injury risk.",
            f"Bring the {name1} to at least an 'Advanced' level for stability and balance. "
            f"Matching the {name2} weight is not the goal; prioritize health.",
        )
    if level1 == StrengthLevel.BEGINNER and level2 == StrengthLevel.BEGINNER:
        return (
            f"Both your {name1} and {name2} are in the 'Beginner' range. The ratio is off, "
            "but the main opportunity is building foundational strength in both movements.",
            "Encourage balanced strength development in both exercises, with slightly more "
            "emphasis on the weaker one so the ratio corrects over time.",
        )
    weaker = _weaker_lift(finding, config or IMBALANCE_CONFIG.get(finding.imbalance_type))
    return (
        f"Your strength ratio between {name1} ({level1.value}) and {name2} "
        f"({level2.value}) is outside the ideal range. Addressing it can improve "
        "performance and reduce injury risk.",
        f"Give one clear, actionable tip to increase strength in the weaker lift ({weaker}) "
        "to bring it in line with its counterpart.",
    )


def _weaker_lift(finding: StrengthFinding, config: ImbalancePairConfig | None) -> str:
    """Name lift1 when its ratio falls below the ratio of two equal lifts."""
    if config is None:
        config = ImbalancePairConfig(finding.imbalance_type, (), ())
    ratio = config.ratio_calculation(
        WeightConverter.to_kg(finding.lift1_weight, finding.lift1_unit),
        WeightConverter.to_kg(finding.lift2_weight, finding.lift2_unit),
    )
    return finding.lift1_name if ratio < config.ratio_calculation(1, 1) else finding.lift2_name


def build_prompt(imbalances: list[dict], profile: UserProfile) -> str:
    def stat(value, unit=None) -> str:
        if value is None:
            return "Not Provided"
        return f"{value} {unit}" if unit else str(value)

    lines = [
        "You are an expert fitness coach writing commentary on pre-calculated strength data.",
        "Do not calculate or verify any ratio or level; treat the data below as final.",
        "",
        "User:",
        f"- Age: {stat(profile.age)}",
        f"- Gender: {stat(profile.gender)}",
        f"- Weight: {stat(profile.weight_value, profile.weight_unit)}",
        "- Skeletal Muscle Mass: "
        + stat(profile.skeletal_muscle_mass_value, profile.skeletal_muscle_mass_unit),
    ]
    if profile.fitness_goals:
        lines.append("- Fitness Goals:")
        for goal in profile.fitness_goals:
            prefix = "Primary: " if goal.is_primary else ""
            lines.append(f"  - {prefix}{goal.description}")
    lines += ["", "Imbalances:"]
    for item in imbalances:
        lines += [
            f"- Imbalance Type: {item['imbalance_type']}",
            f"  Lifts: {item['lift1_name']} (Level: {item['lift1_level']}) vs. "
            f"{item['lift2_name']} (Level: {item['lift2_level']})",
            f"  System Diagnosis: {item['diagnosis']}",
            f"  System Recommendation Focus: {item['recommendation_focus']}",
        ]
    lines += [
        "",
        'Reply with a JSON object {"analyses": [...]} holding one entry per imbalance with',
        '"imbalance_type" (copied exactly), "insight" (at most 2 sentences, personal to the',
        'user\'s goals) and "recommendation" (at most 2 sentences, starting with an action',
        "verb and following the recommendation focus). Vary the wording between entries.",
    ]
    return "\n".join(lines)


class InsightService:
    """Turn detector findings into narrative insights."""

    def __init__(
        self,
        detector: ImbalanceDetector | None = None,
        prompt_fn: PromptFn | None = None,
        *,
        primary_model: str = "gemini-2.5-flash-lite",
        fallback_model: str = "gemini-2.5-flash",
        endpoint: str = "",
        api_key: str = "",
        timeout: float = 30.0,
    ) -> None:
        self.detector = detector or ImbalanceDetector()
        self.prompt_fn = prompt_fn or self._http_prompt
        self.primary_model = primary_model
        self.fallback_model = fallback_model
        self.endpoint = endpoint
        self.api_key = api_key
        self.timeout = timeout

    @classmethod
    def from_settings(cls, settings, detector: ImbalanceDetector | None = None) -> "InsightService":
        api_key = settings.get_text("llm_api_key", "")
        return cls(
            detector,
            primary_model=settings.get_text("llm_primary_model", "gemini-2.5-flash-lite"),
            fallback_model=settings.get_text("llm_fallback_model", "gemini-2.5-flash"),
            endpoint=settings.get_text("llm_endpoint", ""),
            api_key=api_key if api_key not in ("True", "1") else "",
            timeout=settings.get_float("llm_timeout", 30.0),
        )

    def _http_prompt(self, payload: dict, model: str) -> dict:
        if not self.endpoint:
            raise InsightUnavailableError("no language model endpoint configured")
        headers = {"Authorization": f"Bearer {self.api_key}"} if self.api_key else {}
        resp = requests.post(
            self.endpoint,
            json={"model": model, **payload},
            headers=headers,
            timeout=self.timeout,
        )
        resp.raise_for_status()
        data = resp.json()
        if isinstance(data, dict):
            return data.get("output", data)
        return data

    def execute_with_fallback(self, payload: dict, flow_name: str = "strengthInsights") -> dict:
        """Call the primary model, retrying once on the fallback for transient errors."""
        try:
            return self.prompt_fn(payload, self.primary_model)
        except Exception as primary_error:
            if not should_retry_with_fallback(primary_error):
                raise
            logger.warning(
                "[FallbackAttempt] flow=%s primary model %s failed: %s; trying %s",
                flow_name,
                self.primary_model,
                primary_error,
                self.fallback_model,
            )
            try:
                result = self.prompt_fn(payload, self.fallback_model)
            except Exception as fallback_error:
                logger.error(
                    "[FallbackFailure] flow=%s primary: %s fallback: %s",
                    flow_name,
                    primary_error,
                    fallback_error,
                )
                raise InsightUnavailableError(
                    "AI service temporarily unavailable. Please try again in a moment."
                ) from fallback_error
            logger.info("[FallbackSuccess] flow=%s fallback model succeeded", flow_name)
            return result

    def analyze(self, records: Iterable[PersonalRecord], profile: UserProfile) -> dict:
        """Return a summary plus every non-balanced finding with AI commentary."""
        usable = [r for r in records if r.weight > 0]
        if not usable:
            return {"summary": NOT_ENOUGH_DATA, "findings": []}

        findings = [
            f
            for f in self.detector.detect_all(usable, profile)
            if f.has_data and f.imbalance_focus != ImbalanceFocus.BALANCED
        ]
        if not findings:
            return {"summary": SUMMARY_BALANCED, "findings": []}

        imbalances = []
        for finding in findings:
            diagnosis, focus = diagnose(finding)
            imbalances.append(
                {
                    "imbalance_type": finding.imbalance_type,
                    "lift1_name": finding.lift1_name,
                    "lift1_level": finding.lift1_level.value,
                    "lift2_name": finding.lift2_name,
                    "lift2_level": finding.lift2_level.value,
                    "diagnosis": diagnosis,
                    "recommendation_focus": focus,
                }
            )
        output = self.execute_with_fallback(
            {"prompt": build_prompt(imbalances, profile), "imbalances": imbalances}
        )
        try:
            reply = InsightAnalyses.model_validate(output or {})
        except ValidationError as e:
            logger.error("flow=strengthInsights malformed model reply: %s", e)
            raise InsightUnavailableError(
                "AI service returned an unexpected response. Please try again."
            ) from e
        analyses = {a.imbalance_type: a for a in reply.analyses}

        results = []
        for finding, item in zip(findings, imbalances):
            ai = analyses.get(finding.imbalance_type)
            results.append(
                {
                    **finding.model_dump(mode="json"),
                    "diagnosis": item["diagnosis"],
                    "insight": (ai and ai.insight) or DEFAULT_INSIGHT,
                    "recommendation": (ai and ai.recommendation) or DEFAULT_RECOMMENDATION,
                }
            )
        summary = (
            f"Based on your personal records, we found {len(results)} potential strength "
            "imbalance(s) that could be improved. AI insights are included below."
        )
        return {"summary": summary, "findings": results}
