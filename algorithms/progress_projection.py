from __future__ import annotations
from typing import Optional

from models import PersonalRecord, ProgressProjection, StrengthLevel, StrengthThresholds
from .math_tools import MathTools


class ProgressProjector:
    """Estimate how far a record has progressed toward the next tier."""

    NEAR_FRACTION: float = 0.9

    @staticmethod
    def project_progress(
        record: PersonalRecord,
        thresholds: Optional[StrengthThresholds],
        level: StrengthLevel,
    ) -> Optional[ProgressProjection]:
        """Return progress toward the tier above ``level``.

        ``percentage`` is clamped to [0, 100]; the current tier's floor is 0
        for Beginner. None for Elite, N/A or missing thresholds.
        """
        next_level = level.next_level()
        if next_level is None or thresholds is None:
            return None
        if not MathTools.is_valid_weight(record.weight):
            return None
        current = thresholds.for_level(level)
        nxt = thresholds.for_level(next_level)
        span = nxt - current
        if span > 0:
            fraction = MathTools.clamp((record.weight - current) / span, 0.0, 1.0)
        else:
            fraction = 1.0 if record.weight >= nxt else 0.0
        return ProgressProjection(
            percentage=fraction * 100,
            weight_remaining=max(nxt - record.weight, 0.0),
            next_level=next_level,
        )

    @classmethod
    def progress_hint(
        cls, record: PersonalRecord, projection: Optional[ProgressProjection]
    ) -> Optional[str]:
        """Return a short hint once a lift is within 10% of the next tier."""
        if projection is None or projection.weight_remaining <= 0:
            return None
        next_threshold = record.weight + projection.weight_remaining
        if record.weight < next_threshold * cls.NEAR_FRACTION:
            return None
        remaining = round(projection.weight_remaining, 2)
        if remaining == int(remaining):
            remaining = int(remaining)
        return f"Only {remaining} {record.weight_unit} to {projection.next_level.value}!"


def project_progress(
    record: PersonalRecord,
    thresholds: Optional[StrengthThresholds],
    level: StrengthLevel,
) -> Optional[ProgressProjection]:
    return ProgressProjector.project_progress(record, thresholds, level)
