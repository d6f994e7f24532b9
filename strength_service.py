from __future__ import annotations
import logging
from typing import Iterable, Optional

from db import PersonalRecordRepository, ProfileRepository, SettingsRepository
from models import PersonalRecord, UserProfile
from algorithms.exercise_names import normalize_exercise_name
from algorithms.imbalance_detector import (
    ImbalanceDetector,
    PairResult,
    has_imbalance,
    summarize,
)
from algorithms.progress_projection import ProgressProjector
from algorithms.strength_classifier import StrengthClassifier
from algorithms.strength_standards import get_strength_standard_type
from algorithms.weight_converter import WeightConverter

logger = logging.getLogger(__name__)


def best_records(records: Iterable[PersonalRecord]) -> list[PersonalRecord]:
    """Return the heaviest record per exercise, most recent first."""
    best: dict[str, PersonalRecord] = {}
    for record in records:
        key = normalize_exercise_name(record.exercise_name)
        current = best.get(key)
        if current is None:
            best[key] = record
            continue
        if WeightConverter.to_kg(record.weight, record.weight_unit) > WeightConverter.to_kg(
            current.weight, current.weight_unit
        ):
            best[key] = record
    return sorted(best.values(), key=lambda r: r.date, reverse=True)


def group_by_category(records: Iterable[PersonalRecord]) -> dict[str, list[PersonalRecord]]:
    groups: dict[str, list[PersonalRecord]] = {}
    for record in records:
        groups.setdefault(record.category.value, []).append(record)
    return groups


class StrengthService:
    """Classify stored records and analyse strength balance."""

    def __init__(
        self,
        record_repo: PersonalRecordRepository,
        profile_repo: ProfileRepository,
        settings_repo: SettingsRepository | None = None,
    ) -> None:
        self.records = record_repo
        self.profiles = profile_repo
        self.settings = settings_repo

    def classifier(self) -> StrengthClassifier:
        """Build a classifier from the configured age adjustment."""
        if self.settings is None:
            return StrengthClassifier()
        return StrengthClassifier(
            age_threshold=self.settings.get_int(
                "age_adjustment_start", StrengthClassifier.AGE_THRESHOLD
            ),
            age_rate=self.settings.get_float(
                "age_adjustment_rate", StrengthClassifier.AGE_RATE
            ),
        )

    def _load(
        self, profile: Optional[UserProfile] = None
    ) -> tuple[list[PersonalRecord], UserProfile]:
        records = self.records.fetch_all_records()
        return records, profile or self.profiles.fetch()

    def best_records(self) -> list[PersonalRecord]:
        return best_records(self.records.fetch_all_records())

    def thresholds(self, exercise_name: str, unit: Optional[str] = None) -> dict | None:
        profile = self.profiles.fetch()
        if unit is None:
            unit = self.settings.get_text("weight_unit", "kg") if self.settings else "kg"
        result = self.classifier().get_strength_thresholds(exercise_name, profile, unit)
        if result is None:
            return None
        return {"exercise": normalize_exercise_name(exercise_name), "unit": unit, **result.model_dump()}

    def levels(self) -> list[dict]:
        """Return every best record with its tier and progress."""
        records, profile = self._load()
        classifier = self.classifier()
        report: list[dict] = []
        for record in best_records(records):
            level = classifier.classify(record, profile)
            thresholds = classifier.get_strength_thresholds(
                record.exercise_name, profile, record.weight_unit
            )
            progress = ProgressProjector.project_progress(record, thresholds, level)
            report.append(
                {
                    "record": record.model_dump(mode="json"),
                    "level": level.value,
                    "standard_type": get_strength_standard_type(record.exercise_name),
                    "thresholds": thresholds.model_dump() if thresholds else None,
                    "progress": progress.model_dump(mode="json") if progress else None,
                    "hint": ProgressProjector.progress_hint(record, progress),
                }
            )
        return report

    def findings(self, profile: Optional[UserProfile] = None) -> list[PairResult]:
        records, profile = self._load(profile)
        return ImbalanceDetector(self.classifier()).detect_all(records, profile)

    def balance(self) -> dict:
        """Return the imbalance findings and their summary sentence."""
        findings = self.findings()
        imbalanced = has_imbalance(findings)
        logger.debug(
            "strength balance computed: %d pairs, imbalanced=%s", len(findings), imbalanced
        )
        return {
            "summary": summarize(findings),
            "has_imbalance": imbalanced,
            "findings": [f.model_dump(mode="json") for f in findings],
        }
