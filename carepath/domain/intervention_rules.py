"""Intervention rule evaluators.

Every rule is a callable ``rule(records) -> list[str]`` that consumes the full
historical-record set of a patient and returns zero or more human-readable
intervention strings. Rules must be pure: no I/O, no clock reads, and the same
input sequence must always yield the same output sequence.

Only ``high_baseline_risk_rule`` is registered by default. The factories below
build further rules for deployments that have agreed clinical thresholds.
"""

from datetime import date
from typing import Callable, Sequence

from carepath.domain.clinical_record import HistoricalRecord
from carepath.domain.risk import HIGH_RISK_THRESHOLD, baseline_risk_score

InterventionRule = Callable[[Sequence[HistoricalRecord]], list[str]]

DAILY_NURSE_CHECK_INS = "Daily nurse check-ins"
MEDICATION_REVIEW = "Medication review"


def _admission_count(records: Sequence[HistoricalRecord]) -> int:
    return sum(len(record.admissions) for record in records)


def _distinct_conditions(records: Sequence[HistoricalRecord]) -> list[str]:
    seen: list[str] = []
    for record in records:
        if record.condition and record.condition not in seen:
            seen.append(record.condition)
    return seen


def high_baseline_risk_rule(records: Sequence[HistoricalRecord]) -> list[str]:
    """Recommend intensive follow-up when the baseline risk score is high.

    The score weighs the number of recorded admissions and distinct chronic
    conditions; above ``HIGH_RISK_THRESHOLD`` the patient gets daily nurse
    check-ins and a medication review.
    """
    if not records:
        return []

    score = baseline_risk_score(
        _admission_count(records),
        len(_distinct_conditions(records)),
    )
    if score > HIGH_RISK_THRESHOLD:
        return [DAILY_NURSE_CHECK_INS, MEDICATION_REVIEW]
    return []


def admission_threshold_rule(threshold: int, intervention: str) -> InterventionRule:
    """Build a rule firing when the admission count reaches ``threshold``."""

    def rule(records: Sequence[HistoricalRecord]) -> list[str]:
        if _admission_count(records) >= threshold:
            return [intervention]
        return []

    rule.__name__ = f"admission_threshold_{threshold}"
    return rule


def diagnosis_medication_rule(diagnosis: str, medication: str, intervention: str) -> InterventionRule:
    """Build a rule firing when a diagnosis and a medication co-occur in the history.

    Matching is case-insensitive on the diagnosis label and the medication name.
    """
    diagnosis_key = diagnosis.casefold()
    medication_key = medication.casefold()

    def rule(records: Sequence[HistoricalRecord]) -> list[str]:
        diagnoses = {
            admission.diagnosis.casefold()
            for record in records
            for admission in record.admissions
        }
        medications = {
            entry.name.casefold()
            for record in records
            for entry in record.medications
        }
        if diagnosis_key in diagnoses and medication_key in medications:
            return [intervention]
        return []

    rule.__name__ = f"diagnosis_medication_{diagnosis_key}_{medication_key}"
    return rule


def recent_admission_rule(reference_date: date, window_days: int, intervention: str) -> InterventionRule:
    """Build a rule firing when the latest admission falls within ``window_days`` of ``reference_date``.

    The reference date is fixed when the rule is built so that evaluation stays
    deterministic. Admissions are sorted by date since the store does not
    guarantee their order.
    """

    def rule(records: Sequence[HistoricalRecord]) -> list[str]:
        admissions = [
            admission
            for record in records
            for admission in record.chronological_admissions()
        ]
        if not admissions:
            return []

        latest = max(admission.date for admission in admissions)
        elapsed = (reference_date - latest).days
        if 0 <= elapsed <= window_days:
            return [intervention]
        return []

    rule.__name__ = f"recent_admission_{window_days}d"
    return rule


DEFAULT_RULES: tuple[InterventionRule, ...] = (
    high_baseline_risk_rule,
)
