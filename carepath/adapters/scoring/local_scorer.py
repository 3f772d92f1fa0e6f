"""In-process risk scorer.

Scores a snapshot with the weighted baseline formula instead of calling the
remote service. Selected with ``CP_SCORER_BACKEND=local`` for development and
for environments without a prediction service.
"""

from carepath.domain.clinical_record import Patient
from carepath.domain.ports import RiskScorerPort
from carepath.domain.risk import baseline_risk_score


class LocalRiskScorer(RiskScorerPort):
    """Baseline scorer: admissions and chronic conditions, weighted and clamped."""

    async def predict_readmission_risk(self, patient: Patient) -> float:
        return baseline_risk_score(
            patient.previous_admissions,
            len(patient.chronic_conditions),
        )
