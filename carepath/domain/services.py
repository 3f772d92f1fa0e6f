"""Readmission Service - the operations CarePath offers to transport.

This module wires the history store, the intervention engine and the risk scorer
behind four operations: submit patient data, fetch patient history, fetch
interventions, and assess readmission risk. Transport layers (FastAPI, CLI) call
these and decide how errors are presented.

Architecture:
    - Collaborators are passed in explicitly (no module-level client handles)
    - Holds no mutable state beyond the injected handles; safe for concurrent use
    - Errors from ports propagate unchanged (ValidationError, StoreError,
      DecodeError, ScoringError)
"""

import logging
from typing import Callable, Optional

from carepath.domain.clinical_record import (
    Admission,
    HistoricalRecord,
    Medication,
    Patient,
)
from carepath.domain.interventions import InterventionEngine
from carepath.domain.ports import HistoryStorePort, RiskScorerPort, ValidationError

logger = logging.getLogger(__name__)


def _require_identifier(patient_id: Optional[str], operation: str) -> str:
    if patient_id is None or not patient_id.strip():
        raise ValidationError(
            "Patient identifier is required",
            operation=operation,
            details={"field": "id"},
        )
    return patient_id


class ReadmissionService:
    """Facade over the history store, intervention engine and risk scorer.

    The scorer is only needed by ``assess_risk``. Pass ``scorer_factory`` to
    build it on first use, so store and intervention operations keep working
    when no scorer is configured.

    Parameters:
        store: HistoryStorePort implementation
        scorer: RiskScorerPort implementation (optional if scorer_factory is given)
        engine: InterventionEngine (default rule set if None)
        scorer_factory: Callable returning the scorer, invoked at most once
    """

    def __init__(
        self,
        store: HistoryStorePort,
        scorer: Optional[RiskScorerPort] = None,
        engine: Optional[InterventionEngine] = None,
        scorer_factory: Optional[Callable[[], RiskScorerPort]] = None,
    ):
        self.store = store
        self._scorer = scorer
        self._scorer_factory = scorer_factory
        self.engine = engine or InterventionEngine()

    @property
    def scorer(self) -> RiskScorerPort:
        """The risk scorer, built by ``scorer_factory`` on first access.

        Raises:
            ValueError: If no scorer was supplied or the factory rejects its configuration
        """
        if self._scorer is None:
            if self._scorer_factory is None:
                raise ValueError("No risk scorer configured")
            self._scorer = self._scorer_factory()
        return self._scorer

    def submit_patient(self, patient: Patient) -> None:
        """Persist a patient snapshot (first chronic condition only)."""
        self.store.store_patient_data(patient)

    def fetch_history(self, patient_id: Optional[str]) -> list[HistoricalRecord]:
        """Return stored history; an unknown identifier yields an empty list."""
        patient_id = _require_identifier(patient_id, "fetch_history")
        return self.store.query_patient_history(patient_id)

    def fetch_interventions(self, patient_id: Optional[str]) -> list[str]:
        """Derive interventions from the patient's stored history."""
        patient_id = _require_identifier(patient_id, "fetch_interventions")
        history = self.store.query_patient_history(patient_id)
        interventions = self.engine.generate(history)
        logger.info(
            f"Generated {len(interventions)} intervention(s) from {len(history)} record(s)"
        )
        return interventions

    async def assess_risk(self, patient: Patient) -> float:
        """Score a patient snapshot with the configured scorer."""
        return await self.scorer.predict_readmission_risk(patient)

    def record_admission(self, patient_id: Optional[str], admission: Admission) -> None:
        patient_id = _require_identifier(patient_id, "record_admission")
        self.store.record_admission(patient_id, admission)

    def record_medication(self, patient_id: Optional[str], medication: Medication) -> None:
        patient_id = _require_identifier(patient_id, "record_medication")
        self.store.record_medication(patient_id, medication)
