"""Domain Ports - Abstract Contracts for History Storage and Risk Scoring.

This module defines the Port interfaces (abstract contracts) that Adapters must implement,
together with the error taxonomy shared by every layer of CarePath.
Following Hexagonal Architecture, the Domain Core defines what it needs, not how it's provided.

Security Impact:
    - Ports only accept validated Patient snapshots
    - Store adapters must never interpolate caller text into query or fact syntax
    - Errors carry enough context to be mapped by transport without leaking credentials

Architecture:
    - Pure abstract interfaces with zero infrastructure dependencies
    - Adapters (Dgraph, HTTP scorer, local scorer) implement these ports
    - Domain Core is isolated from store and scorer specifics
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from carepath.domain.clinical_record import (
        Admission,
        HistoricalRecord,
        Medication,
        Patient,
    )


# ============================================================================
# Custom Exception Hierarchy
# ============================================================================

class CarePathError(Exception):
    """Base exception for all CarePath core errors.

    Attributes:
        operation: The operation that failed (store, query, score, etc.)
        details: Additional error context safe to expose to transport
    """

    def __init__(self, message: str, operation: Optional[str] = None, details: Optional[dict] = None):
        super().__init__(message)
        self.operation = operation
        self.details = details or {}


class ValidationError(CarePathError):
    """Raised when input is malformed or incomplete.

    Always detected before any external call is made.
    """
    pass


class StoreError(CarePathError):
    """Raised when the graph store is unreachable or a transaction fails.

    Covers connection refusal, timeouts, aborted transactions and commit
    failures. The transaction has already been discarded when this is raised.
    """
    pass


class DecodeError(CarePathError):
    """Raised when the store returned a payload that cannot be decoded.

    Distinct from StoreError so that callers can tell "store unreachable"
    apart from "store returned malformed data".
    """
    pass


class ScoringError(CarePathError):
    """Raised when the risk scorer is unreachable or returned an error.

    The underlying cause is chained via ``__cause__``.
    """
    pass


# ============================================================================
# Ports
# ============================================================================

class HistoryStorePort(ABC):
    """Abstract contract for patient-history persistence.

    Key Principles:
        - Append-only: writes add facts, they never rewrite admissions or medications
        - Atomic: every write commits fully or is discarded
        - Exact match: history is looked up by exact identifier equality

    Example Usage:
        ```python
        store = DgraphHistoryAdapter(client=client)
        store.store_patient_data(patient)
        for record in store.query_patient_history(patient.id):
            ...
        ```
    """

    @abstractmethod
    def store_patient_data(self, patient: Patient) -> None:
        """Persist a patient snapshot as graph facts.

        Parameters:
            patient: Validated patient snapshot

        Raises:
            ValidationError: If the snapshot has no chronic condition to record
            StoreError: If the transaction could not be committed
        """
        pass

    @abstractmethod
    def query_patient_history(self, patient_id: str) -> list[HistoricalRecord]:
        """Return the historical records stored for a patient identifier.

        Parameters:
            patient_id: Exact patient identifier

        Returns:
            list[HistoricalRecord]: Matching records, empty if the patient is unknown

        Raises:
            StoreError: If the store is unreachable or the query fails
            DecodeError: If the response payload cannot be decoded
        """
        pass

    @abstractmethod
    def record_admission(self, patient_id: str, admission: Admission) -> None:
        """Attach an admission to an existing patient's history.

        Raises:
            StoreError: If the patient does not exist or the transaction fails
        """
        pass

    @abstractmethod
    def record_medication(self, patient_id: str, medication: Medication) -> None:
        """Attach a medication to an existing patient's history.

        Raises:
            StoreError: If the patient does not exist or the transaction fails
        """
        pass

    def check_connection(self) -> None:
        """Verify the store is reachable (optional, adapter-specific).

        Raises:
            StoreError: If the store cannot be reached
        """
        return None

    def initialize_schema(self) -> None:
        """Install the store schema (optional, adapter-specific).

        Note:
            This is a default implementation that does nothing.
            Adapters backed by a schemaful store should override it.
        """
        return None


class RiskScorerPort(ABC):
    """Abstract contract for readmission-risk scoring.

    Implementations must return a score in ``[RISK_SCORE_MIN, RISK_SCORE_MAX]``
    and must not cache results: every call reflects the scorer's current state.
    """

    @abstractmethod
    async def predict_readmission_risk(self, patient: Patient) -> float:
        """Score a patient snapshot.

        Parameters:
            patient: Validated patient snapshot

        Returns:
            float: Readmission risk score within the documented range

        Raises:
            ScoringError: If the scorer is unreachable or returned an error
        """
        pass

    async def aclose(self) -> None:
        """Release scorer resources (optional)."""
        return None
