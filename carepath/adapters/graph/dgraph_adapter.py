"""Dgraph History Adapter.

This adapter provides a Dgraph implementation of the HistoryStorePort contract:
patient snapshots are written as graph facts and patient history is read back as
typed HistoricalRecord objects.

Security Impact:
    - Identifiers reach the store only as GraphQL+- query variables, never inside query text
    - Fact values are escaped N-Quad literals (see ``nquads.py``)
    - Credentials (Dgraph Cloud API keys) are handled by the client factory and never logged

Architecture:
    - Implements HistoryStorePort (Hexagonal Architecture)
    - Isolated from domain core - only depends on ports and models
    - Every write is one upsert transaction: commit or discard, never a partial write
    - Transactions are discarded on every exit path, including timeouts and cancellation
    - The pydgraph client is injected, so tests can substitute an in-memory double
"""

import json
import logging
from typing import Any, Optional

import pydgraph
from pydantic import ValidationError as PydanticValidationError

from carepath.adapters.graph.nquads import FactSet
from carepath.domain.clinical_record import (
    Admission,
    HistoricalRecord,
    Medication,
    Patient,
)
from carepath.domain.ports import (
    DecodeError,
    HistoryStorePort,
    StoreError,
    ValidationError,
)

logger = logging.getLogger(__name__)

PATIENT_TYPE = "Patient"
ADMISSION_TYPE = "Admission"
MEDICATION_TYPE = "Medication"

SCHEMA = """
name: string @index(exact) @upsert .
age: int .
condition: string .
admissions: [uid] .
medications: [uid] .
date: string .
diagnosis: string .
treatment: string .
dosage: string .

type Patient {
    name
    age
    condition
    admissions
    medications
}

type Admission {
    date
    diagnosis
    treatment
}

type Medication {
    name
    dosage
}
"""

HISTORY_QUERY = """
query history($id: string) {
    patient(func: eq(name, $id)) @filter(type(Patient)) {
        name
        age
        condition
        admissions {
            date
            diagnosis
            treatment
        }
        medications {
            name
            dosage
        }
    }
}
"""

# Upsert block: binds `p` to the node(s) carrying this identifier and
# echoes their uids so the caller can tell whether the patient exists.
PATIENT_UPSERT_QUERY = """
query patient($id: string) {
    patient(func: eq(name, $id)) @filter(type(Patient)) {
        p as uid
    }
}
"""

PATIENT_NODE = "uid(p)"
PATIENT_EXISTS = "@if(gt(len(p), 0))"


class DgraphHistoryAdapter(HistoryStorePort):
    """Dgraph implementation of HistoryStorePort.

    Writes are upserts keyed on the patient identifier, so an identifier maps to
    at most one Patient node. Each snapshot overwrites ``age`` and ``condition``
    on that node and leaves its admissions and medications untouched. The
    ``@upsert`` directive on ``name`` makes concurrent first writes for one
    identifier conflict at commit, so all but one abort with StoreError.

    Only the first chronic condition of a snapshot is written as a fact. This
    single-condition behaviour is kept for compatibility with existing stored
    data; the remaining conditions are not persisted.

    Parameters:
        client: pydgraph ``DgraphClient`` (or compatible double)
        timeout: Per-call gRPC timeout in seconds (None for no deadline)

    Example Usage:
        ```python
        from carepath.main import create_graph_client

        adapter = DgraphHistoryAdapter(client=create_graph_client(config))
        adapter.initialize_schema()
        adapter.store_patient_data(patient)
        history = adapter.query_patient_history(patient.id)
        ```
    """

    def __init__(self, client: Any, timeout: Optional[float] = None):
        self._client = client
        self._timeout = timeout

    @property
    def client(self) -> Any:
        return self._client

    def check_connection(self) -> None:
        """Ask the Dgraph Alpha for its version to check connectivity.

        Raises:
            StoreError: If the Alpha cannot be reached
        """
        try:
            self._client.check_version(timeout=self._timeout)
        except Exception as e:
            raise StoreError(
                f"Graph store is unreachable: {str(e)}",
                operation="check_connection",
            ) from e

    def initialize_schema(self) -> None:
        """Install the predicate schema and node types the queries depend on.

        Raises:
            StoreError: If the schema alteration fails
        """
        try:
            self._client.alter(pydgraph.Operation(schema=SCHEMA), timeout=self._timeout)
            logger.info("Installed Dgraph schema for patient history")
        except Exception as e:
            raise StoreError(
                f"Failed to install Dgraph schema: {str(e)}",
                operation="initialize_schema",
            ) from e

    # ------------------------------------------------------------------
    # Write path
    # ------------------------------------------------------------------

    def store_patient_data(self, patient: Patient) -> None:
        """Persist a patient snapshot as graph facts.

        Facts written: identifier (``name``), ``age`` and the *first* chronic
        condition (``condition``).

        Parameters:
            patient: Validated patient snapshot

        Raises:
            ValidationError: If the snapshot has no chronic condition (no store call is made)
            StoreError: If the transaction fails; nothing is committed
        """
        condition = patient.primary_condition
        if condition is None:
            raise ValidationError(
                "Patient snapshot must list at least one chronic condition",
                operation="store_patient_data",
                details={"field": "chronicConditions"},
            )

        facts = (
            FactSet()
            .string(PATIENT_NODE, "name", patient.id)
            .string(PATIENT_NODE, "dgraph.type", PATIENT_TYPE)
            .integer(PATIENT_NODE, "age", patient.age)
            .string(PATIENT_NODE, "condition", condition)
        )

        self._upsert(patient.id, facts, operation="store_patient_data")
        logger.info(f"Stored patient snapshot ({len(facts)} facts)")

    def record_admission(self, patient_id: str, admission: Admission) -> None:
        """Attach an admission node to an existing patient.

        Raises:
            StoreError: If no patient has this identifier or the transaction fails
        """
        facts = (
            FactSet()
            .edge(PATIENT_NODE, "admissions", "_:admission")
            .string("_:admission", "dgraph.type", ADMISSION_TYPE)
            .string("_:admission", "date", admission.date.isoformat())
            .string("_:admission", "diagnosis", admission.diagnosis)
            .string("_:admission", "treatment", admission.treatment)
        )
        self._upsert(patient_id, facts, operation="record_admission", require_existing=True)
        logger.info("Recorded admission")

    def record_medication(self, patient_id: str, medication: Medication) -> None:
        """Attach a medication node to an existing patient.

        Raises:
            StoreError: If no patient has this identifier or the transaction fails
        """
        facts = (
            FactSet()
            .edge(PATIENT_NODE, "medications", "_:medication")
            .string("_:medication", "dgraph.type", MEDICATION_TYPE)
            .string("_:medication", "name", medication.name)
            .string("_:medication", "dosage", medication.dosage)
        )
        self._upsert(patient_id, facts, operation="record_medication", require_existing=True)
        logger.info("Recorded medication")

    def _upsert(
        self,
        patient_id: str,
        facts: FactSet,
        operation: str,
        require_existing: bool = False,
    ) -> None:
        """Run one upsert transaction keyed on ``patient_id`` and commit it.

        The transaction is always discarded on exit; after a successful commit
        the discard is a no-op.

        Raises:
            StoreError: On any store failure, or when ``require_existing`` is set
                        and the patient does not exist
        """
        txn = self._client.txn()
        try:
            try:
                mutation = txn.create_mutation(
                    set_nquads=facts.to_nquads(),
                    cond=PATIENT_EXISTS if require_existing else None,
                )
                request = txn.create_request(
                    query=PATIENT_UPSERT_QUERY,
                    variables={"$id": patient_id},
                    mutations=[mutation],
                )
                response = txn.do_request(request, timeout=self._timeout)
            except Exception as e:
                raise StoreError(
                    f"Graph store mutation failed: {str(e)}",
                    operation=operation,
                ) from e

            if require_existing and not self._patient_matched(response):
                raise StoreError(
                    "Patient not found",
                    operation=operation,
                    details={"reason": "patient_not_found"},
                )

            try:
                txn.commit(timeout=self._timeout)
            except Exception as e:
                raise StoreError(
                    f"Graph store commit failed: {str(e)}",
                    operation=operation,
                ) from e
        finally:
            self._discard(txn, operation)

    @staticmethod
    def _patient_matched(response: Any) -> bool:
        try:
            payload = json.loads(response.json or b"{}")
        except (TypeError, ValueError):
            return False
        matches = payload.get("patient") if isinstance(payload, dict) else None
        return bool(matches)

    # ------------------------------------------------------------------
    # Read path
    # ------------------------------------------------------------------

    def query_patient_history(self, patient_id: str) -> list[HistoricalRecord]:
        """Return the historical records stored for a patient identifier.

        Parameters:
            patient_id: Exact patient identifier (passed as the ``$id`` variable)

        Returns:
            list[HistoricalRecord]: Matching records; empty when the patient is unknown

        Raises:
            StoreError: If the store is unreachable or the query fails
            DecodeError: If the response payload cannot be decoded
        """
        txn = self._client.txn(read_only=True)
        try:
            response = txn.query(
                HISTORY_QUERY,
                variables={"$id": patient_id},
                timeout=self._timeout,
            )
        except Exception as e:
            raise StoreError(
                f"Graph store query failed: {str(e)}",
                operation="query_patient_history",
            ) from e
        finally:
            self._discard(txn, "query_patient_history")

        records = decode_history(response.json)
        logger.debug(f"Fetched {len(records)} historical record(s)")
        return records

    def _discard(self, txn: Any, operation: str) -> None:
        try:
            txn.discard(timeout=self._timeout)
        except Exception as e:
            # The store expires abandoned transactions on its own
            logger.warning(f"Failed to discard transaction during {operation}: {str(e)}")


def decode_history(payload: Any) -> list[HistoricalRecord]:
    """Decode a history query response body into HistoricalRecord objects.

    Parameters:
        payload: Raw JSON response (bytes or str) of ``HISTORY_QUERY``

    Returns:
        list[HistoricalRecord]: Decoded records, empty if the patient block is empty

    Raises:
        DecodeError: If the body is not JSON or does not fit the data model
    """
    try:
        data = json.loads(payload)
    except (TypeError, ValueError) as e:
        raise DecodeError(
            f"Graph store returned an unparsable payload: {str(e)}",
            operation="query_patient_history",
        ) from e

    if not isinstance(data, dict):
        raise DecodeError(
            f"Expected a JSON object, got {type(data).__name__}",
            operation="query_patient_history",
        )

    entries = data.get("patient")
    if entries is None:
        return []
    if not isinstance(entries, list):
        raise DecodeError(
            "Expected 'patient' to be a list",
            operation="query_patient_history",
        )

    try:
        return [HistoricalRecord.model_validate(entry) for entry in entries]
    except PydanticValidationError as e:
        raise DecodeError(
            f"Graph store payload does not match the history schema: {e.error_count()} error(s)",
            operation="query_patient_history",
            details={"errors": e.errors(include_url=False, include_context=False, include_input=False)},
        ) from e
