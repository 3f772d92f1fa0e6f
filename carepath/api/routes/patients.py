"""Patient intake, history and intervention endpoints."""

import logging
from typing import Optional

from fastapi import APIRouter, Query, status

from carepath.api.dependencies import ServiceDep
from carepath.api.models import ErrorResponse, PatientCreatedResponse
from carepath.domain.clinical_record import HistoricalRecord, Patient

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["patients"])

STORE_ERRORS = {
    400: {"model": ErrorResponse},
    502: {"model": ErrorResponse},
    503: {"model": ErrorResponse},
}


@router.post(
    "/patient",
    response_model=PatientCreatedResponse,
    status_code=status.HTTP_201_CREATED,
    responses=STORE_ERRORS,
)
def submit_patient(patient: Patient, service: ServiceDep) -> PatientCreatedResponse:
    """Store a patient snapshot.

    Only the first chronic condition is recorded; a snapshot without chronic
    conditions is rejected with 400.
    """
    service.submit_patient(patient)
    return PatientCreatedResponse(id=patient.id)


@router.get("/patient", response_model=list[HistoricalRecord], responses=STORE_ERRORS)
def get_patient_history(
    service: ServiceDep,
    patient_id: Optional[str] = Query(None, alias="id", description="Patient identifier"),
) -> list[HistoricalRecord]:
    """Return the stored history for a patient (empty list if unknown)."""
    return service.fetch_history(patient_id)


@router.get("/interventions", response_model=list[str], responses=STORE_ERRORS)
def get_interventions(
    service: ServiceDep,
    patient_id: Optional[str] = Query(None, alias="id", description="Patient identifier"),
) -> list[str]:
    """Return recommended interventions derived from the patient's history."""
    return service.fetch_interventions(patient_id)
