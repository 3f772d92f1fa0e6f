"""Readmission risk assessment endpoint."""

from fastapi import APIRouter

from carepath.api.dependencies import ServiceDep
from carepath.api.models import ErrorResponse, RiskAssessmentResponse
from carepath.domain.clinical_record import Patient

router = APIRouter(prefix="/api", tags=["risk"])


@router.post(
    "/risk",
    response_model=RiskAssessmentResponse,
    responses={400: {"model": ErrorResponse}, 502: {"model": ErrorResponse}},
)
async def assess_risk(patient: Patient, service: ServiceDep) -> RiskAssessmentResponse:
    """Score a patient snapshot with the configured risk scorer."""
    score = await service.assess_risk(patient)
    return RiskAssessmentResponse(patient_id=patient.id, risk_score=score)
