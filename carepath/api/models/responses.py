"""Response models for patient and risk endpoints."""

from typing import Any, Optional

from pydantic import BaseModel, Field

from carepath.domain.risk import RISK_SCORE_MAX, RISK_SCORE_MIN


class PatientCreatedResponse(BaseModel):
    """Returned when a patient snapshot has been stored."""
    status: str = "created"
    id: str


class RiskAssessmentResponse(BaseModel):
    """Readmission risk for a submitted snapshot.

    Attributes:
        patient_id: Identifier of the scored snapshot
        risk_score: Score in [min_score, max_score]
    """
    patient_id: str
    risk_score: float
    min_score: float = RISK_SCORE_MIN
    max_score: float = RISK_SCORE_MAX


class ErrorResponse(BaseModel):
    """Error body produced by the exception handlers."""
    error: str
    detail: str
    operation: Optional[str] = None
    details: dict[str, Any] = Field(default_factory=dict)
