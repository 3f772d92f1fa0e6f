"""Response models for the CarePath API."""

from carepath.api.models.health import HealthResponse, StoreHealth
from carepath.api.models.responses import ErrorResponse, PatientCreatedResponse, RiskAssessmentResponse

__all__ = [
    "ErrorResponse",
    "HealthResponse",
    "PatientCreatedResponse",
    "RiskAssessmentResponse",
    "StoreHealth",
]
