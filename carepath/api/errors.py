"""Mapping of core errors to HTTP responses.

The core raises ValidationError, StoreError, DecodeError and ScoringError and
leaves presentation to transport; this module is where that presentation lives.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from carepath.api.models import ErrorResponse
from carepath.domain.ports import (
    CarePathError,
    DecodeError,
    ScoringError,
    StoreError,
    ValidationError,
)

logger = logging.getLogger(__name__)

# Most specific class first
STATUS_CODES: list[tuple[type[CarePathError], int, str]] = [
    (ValidationError, 400, "Bad Request"),
    (StoreError, 503, "Store Unavailable"),
    (DecodeError, 502, "Bad Store Response"),
    (ScoringError, 502, "Scorer Unavailable"),
]


def status_for(exc: CarePathError) -> tuple[int, str]:
    for error_type, status_code, label in STATUS_CODES:
        if isinstance(exc, error_type):
            return status_code, label
    return 500, "Internal server error"


async def carepath_error_handler(request: Request, exc: CarePathError) -> JSONResponse:
    """Translate a core error into a JSON error response."""
    status_code, label = status_for(exc)

    if status_code >= 500:
        logger.error(f"{request.method} {request.url.path} - {type(exc).__name__}: {str(exc)}")
    else:
        logger.warning(f"{request.method} {request.url.path} - {type(exc).__name__}: {str(exc)}")

    body = ErrorResponse(error=label, detail=str(exc), operation=exc.operation, details=exc.details)
    return JSONResponse(status_code=status_code, content=body.model_dump(mode="json"))


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(CarePathError, carepath_error_handler)
