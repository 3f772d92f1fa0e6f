"""Health check models."""

from datetime import datetime, timezone
from typing import Literal

from pydantic import BaseModel, Field

from carepath import __version__


class StoreHealth(BaseModel):
    """Graph store health status model.

    Attributes:
        status: Connection status
        type: Store type
        response_time_ms: Store response time in milliseconds (optional)
    """
    status: Literal["connected", "disconnected"]
    type: str = "dgraph"
    response_time_ms: float | None = Field(None, description="Store response time in milliseconds")


class HealthResponse(BaseModel):
    """Health check response model.

    Attributes:
        status: Overall system status
        timestamp: Current timestamp
        version: Application version
        store: Graph store health information
    """
    status: Literal["healthy", "unhealthy"]
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    version: str = Field(default=__version__, description="Application version")
    store: StoreHealth
