"""Health check endpoint."""

import logging
import time

from fastapi import APIRouter
from starlette.concurrency import run_in_threadpool

from carepath.api.dependencies import StoreDep
from carepath.api.models import HealthResponse, StoreHealth
from carepath.domain.ports import HistoryStorePort, StoreError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["health"])


async def check_store_health(store: HistoryStorePort) -> StoreHealth:
    """Check that the graph store answers.

    Returns:
        StoreHealth: ``connected`` with the check latency, or ``disconnected``
    """
    start_time = time.time()
    try:
        await run_in_threadpool(store.check_connection)
    except StoreError as e:
        logger.warning(f"Graph store health check failed: {str(e)}")
        return StoreHealth(status="disconnected")

    response_time = (time.time() - start_time) * 1000
    return StoreHealth(status="connected", response_time_ms=round(response_time, 2))


@router.get("/health", response_model=HealthResponse)
async def health_check(store: StoreDep) -> HealthResponse:
    """Report service health including graph store connectivity."""
    store_health = await check_store_health(store)
    overall_status = "healthy" if store_health.status == "connected" else "unhealthy"
    return HealthResponse(status=overall_status, store=store_health)
