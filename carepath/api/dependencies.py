"""Dependency injection for the CarePath API.

This module provides dependency injection functions for FastAPI, following
Hexagonal Architecture principles: routes receive a ReadmissionService built
from the configured adapters and never construct clients themselves.
"""

import logging
from functools import lru_cache
from typing import Annotated

from fastapi import Depends

from carepath.domain.interventions import InterventionEngine
from carepath.domain.ports import HistoryStorePort, RiskScorerPort
from carepath.domain.services import ReadmissionService
from carepath.main import create_history_store, create_risk_scorer

logger = logging.getLogger(__name__)


@lru_cache()
def get_history_store() -> HistoryStorePort:
    """Get the history store adapter (cached, one gRPC client per process)."""
    logger.debug("Creating history store adapter")
    return create_history_store()


@lru_cache()
def get_risk_scorer() -> RiskScorerPort:
    """Get the risk scorer (cached, one HTTP client per process)."""
    logger.debug("Creating risk scorer")
    return create_risk_scorer()


@lru_cache()
def get_intervention_engine() -> InterventionEngine:
    return InterventionEngine()


def get_service(
    store: Annotated[HistoryStorePort, Depends(get_history_store)],
    engine: Annotated[InterventionEngine, Depends(get_intervention_engine)],
) -> ReadmissionService:
    # Only /api/risk resolves the scorer; history routes work without scorer config
    return ReadmissionService(store=store, engine=engine, scorer_factory=get_risk_scorer)


# Type aliases for dependency injection
StoreDep = Annotated[HistoryStorePort, Depends(get_history_store)]
ServiceDep = Annotated[ReadmissionService, Depends(get_service)]
