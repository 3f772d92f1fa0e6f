"""Composition root for CarePath.

Builds the long-lived client handles (Dgraph gRPC client, scorer HTTP client)
once, from configuration, and injects them into the adapters and the
ReadmissionService. Nothing in the domain layer reaches for global clients.

Security Impact:
    - API keys are unwrapped from SecretStr only at client construction
    - Hosts are logged, credentials are not
"""

import logging
from typing import Any, Optional

import pydgraph

from carepath.adapters.graph import DgraphHistoryAdapter
from carepath.adapters.scoring import HttpRiskScorer, LocalRiskScorer, create_scorer_client
from carepath.domain.interventions import InterventionEngine
from carepath.domain.ports import HistoryStorePort, RiskScorerPort
from carepath.domain.services import ReadmissionService
from carepath.infrastructure.config_manager import GraphStoreConfig, ScorerBackend, ScorerConfig
from carepath.infrastructure.settings import settings

logger = logging.getLogger(__name__)


def create_graph_client(config: GraphStoreConfig) -> Any:
    """Create a pydgraph client for the configured Dgraph Alpha.

    Returns:
        pydgraph.DgraphClient: Client sharing one gRPC stub
    """
    if config.api_key and config.cloud_endpoint:
        logger.info(f"Connecting to Dgraph Cloud endpoint: {config.cloud_endpoint}")
        stub = pydgraph.DgraphClientStub.from_cloud(
            config.cloud_endpoint,
            config.api_key.get_secret_value(),
        )
    else:
        logger.info(f"Connecting to Dgraph Alpha at {config.address}")
        stub = pydgraph.DgraphClientStub(config.address)
    return pydgraph.DgraphClient(stub)


def create_history_store(config: Optional[GraphStoreConfig] = None) -> HistoryStorePort:
    """Create the history store adapter from configuration."""
    config = config or settings.graph_config
    client = create_graph_client(config)
    return DgraphHistoryAdapter(client=client, timeout=config.timeout_seconds)


def create_risk_scorer(config: Optional[ScorerConfig] = None) -> RiskScorerPort:
    """Create the risk scorer selected by configuration.

    Raises:
        ValueError: If the scorer backend is unsupported
    """
    config = config or settings.scorer_config

    if config.backend == ScorerBackend.LOCAL:
        logger.info("Using in-process baseline risk scorer")
        return LocalRiskScorer()
    elif config.backend == ScorerBackend.HTTP:
        logger.info(f"Using HTTP risk scorer at {config.base_url}")
        client = create_scorer_client(
            base_url=config.base_url,
            timeout=config.timeout_seconds,
            api_key=config.api_key.get_secret_value() if config.api_key else None,
        )
        return HttpRiskScorer(client, predict_path=config.predict_path)
    else:
        raise ValueError(f"Unsupported scorer backend: {config.backend}")


def create_service(
    store: Optional[HistoryStorePort] = None,
    scorer: Optional[RiskScorerPort] = None,
    engine: Optional[InterventionEngine] = None,
) -> ReadmissionService:
    """Create a ReadmissionService, building any collaborator not supplied.

    The risk scorer is built on first use, so a missing scorer configuration
    only affects risk assessment.
    """
    return ReadmissionService(
        store=store or create_history_store(),
        scorer=scorer,
        engine=engine,
        scorer_factory=None if scorer else create_risk_scorer,
    )
