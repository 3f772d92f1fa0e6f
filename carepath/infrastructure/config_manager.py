"""Configuration Manager for Secure Credential Handling.

This module provides a secure configuration manager for the graph store and risk
scorer connection settings, including their API keys.

Security Impact:
    - Credentials are never logged or exposed in error messages
    - Supports environment variables, an optional .env file, and JSON config files
    - Validates configuration before use
    - Prevents credential leakage in stack traces (SecretStr)

Architecture:
    - Follows Hexagonal Architecture: Infrastructure layer isolated from domain
    - Type-safe configuration using Pydantic models
    - Fail-fast validation prevents runtime errors
"""

import json
import os
import logging
from pathlib import Path
from typing import Optional, Dict, Any
from enum import Enum

from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator, SecretStr

logger = logging.getLogger(__name__)


class ScorerBackend(str, Enum):
    """Enumeration of supported risk scorer backends."""
    HTTP = "http"
    LOCAL = "local"


class GraphStoreConfig(BaseModel):
    """Graph store (Dgraph) connection settings.

    Parameters:
        host: Dgraph Alpha gRPC host
        port: Dgraph Alpha gRPC port
        timeout_seconds: Per-call deadline for queries, mutations and commits
        api_key: Dgraph Cloud API key (SecretStr - never logged)
        cloud_endpoint: Dgraph Cloud GraphQL endpoint (used with api_key)
    """

    host: str = Field(default="localhost", description="Dgraph Alpha host")
    port: int = Field(default=9080, ge=1, le=65535, description="Dgraph Alpha gRPC port")
    timeout_seconds: Optional[float] = Field(default=10.0, gt=0, description="Per-call timeout")
    api_key: Optional[SecretStr] = Field(None, description="Dgraph Cloud API key (secret)")
    cloud_endpoint: Optional[str] = Field(None, description="Dgraph Cloud endpoint")

    @field_validator("host")
    @classmethod
    def validate_host(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("Graph store host cannot be empty")
        return v.strip()

    @property
    def address(self) -> str:
        return f"{self.host}:{self.port}"


class ScorerConfig(BaseModel):
    """Risk scorer connection settings.

    Parameters:
        backend: ``http`` for the remote scorer, ``local`` for the in-process baseline
        base_url: Scorer base URL (required for the http backend)
        predict_path: Prediction endpoint path
        timeout_seconds: Request timeout
        api_key: Bearer token for the scorer (SecretStr - never logged)
    """

    backend: ScorerBackend = Field(default=ScorerBackend.HTTP)
    base_url: Optional[str] = Field(None, description="Scorer base URL")
    predict_path: str = Field(default="/predict", description="Prediction endpoint path")
    timeout_seconds: float = Field(default=10.0, gt=0, description="Request timeout")
    api_key: Optional[SecretStr] = Field(None, description="Scorer API key (secret)")

    @field_validator("backend", mode="before")
    @classmethod
    def normalize_backend(cls, v):
        if isinstance(v, str):
            return v.strip().lower()
        return v

    @field_validator("base_url")
    @classmethod
    def validate_base_url(cls, v: Optional[str]) -> Optional[str]:
        if v is None or not v.strip():
            return None
        v = v.strip()
        if not v.startswith(("http://", "https://")):
            raise ValueError(f"Scorer base URL must start with http:// or https://. Got: {v}")
        return v.rstrip("/")

    @field_validator("predict_path")
    @classmethod
    def validate_predict_path(cls, v: str) -> str:
        return v if v.startswith("/") else f"/{v}"


def _optional_float(value: Optional[str]) -> Optional[float]:
    return float(value) if value else None


class ConfigManager:
    """Secure configuration manager for store and scorer settings.

    Example Usage:
        ```python
        # Load from environment variables
        config = ConfigManager.from_environment()
        graph_config = config.get_graph_store_config()

        # Load from file
        config = ConfigManager.from_file("carepath.json")
        scorer_config = config.get_scorer_config()
        ```
    """

    def __init__(self, config_data: Dict[str, Any]):
        """Initialize configuration manager.

        Parameters:
            config_data: Configuration dictionary with ``graph`` and ``scorer`` sections
        """
        self._config_data = config_data
        self._graph_config: Optional[GraphStoreConfig] = None
        self._scorer_config: Optional[ScorerConfig] = None

    @classmethod
    def from_environment(cls) -> 'ConfigManager':
        """Load configuration from environment variables.

        Environment Variables:
            - CP_GRAPH_HOST: Dgraph Alpha host
            - CP_GRAPH_PORT: Dgraph Alpha gRPC port
            - CP_GRAPH_TIMEOUT: Per-call timeout in seconds
            - CP_GRAPH_API_KEY: Dgraph Cloud API key (secret)
            - CP_GRAPH_CLOUD_ENDPOINT: Dgraph Cloud endpoint
            - CP_SCORER_BACKEND: http or local
            - CP_SCORER_URL: Scorer base URL
            - CP_SCORER_PREDICT_PATH: Prediction endpoint path
            - CP_SCORER_TIMEOUT: Scorer request timeout in seconds
            - CP_SCORER_API_KEY: Scorer bearer token (secret)

        Returns:
            ConfigManager instance

        Security Impact:
            - Credentials are read from environment (never logged)
            - A .env file in the working directory is loaded if present
        """
        env_path = Path.cwd() / ".env"
        if env_path.exists():
            load_dotenv(env_path)
            logger.debug(f"Loaded environment variables from {env_path}")

        config_data = {
            "graph": {
                "host": os.getenv("CP_GRAPH_HOST", "localhost"),
                "port": int(os.getenv("CP_GRAPH_PORT", "9080")),
                "timeout_seconds": _optional_float(os.getenv("CP_GRAPH_TIMEOUT", "10")),
                "api_key": os.getenv("CP_GRAPH_API_KEY"),
                "cloud_endpoint": os.getenv("CP_GRAPH_CLOUD_ENDPOINT"),
            },
            "scorer": {
                "backend": os.getenv("CP_SCORER_BACKEND", "http"),
                "base_url": os.getenv("CP_SCORER_URL"),
                "predict_path": os.getenv("CP_SCORER_PREDICT_PATH", "/predict"),
                "timeout_seconds": float(os.getenv("CP_SCORER_TIMEOUT", "10")),
                "api_key": os.getenv("CP_SCORER_API_KEY"),
            },
        }

        return cls(config_data)

    @classmethod
    def from_file(cls, config_path: str) -> 'ConfigManager':
        """Load configuration from a JSON file.

        Parameters:
            config_path: Path to configuration file

        Returns:
            ConfigManager instance

        Raises:
            FileNotFoundError: If config file doesn't exist
            ValueError: If config file is invalid
        """
        config_file = Path(config_path)
        if not config_file.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        stat_info = config_file.stat()
        if stat_info.st_mode & 0o077 != 0:
            logger.warning(
                f"Configuration file has overly permissive permissions: {config_path}. "
                "Consider setting to 600 for credential files."
            )

        try:
            with open(config_file, 'r') as f:
                config_data = json.load(f)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON in configuration file: {str(e)}")

        if not isinstance(config_data, dict):
            raise ValueError("Configuration file must contain a JSON object")

        return cls(config_data)

    def get_graph_store_config(self) -> GraphStoreConfig:
        """Get graph store configuration (validated, cached)."""
        if self._graph_config is None:
            self._graph_config = GraphStoreConfig(**self._section("graph"))
        return self._graph_config

    def get_scorer_config(self) -> ScorerConfig:
        """Get risk scorer configuration (validated, cached).

        Raises:
            ValueError: If the http backend is selected without a base URL
        """
        if self._scorer_config is None:
            scorer_config = ScorerConfig(**self._section("scorer"))
            if scorer_config.backend == ScorerBackend.HTTP and not scorer_config.base_url:
                raise ValueError("CP_SCORER_URL is required when the http scorer backend is selected")
            self._scorer_config = scorer_config
        return self._scorer_config

    def _section(self, name: str) -> Dict[str, Any]:
        # Drop unset values so model defaults apply
        section = self._config_data.get(name) or {}
        return {key: value for key, value in section.items() if value is not None}

    def get(self, key: str, default: Any = None) -> Any:
        """Get configuration value by key.

        Parameters:
            key: Configuration key (supports dot notation, e.g., "graph.host")
            default: Default value if key not found
        """
        keys = key.split(".")
        value = self._config_data

        for k in keys:
            if isinstance(value, dict):
                value = value.get(k)
            else:
                return default

        return value if value is not None else default
