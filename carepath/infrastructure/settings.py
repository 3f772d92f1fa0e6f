"""Application Settings and Configuration.

This module provides application-wide settings that combine configuration
from the configuration manager with application-specific defaults.

Security Impact:
    - Settings are loaded from secure configuration sources
    - Sensitive values are never logged
"""

import os
from typing import Optional

from carepath.infrastructure.config_manager import ConfigManager, GraphStoreConfig, ScorerConfig

# Application metadata
APP_NAME = "CarePath"


class Settings:
    """Application settings loaded from configuration manager and environment.

    Store and scorer configuration are loaded lazily on first access so that
    importing the application never requires a complete environment.
    """

    def __init__(self, config_manager: Optional[ConfigManager] = None):
        self._config_manager = config_manager

        self.app_name = os.getenv("CP_APP_NAME", APP_NAME)
        self.log_level = os.getenv("CP_LOG_LEVEL", "INFO")
        self.json_logs = os.getenv("CP_JSON_LOGS", "false").lower() == "true"

    @property
    def config_manager(self) -> ConfigManager:
        if self._config_manager is None:
            self._config_manager = ConfigManager.from_environment()
        return self._config_manager

    @property
    def graph_config(self) -> GraphStoreConfig:
        return self.config_manager.get_graph_store_config()

    @property
    def scorer_config(self) -> ScorerConfig:
        return self.config_manager.get_scorer_config()


# Global settings instance
settings = Settings()
