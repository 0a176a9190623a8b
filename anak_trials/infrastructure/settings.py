"""Application Settings and Configuration.

This module provides application-wide settings that combine the database
configuration from the configuration manager with display, anonymization
and logging options read from the environment.

Security Impact:
    - Settings are loaded from secure configuration sources
    - The anonymization secret is never logged
    - Defaults are provided for development convenience
"""

import os
from typing import Optional

from anak_trials.infrastructure.config_manager import ConfigManager, DatabaseConfig, load_env_files

# Application metadata
APP_NAME = "anak-trials"
APP_VERSION = "1.0.0"

# Locales of the two views; DISPLAY_LOCALE overrides both
DEFAULT_LIST_LOCALE = "id_ID"
DEFAULT_DETAIL_LOCALE = "en_US"

DEFAULT_ANON_MODE = "salted"
DEFAULT_ANON_COST = 8
# Token length on the compact public export
DEFAULT_ANON_PREFIX_LENGTH = 10


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() == "true"


class Settings:
    """Application settings loaded from configuration manager and environment.

    Security Impact:
        - Database credentials are managed securely via DatabaseConfig
        - Sensitive values are never exposed in logs
    """

    def __init__(self, config_manager: Optional[ConfigManager] = None):
        """Initialize settings from configuration manager and environment."""
        load_env_files()

        self._config_manager = config_manager
        self._db_config: Optional[DatabaseConfig] = None

        self.app_name = os.getenv("APP_NAME", APP_NAME)
        self.init_schema = _env_bool("DATABASE_INIT_SCHEMA", "true")

        # Display locales
        canonical_locale = os.getenv("DISPLAY_LOCALE")
        self.list_locale = canonical_locale or os.getenv("LIST_LOCALE", DEFAULT_LIST_LOCALE)
        self.detail_locale = canonical_locale or os.getenv("DETAIL_LOCALE", DEFAULT_DETAIL_LOCALE)

        # Anonymization
        self.anon_mode = os.getenv("ANON_MODE", DEFAULT_ANON_MODE).lower()
        self.anon_cost = int(os.getenv("ANON_COST", str(DEFAULT_ANON_COST)))
        self.anon_secret = os.getenv("ANON_SECRET")
        self.anon_prefix_length = int(os.getenv("ANON_PREFIX_LENGTH", str(DEFAULT_ANON_PREFIX_LENGTH)))
        if self.anon_prefix_length < 1:
            raise ValueError(f"ANON_PREFIX_LENGTH must be at least 1, got {self.anon_prefix_length}")

        # Logging
        self.log_level = os.getenv("LOG_LEVEL", "INFO")
        self.json_logs = _env_bool("JSON_LOGS", "false")

    @property
    def config_manager(self) -> ConfigManager:
        if self._config_manager is None:
            self._config_manager = ConfigManager.from_environment()
        return self._config_manager

    @property
    def db_config(self) -> DatabaseConfig:
        """Get database configuration.

        Returns:
            DatabaseConfig instance loaded lazily from the configuration manager
        """
        if self._db_config is None:
            self._db_config = self.config_manager.get_database_config()
        return self._db_config
