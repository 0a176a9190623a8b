"""Configuration Manager for Secure Credential Handling.

This module loads database connection settings from the environment (or a
JSON file) into a validated Pydantic model. ``config.env`` and ``.env`` in
the working directory are loaded with python-dotenv before the environment
is read.

Security Impact:
    - Passwords are stored as SecretStr and never logged
    - Configuration is validated before use (fail-fast)
    - Unknown database types are rejected at startup

Environment Variables:
    - DATABASE_TYPE: duckdb (default) or postgresql
    - DATABASE_PATH: DuckDB database file (default: in-memory)
    - DATABASE_HOST / DATABASE_PORT: PostgreSQL server
    - DATABASE: Database name
    - DATABASE_USER / DATABASE_PASSWORD: Credentials (password is secret)
    - DATABASE_SOCKET: Unix socket directory, takes precedence over host
    - DATABASE_SSL_MODE: SSL mode (require, prefer, disable)
"""

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field, SecretStr, field_validator, model_validator

logger = logging.getLogger(__name__)

ENV_FILES = ("config.env", ".env")


class DatabaseConfig(BaseModel):
    """Database configuration model with secure credential handling.

    Parameters:
        db_type: Type of database ('duckdb' or 'postgresql')
        db_path: Path to database file (DuckDB only)
        host: Database host (PostgreSQL)
        port: Database port (PostgreSQL)
        database: Database name
        username: Database username
        password: Database password (SecretStr - never logged)
        socket_path: Unix socket directory (PostgreSQL), used instead of host
        ssl_mode: SSL mode for network connections
        pool_size: Connection pool size
        max_overflow: Maximum connection pool overflow
    """

    db_type: str = Field("duckdb", description="Database type (duckdb, postgresql)")
    db_path: Optional[str] = Field(None, description="Path to database file (for DuckDB)")
    host: Optional[str] = Field(None, description="Database host")
    port: Optional[int] = Field(None, description="Database port")
    database: Optional[str] = Field(None, description="Database name")
    username: Optional[str] = Field(None, description="Database username")
    password: Optional[SecretStr] = Field(None, description="Database password (secret)")
    socket_path: Optional[str] = Field(None, description="Unix socket directory")
    ssl_mode: Optional[str] = Field(None, description="SSL mode (require, prefer, disable)")
    pool_size: int = Field(default=5, ge=1, description="Connection pool size")
    max_overflow: int = Field(default=10, ge=0, description="Maximum connection pool overflow")

    @field_validator("db_type")
    @classmethod
    def validate_db_type(cls, v: str) -> str:
        """Validate database type."""
        supported_types = ["duckdb", "postgresql"]
        if v.lower() not in supported_types:
            raise ValueError(f"Unsupported database type: {v}. Supported: {supported_types}")
        return v.lower()

    @field_validator("db_path")
    @classmethod
    def validate_db_path(cls, v: Optional[str]) -> Optional[str]:
        """Validate database directory exists (if a file path is provided)."""
        if v is None or v == ":memory:":
            return v

        db_path_obj = Path(v)
        if not db_path_obj.parent.exists():
            raise ValueError(f"Database directory does not exist: {db_path_obj.parent}")

        return str(db_path_obj)

    @model_validator(mode="after")
    def require_server_settings(self) -> "DatabaseConfig":
        """PostgreSQL needs a database name and either a host or a socket."""
        if self.db_type == "postgresql":
            if not self.database:
                raise ValueError("postgresql requires a database name")
            if not (self.host or self.socket_path):
                raise ValueError("postgresql requires a host or a socket path")
        return self

    def get_connection_params(self) -> Dict[str, Any]:
        """Get keyword arguments for the PostgreSQL driver.

        Returns:
            Connection parameters. The socket directory is passed as ``host``,
            which is how libpq selects a unix-domain socket.

        Security Impact:
            - Password is retrieved from SecretStr but not logged
        """
        if self.db_type != "postgresql":
            raise ValueError(f"Database type '{self.db_type}' does not use connection parameters")

        params: Dict[str, Any] = {
            "host": self.socket_path or self.host,
            "port": self.port or 5432,
            "dbname": self.database,
        }
        if self.username:
            params["user"] = self.username
        if self.password:
            params["password"] = self.password.get_secret_value()
        if self.ssl_mode:
            params["sslmode"] = self.ssl_mode
        elif not self.socket_path:
            params["sslmode"] = "prefer"
        return params


class ConfigManager:
    """Configuration manager for database credentials and settings.

    Example Usage:
        ```python
        config = ConfigManager.from_environment()
        db_config = config.get_database_config()

        config = ConfigManager.from_file("config.json")
        db_config = config.get_database_config()
        ```
    """

    def __init__(self, config_data: Dict[str, Any]):
        self._config_data = config_data
        self._database_config: Optional[DatabaseConfig] = None

    @classmethod
    def from_environment(cls) -> 'ConfigManager':
        """Load configuration from environment variables.

        Returns:
            ConfigManager instance

        Security Impact:
            - Credentials are read from environment (never logged)
            - Values already set in the process environment win over env files
        """
        load_env_files()

        port = os.getenv("DATABASE_PORT")
        config_data = {
            "database": {
                "db_type": os.getenv("DATABASE_TYPE", "duckdb"),
                "db_path": os.getenv("DATABASE_PATH"),
                "host": os.getenv("DATABASE_HOST"),
                "port": int(port) if port else None,
                "database": os.getenv("DATABASE"),
                "username": os.getenv("DATABASE_USER"),
                "password": os.getenv("DATABASE_PASSWORD"),
                "socket_path": os.getenv("DATABASE_SOCKET"),
                "ssl_mode": os.getenv("DATABASE_SSL_MODE"),
            }
        }

        return cls(config_data)

    @classmethod
    def from_file(cls, config_path: str) -> 'ConfigManager':
        """Load configuration from a JSON file.

        Parameters:
            config_path: Path to configuration file

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

        return cls(config_data)

    def get_database_config(self) -> DatabaseConfig:
        """Get the validated database configuration."""
        if self._database_config is None:
            db_config_data = {
                key: value
                for key, value in self._config_data.get("database", {}).items()
                if value is not None
            }
            self._database_config = DatabaseConfig(**db_config_data)

        return self._database_config

    def get(self, key: str, default: Any = None) -> Any:
        """Get configuration value by dotted key, e.g. ``database.host``."""
        keys = key.split(".")
        value = self._config_data

        for k in keys:
            if isinstance(value, dict):
                value = value.get(k)
            else:
                return default

        return value if value is not None else default


def load_env_files(base_dir: Optional[Path] = None) -> None:
    """Load ``config.env`` and ``.env`` from ``base_dir`` (default: cwd)."""
    base = base_dir or Path.cwd()
    for name in ENV_FILES:
        env_path = base / name
        if env_path.exists():
            load_dotenv(env_path, override=False)
            logger.debug(f"Loaded environment variables from {env_path}")


def get_database_config() -> DatabaseConfig:
    """Convenience function to get database configuration from environment.

    Defaults to an in-memory DuckDB database if nothing is configured.
    """
    config_manager = ConfigManager.from_environment()
    return config_manager.get_database_config()
