"""PostgreSQL Storage Adapter.

This adapter implements the ClinicalStoragePort contract on PostgreSQL using
a psycopg2 connection pool.

Security Impact:
    - All statements are parameterized
    - Connection credentials are never logged
    - SSL mode defaults to 'prefer' for TCP connections

Architecture:
    - Implements ClinicalStoragePort (Hexagonal Architecture)
    - Connections are taken from the pool per operation and always returned
    - Autocommit: every port operation is a single statement
"""

import logging
from typing import Any, Optional, Sequence

from psycopg2 import pool

from anak_trials.adapters.storage import queries
from anak_trials.adapters.storage.base import SQLStorageAdapter, rows_to_dicts
from anak_trials.domain.ports import Result, Row, StorageError
from anak_trials.infrastructure.config_manager import DatabaseConfig

logger = logging.getLogger(__name__)

SCHEMA_STATEMENTS = (
    """
    CREATE TABLE IF NOT EXISTS anak (
        nisn VARCHAR(20) PRIMARY KEY,
        nama VARCHAR(255) NOT NULL,
        tanggal_lahir DATE,
        tahun_masuk INTEGER
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS medicine (
        kode VARCHAR(50) PRIMARY KEY,
        nama VARCHAR(255) NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS clinical_trials (
        id SERIAL PRIMARY KEY,
        nisn VARCHAR(20) NOT NULL REFERENCES anak(nisn),
        medicine_kode VARCHAR(50),
        heart_rate_24 INTEGER,
        blood_pressure_24 VARCHAR(32),
        respirate_24 INTEGER,
        temperature_24 DOUBLE PRECISION,
        pain_score_24 INTEGER,
        pain_location_24 VARCHAR(255),
        pain_quality_24 VARCHAR(255),
        pain_quantity_24 VARCHAR(255),
        pain_frequency_24 VARCHAR(255),
        pain_situation_24 VARCHAR(255),
        pain_factors_24 VARCHAR(255),
        other_symptoms_24 TEXT
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_clinical_trials_nisn ON clinical_trials(nisn)",
)


def to_pyformat(query: str) -> str:
    """Rewrite ``?`` placeholders into psycopg2's ``%s`` style."""
    return query.replace(queries.PLACEHOLDER, "%s")


class PostgreSQLAdapter(SQLStorageAdapter):
    """PostgreSQL implementation of ClinicalStoragePort.

    Parameters:
        db_config: DatabaseConfig with db_type 'postgresql'

    Example Usage:
        ```python
        from anak_trials.infrastructure.config_manager import get_database_config

        adapter = PostgreSQLAdapter(db_config=get_database_config())
        result = adapter.get_child("1234567890")
        ```
    """

    db_type = "postgresql"

    def __init__(self, db_config: DatabaseConfig):
        """Initialize PostgreSQL adapter.

        Security Impact:
            - Connection credentials are validated but never logged
            - The pool is created lazily (on first operation)
        """
        if db_config.db_type != "postgresql":
            raise StorageError(
                f"DatabaseConfig type '{db_config.db_type}' does not match PostgreSQL adapter",
                operation="__init__"
            )

        self.connection_params = db_config.get_connection_params()
        self.pool_size = db_config.pool_size
        self.max_overflow = db_config.max_overflow
        self._connection_pool: Optional[pool.ThreadedConnectionPool] = None

    def _get_connection_pool(self) -> pool.ThreadedConnectionPool:
        """Get or create PostgreSQL connection pool."""
        if self._connection_pool is None:
            try:
                self._connection_pool = pool.ThreadedConnectionPool(
                    minconn=1,
                    maxconn=self.pool_size + self.max_overflow,
                    **self.connection_params
                )
                logger.info("Created PostgreSQL connection pool")
            except Exception as e:
                raise StorageError(
                    f"Failed to create PostgreSQL connection pool: {str(e)}",
                    operation="connect",
                    details={"host": self.connection_params.get("host", "N/A")}
                )
        return self._connection_pool

    def _get_connection(self):
        """Get a connection from the pool.

        Raises:
            StorageError: If connection cannot be obtained
        """
        try:
            conn = self._get_connection_pool().getconn()
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(
                f"Failed to get connection from pool: {str(e)}",
                operation="get_connection"
            )
        conn.autocommit = True
        return conn

    def _return_connection(self, conn) -> None:
        try:
            self._get_connection_pool().putconn(conn)
        except Exception as e:
            logger.warning(f"Error returning connection to pool: {str(e)}")

    def _execute(self, query: str, params: Sequence[Any] = (), fetch: bool = True) -> Optional[list[Row]]:
        conn = self._get_connection()
        try:
            with conn.cursor() as cursor:
                cursor.execute(to_pyformat(query), list(params))
                if not fetch:
                    return None
                return rows_to_dicts(cursor.description, cursor.fetchall())
        finally:
            self._return_connection(conn)

    def initialize_schema(self) -> Result[None]:
        """Create the anak, medicine and clinical_trials tables if absent."""
        try:
            for statement in SCHEMA_STATEMENTS:
                self._execute(statement, fetch=False)
            logger.info("Database schema initialized successfully")
            return Result.success_result(None)
        except Exception as e:
            error_msg = f"Failed to initialize schema: {str(e)}"
            logger.error(error_msg, exc_info=True)
            return Result.failure_result(
                StorageError(error_msg, operation="initialize_schema"),
                error_type="StorageError"
            )

    def close(self) -> None:
        """Close storage connection pool and release resources."""
        if self._connection_pool is not None:
            try:
                self._connection_pool.closeall()
                self._connection_pool = None
                logger.info("Closed PostgreSQL connection pool")
            except Exception as e:
                logger.warning(f"Error closing connection pool: {str(e)}")
