"""DuckDB Storage Adapter.

This adapter implements the ClinicalStoragePort contract on DuckDB, an
in-process database. It is the default backend for development and tests
(``:memory:``) and works equally with a database file.

Security Impact:
    - All statements are parameterized
    - Connection errors are raised as StorageError without leaking paths of
      other databases or credentials

Architecture:
    - Implements ClinicalStoragePort (Hexagonal Architecture)
    - One process-wide connection, one cursor per operation, so requests
      served from FastAPI's threadpool never share a cursor
"""

import logging
import threading
from pathlib import Path
from typing import Any, Optional, Sequence

import duckdb

from anak_trials.adapters.storage.base import SQLStorageAdapter, rows_to_dicts
from anak_trials.domain.ports import Result, Row, StorageError
from anak_trials.infrastructure.config_manager import DatabaseConfig

logger = logging.getLogger(__name__)

SCHEMA_STATEMENTS = (
    """
    CREATE TABLE IF NOT EXISTS anak (
        nisn VARCHAR PRIMARY KEY,
        nama VARCHAR NOT NULL,
        tanggal_lahir DATE,
        tahun_masuk INTEGER
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS medicine (
        kode VARCHAR PRIMARY KEY,
        nama VARCHAR NOT NULL
    )
    """,
    "CREATE SEQUENCE IF NOT EXISTS clinical_trials_id_seq START 1",
    """
    CREATE TABLE IF NOT EXISTS clinical_trials (
        id INTEGER PRIMARY KEY DEFAULT nextval('clinical_trials_id_seq'),
        nisn VARCHAR NOT NULL,
        medicine_kode VARCHAR,
        heart_rate_24 INTEGER,
        blood_pressure_24 VARCHAR,
        respirate_24 INTEGER,
        temperature_24 DOUBLE,
        pain_score_24 INTEGER,
        pain_location_24 VARCHAR,
        pain_quality_24 VARCHAR,
        pain_quantity_24 VARCHAR,
        pain_frequency_24 VARCHAR,
        pain_situation_24 VARCHAR,
        pain_factors_24 VARCHAR,
        other_symptoms_24 VARCHAR
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_clinical_trials_nisn ON clinical_trials(nisn)",
)


class DuckDBAdapter(SQLStorageAdapter):
    """DuckDB implementation of ClinicalStoragePort.

    Parameters:
        db_config: DatabaseConfig from configuration manager (preferred)
        db_path: Path to DuckDB database file (or ':memory:' for in-memory)

    Example Usage:
        ```python
        adapter = DuckDBAdapter(db_path=":memory:")
        adapter.initialize_schema()
        result = adapter.list_children()
        ```
    """

    db_type = "duckdb"

    def __init__(self, db_config: Optional[DatabaseConfig] = None, db_path: Optional[str] = None):
        if db_config:
            if db_config.db_type != "duckdb":
                raise StorageError(
                    f"DatabaseConfig type '{db_config.db_type}' does not match DuckDB adapter",
                    operation="__init__"
                )
            self.db_path = db_config.db_path or ":memory:"
        else:
            self.db_path = db_path or ":memory:"

        self._connection: Optional[duckdb.DuckDBPyConnection] = None
        self._connection_lock = threading.Lock()

        if self.db_path != ":memory:":
            db_path_obj = Path(self.db_path)
            if not db_path_obj.parent.exists():
                raise StorageError(
                    f"Database directory does not exist: {db_path_obj.parent}",
                    operation="__init__"
                )

    def _get_connection(self) -> duckdb.DuckDBPyConnection:
        """Get or create the DuckDB connection.

        Raises:
            StorageError: If the database cannot be opened
        """
        with self._connection_lock:
            if self._connection is None:
                try:
                    self._connection = duckdb.connect(self.db_path)
                    logger.info(f"Connected to DuckDB database: {self.db_path}")
                except Exception as e:
                    raise StorageError(
                        f"Failed to connect to DuckDB: {str(e)}",
                        operation="connect",
                        details={"db_path": self.db_path}
                    )
            return self._connection

    def _execute(self, query: str, params: Sequence[Any] = (), fetch: bool = True) -> Optional[list[Row]]:
        cursor = self._get_connection().cursor()
        try:
            cursor.execute(query, list(params) if params else None)
            if not fetch:
                return None
            return rows_to_dicts(cursor.description, cursor.fetchall())
        finally:
            cursor.close()

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
        """Close storage connection and release resources."""
        if self._connection is not None:
            try:
                self._connection.close()
                self._connection = None
                logger.info("Closed DuckDB connection")
            except Exception as e:
                logger.warning(f"Error closing connection: {str(e)}")
