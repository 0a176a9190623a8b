"""Storage adapters for anak-trials.

This module contains storage adapters that implement the ClinicalStoragePort
interface on DuckDB and PostgreSQL.
"""

from anak_trials.adapters.storage.duckdb_adapter import DuckDBAdapter
from anak_trials.adapters.storage.postgresql_adapter import PostgreSQLAdapter

__all__ = ["DuckDBAdapter", "PostgreSQLAdapter"]
