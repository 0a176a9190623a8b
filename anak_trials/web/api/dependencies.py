"""Dependency injection for the web API.

Route handlers receive the storage adapter, settings, anonymizer and the
template renderer through FastAPI's ``Depends`` instead of module-level
globals, so tests can swap any of them via ``app.dependency_overrides``.
"""

import logging
from functools import lru_cache
from pathlib import Path
from typing import Annotated

from fastapi import Depends
from fastapi.templating import Jinja2Templates

from anak_trials.adapters.storage import DuckDBAdapter, PostgreSQLAdapter
from anak_trials.domain.ports import ClinicalStoragePort
from anak_trials.domain.services.anonymizer import Anonymizer
from anak_trials.infrastructure.settings import Settings

logger = logging.getLogger(__name__)

TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates"

templates = Jinja2Templates(directory=str(TEMPLATES_DIR))


@lru_cache()
def get_settings() -> Settings:
    return Settings()


@lru_cache()
def get_storage_adapter() -> ClinicalStoragePort:
    """Get storage adapter instance (cached).

    The adapter owns the process-wide connection (DuckDB) or pool
    (PostgreSQL); it is closed by the application lifespan on shutdown.

    Returns:
        ClinicalStoragePort: Configured storage adapter instance

    Raises:
        ValueError: If database type is unsupported
    """
    settings = get_settings()
    db_config = settings.db_config

    if db_config.db_type == "duckdb":
        logger.debug(f"Creating DuckDB adapter with path: {db_config.db_path or ':memory:'}")
        adapter: ClinicalStoragePort = DuckDBAdapter(db_config=db_config)
    elif db_config.db_type == "postgresql":
        logger.debug("Creating PostgreSQL adapter")
        adapter = PostgreSQLAdapter(db_config=db_config)
    else:
        raise ValueError(f"Unsupported database type: {db_config.db_type}")

    if settings.init_schema:
        result = adapter.initialize_schema()
        if result.is_failure():
            logger.warning(f"Schema initialization failed: {result.error}")

    return adapter


@lru_cache()
def get_anonymizer() -> Anonymizer:
    settings = get_settings()
    return Anonymizer(mode=settings.anon_mode, cost=settings.anon_cost, secret=settings.anon_secret)


# Type aliases for dependency injection
StorageDep = Annotated[ClinicalStoragePort, Depends(get_storage_adapter)]
SettingsDep = Annotated[Settings, Depends(get_settings)]
AnonymizerDep = Annotated[Anonymizer, Depends(get_anonymizer)]
