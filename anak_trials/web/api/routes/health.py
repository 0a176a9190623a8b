"""Health check endpoint for the web API."""

import logging
import time
from datetime import datetime, timezone

from fastapi import APIRouter

from anak_trials import __version__
from anak_trials.domain.ports import ClinicalStoragePort
from anak_trials.web.api.dependencies import StorageDep
from anak_trials.web.models.health import DatabaseHealth, HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["health"])


def check_database_health(storage: ClinicalStoragePort) -> DatabaseHealth:
    """Check database connection health.

    Parameters:
        storage: Storage adapter instance

    Returns:
        DatabaseHealth: Database health status

    Security Impact:
        - Only checks connectivity, no patient data is read
    """
    db_type = getattr(storage, "db_type", "unknown")

    start_time = time.time()
    result = storage.ping()
    if result.is_success():
        response_time = (time.time() - start_time) * 1000
        return DatabaseHealth(
            status="connected",
            type=db_type,
            response_time_ms=round(response_time, 2)
        )

    logger.warning(f"Database query failed: {result.error}")
    return DatabaseHealth(status="disconnected", type=db_type, response_time_ms=None)


@router.get("/health", response_model=HealthResponse)
def health_check(storage: StorageDep) -> HealthResponse:
    """Health check endpoint.

    Used by monitoring tools and load balancers. Always answers 200; the
    body tells whether the database is reachable.
    """
    db_health = check_database_health(storage)

    return HealthResponse(
        status="healthy" if db_health.status == "connected" else "unhealthy",
        timestamp=datetime.now(timezone.utc),
        version=__version__,
        database=db_health
    )
