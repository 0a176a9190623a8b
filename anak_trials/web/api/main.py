"""Main FastAPI application for anak-trials.

This module sets up the FastAPI application with all routes, middleware,
exception handlers and logging.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import PlainTextResponse

from anak_trials import __version__
from anak_trials.domain.ports import ValidationError
from anak_trials.web.api.dependencies import get_settings, get_storage_adapter
from anak_trials.web.api.logging_config import setup_logging
from anak_trials.web.api.middleware import setup_middleware
from anak_trials.web.api.routes import export, health, pages

settings = get_settings()
setup_logging(use_json=settings.json_logs, log_level=settings.log_level)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for startup and shutdown events."""
    logger.info(f"{settings.app_name} starting up...")
    logger.info(f"Logging level: {settings.log_level}")
    logger.info(f"Anonymization mode: {settings.anon_mode}")
    yield
    logger.info(f"{settings.app_name} shutting down...")
    if get_storage_adapter.cache_info().currsize:
        get_storage_adapter().close()
        get_storage_adapter.cache_clear()


app = FastAPI(
    title="anak-trials",
    description="Pediatric patients and clinical trial records",
    version=__version__,
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    openapi_url="/api/openapi.json",
    lifespan=lifespan
)

setup_middleware(app)


@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError) -> PlainTextResponse:
    logger.warning(f"Validation error on {request.url.path}: {str(exc)}")
    lines = [str(exc)] + [f"{field}: {message}" for field, message in exc.errors.items()]
    return PlainTextResponse("\n".join(lines), status_code=422)


app.include_router(pages.router)
app.include_router(export.router)
app.include_router(health.router)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "anak_trials.web.api.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
        log_level="info"
    )
