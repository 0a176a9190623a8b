"""Middleware configuration for the web API.

This module sets up middleware for request logging and last-resort error
handling.
"""

import logging
import time
from typing import Callable

from fastapi import Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from anak_trials.domain.ports import StorageError

logger = logging.getLogger(__name__)


class LoggingMiddleware(BaseHTTPMiddleware):
    """Middleware for request/response logging."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        """Log request and response details.

        Parameters:
            request: Incoming HTTP request
            call_next: Next middleware or route handler

        Returns:
            Response: HTTP response with X-Process-Time header
        """
        start_time = time.time()
        endpoint = f"{request.method} {request.url.path}"
        client_ip = request.client.host if request.client else "unknown"

        logger.info(
            f"{endpoint} - Client: {client_ip}",
            extra={"endpoint": endpoint, "client_ip": client_ip}
        )

        response = await call_next(request)
        process_time = time.time() - start_time

        response.headers["X-Process-Time"] = f"{process_time:.3f}"

        logger.info(
            f"{endpoint} - Status: {response.status_code} - Time: {process_time:.3f}s",
            extra={
                "endpoint": endpoint,
                "status_code": response.status_code,
                "process_time_ms": round(process_time * 1000, 2),
            }
        )

        return response


class ErrorHandlingMiddleware(BaseHTTPMiddleware):
    """Middleware for global error handling.

    Turns exceptions that escaped the route handlers into a generic 500
    response without exposing internals.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        try:
            return await call_next(request)
        except StorageError as e:
            logger.error(f"Storage error on {request.url.path} ({e.operation}): {str(e)}", exc_info=True)
            return JSONResponse(
                status_code=500,
                content={"error": "Internal server error", "detail": "Database operation failed"}
            )
        except Exception as e:
            logger.error(f"Unexpected error: {str(e)}", exc_info=True)
            return JSONResponse(
                status_code=500,
                content={
                    "error": "Internal server error",
                    "detail": "An unexpected error occurred. Please check logs for details."
                }
            )


def setup_middleware(app) -> None:
    """Setup application middleware.

    Middleware Order (important):
        1. ErrorHandlingMiddleware - Handles errors
        2. LoggingMiddleware - Logs requests/responses (outermost)
    """
    app.add_middleware(ErrorHandlingMiddleware)
    app.add_middleware(LoggingMiddleware)
