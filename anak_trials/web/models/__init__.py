"""Web API Pydantic models."""

from anak_trials.web.models.health import DatabaseHealth, HealthResponse

__all__ = ["DatabaseHealth", "HealthResponse"]
