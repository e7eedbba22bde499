"""Health check response schemas."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field


class HealthStatus(str, Enum):
    """Whether the service can answer risk requests."""

    HEALTHY = "healthy"
    STARTING = "starting"


class HealthResponse(BaseModel):
    """Liveness report with the configured history backend."""

    status: HealthStatus = Field(..., description="Service status")
    version: str = Field(..., description="Application version")
    environment: str = Field(..., description="Deployment environment")
    repository: str | None = Field(
        default=None, description="History repository backing the engine"
    )
    timestamp: datetime = Field(..., description="Check timestamp")

    model_config = {"json_schema_extra": {"example": {
        "status": "healthy",
        "version": "0.1.0",
        "environment": "production",
        "repository": "SQLHistoryRepository",
        "timestamp": "2026-03-01T12:00:00Z",
    }}}
