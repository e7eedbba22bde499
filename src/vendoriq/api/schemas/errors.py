"""Error response schema shared by every endpoint."""

from datetime import UTC, datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class ErrorCode(str, Enum):
    """Machine-readable error codes and the HTTP status each one maps to."""

    NOT_FOUND = "not_found"
    VALIDATION_ERROR = "validation_error"
    REPOSITORY_UNAVAILABLE = "repository_unavailable"
    INTERNAL_ERROR = "internal_error"

    @property
    def status_code(self) -> int:
        return _STATUS_CODES[self]


_STATUS_CODES = {
    ErrorCode.NOT_FOUND: 404,
    ErrorCode.VALIDATION_ERROR: 422,
    ErrorCode.REPOSITORY_UNAVAILABLE: 503,
    ErrorCode.INTERNAL_ERROR: 500,
}


class APIError(BaseModel):
    """Body of every non-2xx response."""

    error_code: ErrorCode = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human-readable error message")
    details: dict[str, Any] | None = Field(
        default=None, description="Structured context, e.g. the missing entity"
    )
    request_id: str = Field(..., description="Request ID echoed in X-Request-ID")
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(UTC), description="When the error occurred"
    )

    model_config = {"json_schema_extra": {"example": {
        "error_code": "not_found",
        "message": "Vendor not found: vendor-42",
        "details": {"entity_type": "vendor", "entity_id": "vendor-42"},
        "request_id": "019478f2-1234-7000-8000-abcdef123456",
        "timestamp": "2026-03-01T12:00:00Z",
    }}}
