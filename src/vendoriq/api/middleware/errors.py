"""Error handling middleware mapping engine exceptions to HTTP responses."""

from typing import Any, Callable

from fastapi import Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from vendoriq.api.schemas.errors import APIError, ErrorCode
from vendoriq.core.exceptions import (
    EntityNotFoundError,
    InputValidationError,
    RepositoryUnavailableError,
)
from vendoriq.core.logging import get_logger, log_exception

logger = get_logger(__name__)


def error_response(
    request: Request,
    code: ErrorCode,
    message: str,
    details: dict[str, Any] | None = None,
) -> JSONResponse:
    """Render an APIError body carrying the request's ID."""
    request_id = str(getattr(request.state, "request_id", "unknown"))
    error = APIError(error_code=code, message=message, details=details, request_id=request_id)
    return JSONResponse(
        status_code=code.status_code,
        content=error.model_dump(mode="json"),
        headers={"X-Request-ID": request_id},
    )


class ErrorHandlingMiddleware(BaseHTTPMiddleware):
    """Convert engine exceptions into APIError responses.

    EntityNotFoundError is 404, InputValidationError is 422 and
    RepositoryUnavailableError is 503. Anything else is logged with its
    traceback and returned as an opaque 500.
    """

    def __init__(self, app, debug: bool = False):
        super().__init__(app)
        self.debug = debug

    async def dispatch(
        self, request: Request, call_next: Callable
    ) -> Response:
        try:
            return await call_next(request)
        except Exception as exc:
            code, message, details = self._map_exception(exc)
            if code is ErrorCode.INTERNAL_ERROR:
                log_exception(logger, exc, path=request.url.path)
            else:
                logger.info(
                    "Request rejected",
                    path=request.url.path,
                    error_code=code.value,
                    reason=str(exc),
                )
            return error_response(request, code, message, details)

    def _map_exception(self, exc: Exception) -> tuple[ErrorCode, str, dict | None]:
        if isinstance(exc, EntityNotFoundError):
            return (
                ErrorCode.NOT_FOUND,
                exc.args[0],
                {"entity_type": exc.entity_type, "entity_id": exc.entity_id},
            )

        if isinstance(exc, InputValidationError):
            return (
                ErrorCode.VALIDATION_ERROR,
                exc.args[0],
                {"field": exc.field} if exc.field else None,
            )

        if isinstance(exc, RepositoryUnavailableError):
            # The underlying failure stays in the logs
            return (
                ErrorCode.REPOSITORY_UNAVAILABLE,
                "History repository unavailable",
                {"operation": exc.operation},
            )

        return (
            ErrorCode.INTERNAL_ERROR,
            "Internal server error",
            {"type": type(exc).__name__} if self.debug else None,
        )
