"""API middleware components."""

from .context import RequestContextMiddleware
from .errors import ErrorHandlingMiddleware, error_response
from .logging import RequestLoggingMiddleware

__all__ = [
    "ErrorHandlingMiddleware",
    "error_response",
    "RequestContextMiddleware",
    "RequestLoggingMiddleware",
]
