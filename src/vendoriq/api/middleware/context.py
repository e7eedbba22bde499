"""Request context middleware assigning request IDs."""

from typing import Callable

import structlog
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from uuid_utils import uuid7


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Middleware that tags each request with a UUIDv7 request ID.

    Sets:
        request.state.request_id: The generated (or client supplied) request ID
        X-Request-ID response header: For client correlation

    The ID is also bound to the structlog context so engine logs emitted
    while serving the request carry it.
    """

    async def dispatch(
        self, request: Request, call_next: Callable
    ) -> Response:
        """Process request with a bound request ID."""
        request_id = request.headers.get("X-Request-ID") or str(uuid7())
        request.state.request_id = request_id

        structlog.contextvars.bind_contextvars(request_id=request_id)
        try:
            response = await call_next(request)
        finally:
            structlog.contextvars.unbind_contextvars("request_id")

        response.headers["X-Request-ID"] = request_id
        return response
