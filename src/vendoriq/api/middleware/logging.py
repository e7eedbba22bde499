"""Request logging middleware."""

import time
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from vendoriq.core.logging import get_logger

logger = get_logger("vendoriq.api.requests")


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log one line per request with its route, outcome and latency.

    ``route`` is the matched path template (``/v1/vendors/{vendor_id}/rating``)
    so entries group by endpoint; ``path`` keeps the concrete identifiers.
    """

    async def dispatch(
        self, request: Request, call_next: Callable
    ) -> Response:
        start = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - start) * 1000

        status_code = response.status_code
        if status_code >= 500:
            log = logger.error
        elif status_code >= 400:
            log = logger.warning
        else:
            log = logger.info

        log(
            "request_completed",
            method=request.method,
            route=_route_template(request),
            path=request.url.path,
            status_code=status_code,
            duration_ms=round(duration_ms, 2),
            client_ip=request.client.host if request.client else None,
        )
        return response


def _route_template(request: Request) -> str | None:
    route = request.scope.get("route")
    return getattr(route, "path", None)
