"""
Access logging for the wallet API.

Each request gets an id (taken from `x-request-id` when the caller sends
one) that is bound into structlog's context, exposed as
`request.state.request_id` and echoed back on the response. Health probes
are logged at DEBUG so they do not drown out wallet traffic.
"""

import time
import uuid
from typing import Iterable

import structlog
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

logger = structlog.stdlib.get_logger("chatwallet.http")

REQUEST_ID_HEADER = "x-request-id"


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """One structured `request_completed` event per request."""

    def __init__(self, app: ASGIApp, quiet_paths: Iterable[str] = ("/healthz",)) -> None:
        super().__init__(app)
        self.quiet_paths = frozenset(quiet_paths)

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex[:12]
        request.state.request_id = request_id
        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(request_id=request_id)

        start = time.perf_counter()
        status_code = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
            response.headers[REQUEST_ID_HEADER] = request_id
            return response
        finally:
            self._log(request, status_code, round((time.perf_counter() - start) * 1000, 1))

    def _log(self, request: Request, status_code: int, duration_ms: float) -> None:
        if status_code >= 500:
            log = logger.error
        elif status_code >= 400:
            log = logger.warning
        elif request.url.path in self.quiet_paths:
            log = logger.debug
        else:
            log = logger.info

        log(
            "request_completed",
            method=request.method,
            path=request.url.path,
            status=status_code,
            duration_ms=duration_ms,
        )
