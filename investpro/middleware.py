"""
Request-context middleware.

Each request gets a trace ID (taken from ``X-Request-ID`` when a gateway
supplies one, otherwise a fresh UUID4). The ID is stored on
``request.state``, published to the logging context variable so every log
line written while serving the request carries it, and echoed back in the
response. The wall-clock duration is returned in ``X-Process-Time`` and
logged, at WARNING level for slow requests.
"""

import logging
import time
import uuid

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from investpro.core.logging import request_id_var

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"
PROCESS_TIME_HEADER = "X-Process-Time"

SLOW_REQUEST_MS = 500.0


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Assigns a request ID and measures request latency."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        request.state.request_id = request_id
        token = request_id_var.set(request_id)

        start = time.perf_counter()
        try:
            response = await call_next(request)
        finally:
            request_id_var.reset(token)
        elapsed_ms = (time.perf_counter() - start) * 1000

        response.headers[REQUEST_ID_HEADER] = request_id
        response.headers[PROCESS_TIME_HEADER] = f"{elapsed_ms:.2f}ms"

        log = logger.warning if elapsed_ms > SLOW_REQUEST_MS else logger.debug
        log(
            "%s %s -> %d in %.2fms",
            request.method,
            request.url.path,
            response.status_code,
            elapsed_ms,
            extra={
                "request_id": request_id,
                "method": request.method,
                "path": request.url.path,
                "status_code": response.status_code,
                "elapsed_ms": round(elapsed_ms, 2),
            },
        )
        return response
