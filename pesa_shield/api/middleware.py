"""Request tracing and HTTP metrics"""

import time
import uuid
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from pesa_shield.infrastructure.observability.metrics import request_duration_histogram

REQUEST_ID_HEADER = "X-Request-ID"

# Scrapes of /metrics would otherwise dominate the histogram
UNTRACKED_PATHS = frozenset({"/metrics"})


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Reuse the caller's request id or mint one, and echo it back"""

    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        request.state.request_id = request_id

        response = await call_next(request)
        response.headers[REQUEST_ID_HEADER] = request_id
        return response


class MetricsMiddleware(BaseHTTPMiddleware):
    """Observe request latency labelled by route template"""

    async def dispatch(self, request: Request, call_next):
        if request.url.path in UNTRACKED_PATHS:
            return await call_next(request)

        started = time.perf_counter()
        response = await call_next(request)

        # Template, not raw path, so alert ids stay out of label values
        route = request.scope.get("route")
        request_duration_histogram.labels(
            method=request.method,
            endpoint=getattr(route, "path", "unmatched"),
            status=response.status_code,
        ).observe(time.perf_counter() - started)

        return response
