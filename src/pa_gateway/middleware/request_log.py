"""Request logging middleware.

Logs every HTTP request with method, path, status code and latency, and
wraps it in a tracing span. The request id is taken from an incoming
X-Request-ID header when present, stored on request.state so handlers can
echo it in ApiResponse.request_id, and returned as X-Request-ID.

Log format:
    INFO [POST] /api/v1/auction/purchases → 200 (23ms) req_a1b2c3d4e5f6
"""

import logging
import time
import uuid

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from src.pa_common.tracing import create_span

logger = logging.getLogger("pa.request")

REQUEST_ID_HEADER = "X-Request-ID"


class RequestLogMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or f"req_{uuid.uuid4().hex[:12]}"
        request.state.request_id = request_id

        start = time.perf_counter()
        with create_span(
            f"{request.method} {request.url.path}", {"http.request_id": request_id}
        ) as span:
            response: Response = await call_next(request)
            span.set_attribute("http.status_code", response.status_code)
        elapsed_ms = (time.perf_counter() - start) * 1000

        response.headers[REQUEST_ID_HEADER] = request_id
        logger.log(
            logging.WARNING if response.status_code >= 500 else logging.INFO,
            "[%s] %s → %d (%.0fms) %s",
            request.method,
            request.url.path,
            response.status_code,
            elapsed_ms,
            request_id,
        )
        return response
