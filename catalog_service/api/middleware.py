"""HTTP middleware for the segments API.

RequestIdMiddleware tags each request, its log lines and its response
with a correlation ID and logs one line per request. Uncaught errors are
rendered by the catch-all handler in ``catalog_service.api.errors``.
"""

import time
from typing import Awaitable, Callable
from uuid import uuid4

import structlog
from fastapi import FastAPI, Request, Response, status
from starlette.middleware.base import BaseHTTPMiddleware

logger = structlog.get_logger()

CallNext = Callable[[Request], Awaitable[Response]]

REQUEST_ID_HEADER = "X-Request-ID"


# ============================================================================
# Request Correlation
# ============================================================================


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Attach a correlation ID to each request.

    The client's ``X-Request-ID`` is reused when present, otherwise a
    UUID4 is generated. The ID is stored on ``request.state``, bound to
    the structlog context for the lifetime of the request and echoed in
    the response headers.
    """

    async def dispatch(self, request: Request, call_next: CallNext) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid4())
        request.state.request_id = request_id
        structlog.contextvars.bind_contextvars(request_id=request_id)

        started = time.perf_counter()
        status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
        try:
            response = await call_next(request)
            status_code = response.status_code
        finally:
            logger.info(
                "Request completed",
                method=request.method,
                path=request.url.path,
                status_code=status_code,
                duration_ms=round((time.perf_counter() - started) * 1000, 2),
            )
            structlog.contextvars.unbind_contextvars("request_id")

        response.headers[REQUEST_ID_HEADER] = request_id
        return response


def setup_middleware(app: FastAPI) -> None:
    """Install the middleware stack.

    Args:
        app: FastAPI application instance.
    """
    app.add_middleware(RequestIdMiddleware)
