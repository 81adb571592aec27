"""Error mapping between domain exceptions and HTTP responses.

Every failure leaves the API in the same envelope:
``{"success": false, "message", "error", "details", "request_id"}``.
"""

from typing import Any

import structlog
from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from catalog_service.api.middleware import REQUEST_ID_HEADER
from catalog_service.domain.exceptions import DomainError, SegmentRuleError

logger = structlog.get_logger()


def error_body(
    message: str,
    error: str | None = None,
    details: dict[str, Any] | None = None,
    request_id: str | None = None,
) -> dict[str, Any]:
    """Build the error envelope returned by every endpoint."""
    return {
        "success": False,
        "message": message,
        "error": error,
        "details": details or {},
        "request_id": request_id,
    }


def rule_error_to_http(exc: SegmentRuleError) -> HTTPException:
    """Map a rule validation error to a 400 response."""
    return HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail={
            "message": exc.message,
            "error": exc.error,
            "details": exc.details,
        },
    )


def failure_to_http(exc: DomainError, message: str) -> HTTPException:
    """Map an upstream or storage failure to a 500 response.

    Only the exception class reaches the client. The full message can
    carry SQL or upstream URLs, so callers log it before mapping.

    Args:
        exc: The failure.
        message: Generic, endpoint-specific failure message.
    """
    error_type = type(exc).__name__
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail={
            "message": message,
            "error": error_type,
            "details": {"error_type": error_type},
        },
    )


# ============================================================================
# Exception Handlers
# ============================================================================


def _request_id(request: Request) -> str | None:
    return getattr(request.state, "request_id", None)


async def http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    """Render HTTP exceptions, including router 404/405s, as envelopes.

    A dict ``detail`` supplies message, error and details; any other
    detail is used as both message and error.
    """
    if isinstance(exc.detail, dict):
        body = error_body(
            exc.detail.get("message", str(exc.detail)),
            error=exc.detail.get("error"),
            details=exc.detail.get("details"),
            request_id=_request_id(request),
        )
    else:
        body = error_body(
            str(exc.detail),
            error=str(exc.detail),
            request_id=_request_id(request),
        )
    return JSONResponse(
        status_code=exc.status_code,
        content=body,
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Report unparseable bodies and bad path parameters as 400s."""
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=error_body(
            "Invalid request body",
            error="Invalid request",
            details={"errors": [str(e.get("msg", e)) for e in exc.errors()]},
            request_id=_request_id(request),
        ),
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Render any uncaught exception as a 500 envelope.

    Starlette runs this handler outside the middleware stack, so the
    request ID header is set here.
    """
    logger.exception(
        "Unhandled exception",
        method=request.method,
        path=request.url.path,
        error=str(exc),
    )
    request_id = _request_id(request)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_body(
            "An internal error occurred",
            error="Internal error",
            request_id=request_id,
        ),
        headers={REQUEST_ID_HEADER: request_id} if request_id else None,
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Install the envelope-producing exception handlers on ``app``."""
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
