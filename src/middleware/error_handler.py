"""Global exception handlers that return a consistent JSON error envelope.

Register these with ``app.add_exception_handler``.  Responses follow the
``ErrorResponse`` schema from ``src.schemas.common``.  Database failures inside
``/api/db-test`` never reach these handlers; that endpoint reports them in its
own payload.
"""

import logging
import traceback

from fastapi import Request, status
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

from src.schemas.common import ErrorCode, ErrorResponse

logger = logging.getLogger(__name__)

_STATUS_TO_CODE: dict[int, str] = {
    400: "BAD_REQUEST",
    404: "NOT_FOUND",
    405: "METHOD_NOT_ALLOWED",
    500: "INTERNAL_ERROR",
    503: "SERVICE_UNAVAILABLE",
}


def _code_for_status(status_code: int) -> str:
    """Return the error code string for *status_code*, falling back to ``HTTP_{code}``."""
    return _STATUS_TO_CODE.get(status_code, f"HTTP_{status_code}")


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Convert ``HTTPException`` (unknown path, wrong method, ...) to the error envelope.

    Response headers carried by the exception, such as ``Allow`` on a 405, are
    forwarded to the client.
    """
    detail = exc.detail if isinstance(exc.detail, str) else str(exc.detail)
    body = ErrorResponse(
        error=ErrorCode(
            code=_code_for_status(exc.status_code),
            message=detail,
        )
    )
    headers = dict(exc.headers) if exc.headers else None
    return JSONResponse(
        status_code=exc.status_code,
        content=body.model_dump(),
        headers=headers,
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all for anything a handler let escape.

    The traceback is logged at ERROR level together with the request ID, so
    the line can be matched to the access log entry; the client only sees a
    generic ``INTERNAL_ERROR`` message.
    """
    logger.error(
        "Unhandled %s on %s %s (request_id=%s)\n%s",
        type(exc).__name__,
        request.method,
        request.url.path,
        getattr(request.state, "request_id", "-"),
        traceback.format_exc(),
    )
    body = ErrorResponse(
        error=ErrorCode(
            code="INTERNAL_ERROR",
            message="An internal server error occurred",
        )
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=body.model_dump(),
    )
