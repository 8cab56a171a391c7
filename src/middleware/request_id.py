"""Request ID middleware.

Every request gets an ID exposed via the ``X-Request-Id`` response header and a
``ContextVar`` readable by other middleware and handlers.  The ID is also kept on
``request.state.request_id``, which outlives this middleware so the catch-all
exception handler can still read it.  An ID supplied by an
upstream proxy in the ``X-Request-Id`` request header is kept when it looks
sane; otherwise a fresh UUID4 is generated.

Ordering note
-------------
Add this middleware *last* via ``app.add_middleware`` so it runs outermost and
the ID is set before the access logger reads it.
"""

import re
import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

REQUEST_ID_HEADER = "X-Request-Id"

# Defaults to "" so consumers never receive ``None``.
REQUEST_ID_CTX: ContextVar[str] = ContextVar("request_id", default="")

_VALID_INBOUND_ID = re.compile(r"[A-Za-z0-9._:-]{1,128}")


def _resolve_request_id(inbound: str | None) -> str:
    if inbound and _VALID_INBOUND_ID.fullmatch(inbound):
        return inbound
    return str(uuid.uuid4())


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Attach an ``X-Request-Id`` header to every HTTP response."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request_id = _resolve_request_id(request.headers.get(REQUEST_ID_HEADER))
        request.state.request_id = request_id
        token = REQUEST_ID_CTX.set(request_id)
        try:
            response: Response = await call_next(request)
        finally:
            REQUEST_ID_CTX.reset(token)
        response.headers[REQUEST_ID_HEADER] = request_id
        return response
