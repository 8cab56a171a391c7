"""Structured JSON request logging.

Emits one ``INFO`` record per request with ``method``, ``path``, ``status``,
``duration_ms``, ``request_id``, ``client`` and ``user_agent``.  ``request_id``
comes from :data:`~src.middleware.request_id.REQUEST_ID_CTX`, so this
middleware must be wired inside :class:`~src.middleware.request_id.RequestIdMiddleware`.
"""

import json
import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from src.middleware.request_id import REQUEST_ID_CTX

logger = logging.getLogger(__name__)


class AccessLogMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        start = time.perf_counter()
        response: Response = await call_next(request)
        duration_ms = round((time.perf_counter() - start) * 1000, 2)
        logger.info(
            json.dumps(
                {
                    "method": request.method,
                    "path": request.url.path,
                    "status": response.status_code,
                    "duration_ms": duration_ms,
                    "request_id": REQUEST_ID_CTX.get(),
                    "client": request.client.host if request.client else None,
                    "user_agent": request.headers.get("user-agent", "-"),
                }
            )
        )
        return response
