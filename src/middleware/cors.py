"""Cross-origin policy for browser clients.

Allowed origins are the configured frontend origin, a fixed list of local
development servers, and anything matching :data:`LOCAL_ORIGIN_REGEX`: any
``http://localhost`` / ``http://127.0.0.1`` prefix, or the literal ``null``
origin that browsers send for pages opened from ``file://``.
"""

from typing import Any

LOCAL_DEV_ORIGINS: tuple[str, ...] = (
    "http://localhost:3000",
    "http://localhost:5500",
    "http://127.0.0.1:3000",
    "http://127.0.0.1:5500",
)

# Matched with ``re.fullmatch`` by Starlette's CORSMiddleware.
LOCAL_ORIGIN_REGEX = r"http://localhost.*|http://127\.0\.0\.1.*|null"

ALLOWED_METHODS = ["GET", "POST", "PUT", "DELETE", "OPTIONS"]
ALLOWED_HEADERS = ["Authorization", "Accept", "Content-Type"]
PREFLIGHT_MAX_AGE = 3600


def cors_options(frontend_origin: str) -> dict[str, Any]:
    """Keyword arguments for ``app.add_middleware(CORSMiddleware, ...)``."""
    origins = list(dict.fromkeys([frontend_origin, *LOCAL_DEV_ORIGINS]))
    return {
        "allow_origins": origins,
        "allow_origin_regex": LOCAL_ORIGIN_REGEX,
        "allow_methods": ALLOWED_METHODS,
        "allow_headers": ALLOWED_HEADERS,
        "allow_credentials": True,
        "max_age": PREFLIGHT_MAX_AGE,
    }
