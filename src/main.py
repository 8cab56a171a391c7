from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException

from src.api.router import build_router
from src.config import Settings
from src.middleware.access_log import AccessLogMiddleware
from src.middleware.cors import cors_options
from src.middleware.error_handler import http_exception_handler, unhandled_exception_handler
from src.middleware.request_id import RequestIdMiddleware
from src.probe import Connected, ProbeOutcome

_OPENAPI_TAGS = [
    {"name": "Health", "description": "Liveness endpoints, always available"},
    {"name": "Database", "description": "Database connectivity check"},
]


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
    yield
    # Shutdown: dispose pooled connections if the startup probe connected
    if app.state.db_engine is not None:
        await app.state.db_engine.dispose()


def create_app(outcome: ProbeOutcome, settings: Settings) -> FastAPI:
    """Build the application for a process whose startup probe gave *outcome*."""
    app = FastAPI(
        title=settings.app_name,
        description="HTTP service that keeps serving when its database is unavailable",
        version=settings.version,
        lifespan=lifespan,
        openapi_tags=_OPENAPI_TAGS,
    )
    app.state.settings = settings
    app.state.db_engine = outcome.engine if isinstance(outcome, Connected) else None

    # -----------------------------------------------------------------------
    # Exception handlers
    # -----------------------------------------------------------------------

    app.add_exception_handler(HTTPException, http_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, unhandled_exception_handler)

    # -----------------------------------------------------------------------
    # Middleware (Starlette LIFO: last add_middleware call runs outermost)
    # -----------------------------------------------------------------------

    app.add_middleware(CORSMiddleware, **cors_options(settings.frontend_origin))

    # AccessLogMiddleware reads REQUEST_ID_CTX, so it runs inside RequestIdMiddleware.
    app.add_middleware(AccessLogMiddleware)
    app.add_middleware(RequestIdMiddleware)

    app.include_router(build_router(outcome))
    return app
