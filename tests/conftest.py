"""Shared pytest fixtures.

No test here needs a running PostgreSQL: the pooled engine is replaced by a
``MagicMock`` whose ``connect()`` behaves like SQLAlchemy's async context
manager, so handler behaviour and call counts can be asserted directly.

Fixture scopes
--------------
* ``clean_env``           — function, autouse: strip every variable Settings reads.
* ``settings``            — function: Settings built from the (empty) environment only.
* ``fake_engine_factory`` — function: builds mock engines with a chosen ``execute``.
* ``fake_engine``         — function: mock AsyncEngine whose ``SELECT 1`` succeeds.
* ``make_client``         — function: factory for an httpx client over ``create_app``.
"""

from collections.abc import Callable
from unittest.mock import AsyncMock, MagicMock

import pytest
from httpx import ASGITransport, AsyncClient

from src.config import Settings

_SETTINGS_ENV_VARS = (
    "PORT",
    "DB_HOST",
    "DB_NAME",
    "DB_USERNAME",
    "DB_PASSWORD",
    "DB_PORT",
    "DB_CONNECT_TIMEOUT",
    "DB_REQUIRED",
    "FRONTEND_ORIGIN",
    "APP_NAME",
    "VERSION",
    "LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Make every test start from an environment with none of our variables set."""
    for name in _SETTINGS_ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def settings() -> Settings:
    return Settings(_env_file=None)


def _make_fake_engine(execute: AsyncMock | None = None) -> MagicMock:
    conn = AsyncMock()
    conn.execute = execute or AsyncMock()
    engine = MagicMock()
    engine.connect.return_value.__aenter__ = AsyncMock(return_value=conn)
    engine.connect.return_value.__aexit__ = AsyncMock(return_value=False)
    engine.dispose = AsyncMock()
    engine.conn = conn
    return engine


@pytest.fixture
def fake_engine_factory() -> Callable[..., MagicMock]:
    """Return a builder for mock engines; ``engine.conn.execute`` is the given mock."""
    return _make_fake_engine


@pytest.fixture
def fake_engine() -> MagicMock:
    return _make_fake_engine()


@pytest.fixture
def make_client(settings: Settings) -> Callable[..., AsyncClient]:
    """Factory returning an httpx client for ``create_app(outcome, settings)``.

    ``ASGITransport`` does not run the ASGI lifespan; tests that need shutdown
    behaviour use ``TestClient`` as a context manager instead.
    """
    from src.main import create_app

    def _make(outcome, app_settings: Settings | None = None) -> AsyncClient:  # noqa: ANN001
        app = create_app(outcome, app_settings or settings)
        return AsyncClient(transport=ASGITransport(app=app), base_url="http://test")

    return _make
