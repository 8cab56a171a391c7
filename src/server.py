"""Process entry point: resolve config, probe the database, bind and serve.

Run with ``test-backend`` (installed console script) or ``python -m src``.

Startup never waits on the database for longer than ``DB_CONNECT_TIMEOUT``
seconds.  The probe runs in the same event loop that later serves requests so
pooled connections stay usable.  The only fatal startup error in the default
configuration is failing to bind the listening socket.
"""

import asyncio
import logging
import os
import signal
import socket
from pathlib import Path

import uvicorn

from src.config import Settings
from src.database import build_database_url
from src.main import create_app
from src.probe import Connected, probe_database

logger = logging.getLogger(__name__)

LISTEN_HOST = "0.0.0.0"
_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


class BindError(RuntimeError):
    """The listening socket could not be bound."""


class DatabaseRequiredError(RuntimeError):
    """The probe failed while ``DB_REQUIRED`` is enabled."""


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(level=level, format=_LOG_FORMAT)


def bind_socket(host: str, port: int) -> socket.socket:
    """Bind a TCP socket on *host*:*port*.  uvicorn starts listening on it."""
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
    try:
        sock.bind((host, port))
    except OSError as exc:
        sock.close()
        raise BindError(f"Failed to bind to {host}:{port}: {exc}") from exc
    sock.set_inheritable(True)
    return sock


async def serve(settings: Settings) -> None:
    """Run the startup sequence and serve until the process is signalled."""
    descriptor = settings.connection_descriptor()
    logger.info(
        "Database configuration: host=%s name=%s user=%s",
        "[unix socket path]" if descriptor.uses_unix_socket else descriptor.host,
        descriptor.database,
        descriptor.username,
    )
    outcome = await probe_database(
        build_database_url(descriptor),
        settings.db_connect_timeout,
    )
    if settings.db_required and not isinstance(outcome, Connected):
        raise DatabaseRequiredError(f"Database unavailable at startup: {outcome}")

    app = create_app(outcome, settings)
    logger.info("Frontend origin: %s", settings.frontend_origin)
    logger.info("Binding to %s:%d", LISTEN_HOST, settings.port)
    try:
        sock = bind_socket(LISTEN_HOST, settings.port)
    except BindError:
        if isinstance(outcome, Connected):
            await outcome.engine.dispose()
        raise
    logger.info("Successfully bound to %s:%d, starting server", LISTEN_HOST, settings.port)

    config = uvicorn.Config(
        app,
        lifespan="on",
        log_config=None,
        access_log=False,
    )
    server = uvicorn.Server(config)
    try:
        await server.serve(sockets=[sock])
    finally:
        sock.close()


def main() -> int:
    configure_logging()
    logger.info("Starting application (pid %d)", os.getpid())
    if Path(".env").is_file():
        logger.info("Loading environment variables from .env")
    else:
        logger.info("No .env file found, using process environment")

    settings = Settings()
    logging.getLogger().setLevel(settings.log_level)

    # uvicorn re-raises the signal it shut down on; SIGTERM then surfaces as
    # KeyboardInterrupt like SIGINT does.
    previous_sigterm = signal.signal(signal.SIGTERM, signal.default_int_handler)
    try:
        asyncio.run(serve(settings))
    except BindError as exc:
        logger.error("%s", exc)
        return 1
    except DatabaseRequiredError as exc:
        logger.error("%s; DB_REQUIRED is set, aborting startup", exc)
        return 1
    except KeyboardInterrupt:
        logger.info("Interrupted, shutting down")
    finally:
        signal.signal(signal.SIGTERM, previous_sigterm)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
