"""Time-bounded database connection probe run once at startup.

The probe races a single ``SELECT 1`` round-trip against a deadline and
reports one of three outcomes:

``Connected``
    The pooled engine answered in time; it is handed to the application and
    reused by every request for the rest of the process lifetime.
``Rejected``
    The attempt finished before the deadline but failed (bad credentials,
    refused connection, invalid URL, ...).
``TimedOut``
    The deadline elapsed first.

A failed probe never aborts startup by itself; the caller decides whether to
degrade or exit.  The outcome is not re-evaluated later: a background retry
loop would slot in here, after the first failure.
"""

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import TypeAlias

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine

from src.config import DEFAULT_PROBE_TIMEOUT_SECONDS
from src.database import create_db_engine, sanitize_url

logger = logging.getLogger(__name__)

_LIVENESS_QUERY = text("SELECT 1")


@dataclass(frozen=True, slots=True)
class Connected:
    engine: AsyncEngine


@dataclass(frozen=True, slots=True)
class Rejected:
    error: str


@dataclass(frozen=True, slots=True)
class TimedOut:
    timeout: float


ProbeOutcome: TypeAlias = Connected | Rejected | TimedOut


async def probe_database(
    url: str,
    timeout: float = DEFAULT_PROBE_TIMEOUT_SECONDS,
    *,
    engine_factory: Callable[[str], AsyncEngine] = create_db_engine,
) -> ProbeOutcome:
    """Try to establish a pooled connection to *url* within *timeout* seconds."""
    logger.info(
        "Connecting to database %s with %.1fs timeout", sanitize_url(url), timeout
    )
    try:
        engine = engine_factory(url)
    except Exception as exc:
        logger.warning("Database engine could not be created: %s", exc)
        _log_degraded()
        return Rejected(error=str(exc))

    try:
        async with asyncio.timeout(timeout):
            async with engine.connect() as conn:
                await conn.execute(_LIVENESS_QUERY)
    except TimeoutError:
        await engine.dispose()
        logger.warning("Database connection timed out after %.1f seconds", timeout)
        _log_degraded()
        return TimedOut(timeout=timeout)
    except Exception as exc:
        await engine.dispose()
        logger.warning("Database connection failed: %s", exc)
        _log_degraded()
        return Rejected(error=str(exc))

    logger.info("Database connected successfully")
    return Connected(engine=engine)


def _log_degraded() -> None:
    logger.warning("Server will start without database connection")
    logger.warning("/api/db-test will report the database as unavailable")
