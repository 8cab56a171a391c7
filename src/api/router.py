"""Route table composition: the health routes plus one db-test variant."""

from fastapi import APIRouter

from src.api.db_test import connected_router, unavailable_router
from src.api.health import router as health_router
from src.probe import Connected, ProbeOutcome, Rejected, TimedOut


def build_router(outcome: ProbeOutcome) -> APIRouter:
    """Return the route table for a process whose startup probe gave *outcome*.

    ``/health`` and ``/hello`` are always present.  ``/api/db-test`` is always
    present too, backed by the pool when the probe connected and by a fixed
    503 response otherwise.
    """
    api_router = APIRouter()
    api_router.include_router(health_router)
    match outcome:
        case Connected():
            api_router.include_router(connected_router)
        case Rejected() | TimedOut():
            api_router.include_router(unavailable_router)
    return api_router
