"""FastAPI dependencies that hand startup-time state to request handlers."""

from fastapi import Request
from sqlalchemy.ext.asyncio import AsyncEngine

from src.config import Settings

__all__ = ["get_engine", "get_settings"]


def get_settings(request: Request) -> Settings:
    """Return the settings the application was built with."""
    return request.app.state.settings


def get_engine(request: Request) -> AsyncEngine:
    """Return the pooled engine established by the startup probe.

    Only routes mounted for a connected probe depend on this, so the engine is
    always present when it is called.
    """
    return request.app.state.db_engine
