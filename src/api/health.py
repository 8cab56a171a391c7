"""Fixed-response endpoints that are mounted regardless of database health."""

from fastapi import APIRouter, Depends

from src.config import Settings
from src.dependencies import get_settings
from src.schemas.health import HealthResponse, HelloResponse

router = APIRouter(tags=["Health"])


@router.get("/health", response_model=HealthResponse)
async def health(settings: Settings = Depends(get_settings)) -> HealthResponse:  # noqa: B008
    """Liveness probe.  Always HTTP 200; never touches the database."""
    return HealthResponse(
        status="OK",
        service=settings.app_name,
        message="Backend is running",
    )


@router.get("/hello", response_model=HelloResponse)
async def hello(settings: Settings = Depends(get_settings)) -> HelloResponse:  # noqa: B008
    return HelloResponse(
        message=f"Hello World from {settings.app_name}!",
        status="success",
    )
