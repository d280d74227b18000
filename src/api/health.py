"""Health check endpoint."""

from typing import Annotated, Literal

import structlog
from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from src.config import Settings, get_settings
from src.infrastructure.database import get_database

logger = structlog.get_logger()
router = APIRouter()


class HealthResponse(BaseModel):
    """Health check response schema."""

    status: Literal["healthy", "unhealthy"]
    version: str


@router.get("", response_model=HealthResponse)
async def health_check(
    settings: Annotated[Settings, Depends(get_settings)],
) -> HealthResponse:
    """Report healthy when the user database answers a trivial query.

    Raises:
        HTTPException: 503 if the database is unavailable.
    """
    try:
        db = get_database()
        await db.execute("SELECT 1")
        return HealthResponse(status="healthy", version=settings.app_version)
    except Exception as e:
        logger.error("health_check_failed", error=str(e), error_type=type(e).__name__)
        raise HTTPException(
            status_code=503,
            detail=f"Service unhealthy: {type(e).__name__}",
        ) from e
