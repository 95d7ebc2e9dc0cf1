"""Health check endpoint with database connectivity and maintenance status."""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from rolegate.core.config import Settings, get_settings
from rolegate.core.database import check_db_connected, get_db
from rolegate.schemas.health import HealthResponse

router = APIRouter()


@router.get("", response_model=HealthResponse)
def get_health(
    db: Annotated[Session, Depends(get_db)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> HealthResponse:
    """
    Return service health status and database connectivity.
    Not gated by maintenance mode so load balancers can still probe it.
    """
    db_status = "connected" if check_db_connected(db) else "disconnected"

    return HealthResponse(
        status="ok",
        environment=settings.APP_ENV,
        database=db_status,
        maintenance=settings.MAINTENANCE_MODE,
    )
