"""Response schema for GET /health."""

from typing import Literal

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """Liveness, environment, database reachability and maintenance flag."""

    status: Literal["ok"] = "ok"
    environment: str = Field(description="APP_ENV of the running service")
    database: Literal["connected", "disconnected"] | None = Field(
        default=None, description="Result of a SELECT 1 against the configured database"
    )
    maintenance: bool = Field(
        default=False, description="True while authenticated routes answer 503"
    )
