"""Schema for the service health probe."""

from typing import Literal

from pydantic import BaseModel, Field

DatabaseStatus = Literal["connected", "disconnected"]


class HealthResponse(BaseModel):
    """Liveness plus database reachability, for load balancers and monitoring."""

    status: Literal["ok", "degraded"] = Field(
        default="ok", description="'degraded' when the database is unreachable"
    )
    service: str = Field(default="userhub")
    version: str = Field(description="Running application version")
    environment: str = Field(description="Current app environment (dev or prod)")
    database: DatabaseStatus
