"""Base model definitions."""

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class HealthStatus(str, Enum):
    """Health status of the server or a source."""

    HEALTHY = "healthy"
    DEGRADED = "degraded"
    UNHEALTHY = "unhealthy"


class SourceStatus(BaseModel):
    """Status of one search source."""

    name: str
    health: HealthStatus
    configured: bool = Field(
        ..., description="Whether credentials were found and the source is enabled"
    )
    message: str | None = None
    metrics: dict[str, Any] = Field(default_factory=dict)


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    configured_sources: int
    total_sources: int
    sources: dict[str, SourceStatus]
