"""Health and readiness schemas."""

from datetime import datetime
from enum import Enum
from typing import Dict

from pydantic import BaseModel, Field


class HealthStatus(str, Enum):
    """Health status enumeration."""
    HEALTHY = "healthy"
    DEGRADED = "degraded"
    UNHEALTHY = "unhealthy"


class HealthResponse(BaseModel):
    """Health check response schema."""

    status: HealthStatus = Field(..., description="Service status")
    timestamp: datetime = Field(..., description="Current server time (ISO 8601)")
    version: str = Field("1.0.0", description="API version")


class ReadinessResponse(HealthResponse):
    """Readiness response with per-dependency checks."""

    checks: Dict[str, str] = Field(default_factory=dict, description="Dependency name to status")


class ServicePing(HealthResponse):
    """Ping response naming the service and its background workers."""

    service: str
    environment: str
    workers: Dict[str, bool] = Field(default_factory=dict, description="Worker name to running flag")
