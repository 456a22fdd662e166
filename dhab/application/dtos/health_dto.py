"""Response models for /health and /info."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from dhab.domain.entities.health import (
    ApplicationInfo,
    DependencyStatus,
    ServiceStatus,
    SystemHealth,
)


class DependencyStatusDTO(BaseModel):
    """One probed dependency: the store or one of the upstream price APIs."""

    model_config = ConfigDict(from_attributes=True)

    name: str
    status: ServiceStatus
    message: Optional[str] = None
    required: bool = Field(
        default=False, description="Whether the service is DOWN without it"
    )
    checked_at: datetime
    latency_ms: Optional[float] = None
    details: Dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_domain(cls, status: DependencyStatus) -> "DependencyStatusDTO":
        return cls.model_validate(status)


class SystemHealthDTO(BaseModel):
    model_config = ConfigDict(
        from_attributes=True,
        json_schema_extra={
            "example": {
                "status": "degraded",
                "dependencies": [
                    {
                        "name": "redis",
                        "status": "up",
                        "message": "Redis ping successful",
                        "required": False,
                        "checked_at": "2025-01-01T12:00:00Z",
                        "latency_ms": 4.2,
                        "details": {},
                    },
                    {
                        "name": "goldapi",
                        "status": "unknown",
                        "message": "GoldAPI key not configured; fallback prices in use",
                        "required": False,
                        "checked_at": "2025-01-01T12:00:00Z",
                        "latency_ms": None,
                        "details": {},
                    },
                ],
            }
        },
    )

    status: ServiceStatus
    dependencies: List[DependencyStatusDTO] = Field(default_factory=list)

    @classmethod
    def from_domain(cls, health: SystemHealth) -> "SystemHealthDTO":
        return cls.model_validate(health)


class ApplicationInfoDTO(BaseModel):
    """Build, uptime and configuration facts of the running API."""

    model_config = ConfigDict(from_attributes=True)

    name: str
    version: str
    environment: str
    git_commit: str
    started_at: datetime
    uptime_seconds: float
    status: ServiceStatus
    store_configured: bool = Field(
        description="False when running in always-miss mode without Redis"
    )
    price_api_configured: bool = Field(
        description="False when live quotes come from the fallback sources"
    )
    dependencies: List[DependencyStatusDTO] = Field(default_factory=list)

    @classmethod
    def from_domain(cls, info: ApplicationInfo) -> "ApplicationInfoDTO":
        return cls.model_validate(info)
