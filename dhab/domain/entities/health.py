"""
Health domain entities.

The price service degrades instead of failing: the Redis store and every
price API sit behind fallbacks, so an unreachable dependency only makes
the system DOWN when it is marked as required.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional


class ServiceStatus(str, Enum):
    """High-level availability for a dependency or the system."""

    UP = "up"
    DEGRADED = "degraded"
    DOWN = "down"
    UNKNOWN = "unknown"


@dataclass(slots=True)
class DependencyStatus:
    """Health of one store or upstream price API."""

    name: str
    status: ServiceStatus
    message: Optional[str] = None
    required: bool = False
    checked_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    latency_ms: Optional[float] = None
    details: Dict[str, Any] = field(default_factory=dict)


@dataclass(slots=True)
class SystemHealth:
    """Aggregated health for the application."""

    status: ServiceStatus
    dependencies: List[DependencyStatus] = field(default_factory=list)

    @classmethod
    def aggregate(cls, dependencies: Iterable[DependencyStatus]) -> "SystemHealth":
        statuses = list(dependencies)
        overall = ServiceStatus.UP
        for dependency in statuses:
            if dependency.status == ServiceStatus.DOWN and dependency.required:
                overall = ServiceStatus.DOWN
                break
            if dependency.status in (ServiceStatus.DOWN, ServiceStatus.DEGRADED):
                overall = ServiceStatus.DEGRADED
            elif (
                dependency.status == ServiceStatus.UNKNOWN
                and overall == ServiceStatus.UP
            ):
                overall = ServiceStatus.UNKNOWN
        return cls(status=overall, dependencies=statuses)


@dataclass(slots=True)
class ApplicationInfo:
    """Operational metadata surfaced by the /info endpoint."""

    name: str
    version: str
    environment: str
    git_commit: str
    started_at: datetime
    uptime_seconds: float
    status: ServiceStatus
    store_configured: bool
    price_api_configured: bool
    dependencies: List[DependencyStatus] = field(default_factory=list)
