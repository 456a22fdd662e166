"""Domain service abstraction for health checks."""

from __future__ import annotations

from typing import Protocol

from dhab.domain.entities.health import SystemHealth


class IHealthCheckService(Protocol):
    """Interface for probing the store and the upstream price APIs."""

    async def evaluate(self) -> SystemHealth:
        ...
