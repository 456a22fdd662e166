"""Infrastructure implementation for system health checks."""

from __future__ import annotations

import asyncio
from time import perf_counter
from typing import Dict, List, Optional

import httpx
import structlog

from dhab.domain.entities.health import DependencyStatus, ServiceStatus, SystemHealth
from dhab.domain.ports.health_check import IHealthCheckService
from dhab.infrastructure.database.redis_store import RedisStore

logger = structlog.get_logger(__name__)


class HealthCheckService(IHealthCheckService):
    """Probe the Redis store and the upstream price APIs."""

    def __init__(
        self,
        store: RedisStore,
        goldapi_base_url: str,
        goldapi_key: Optional[str],
        spot_url: str,
        exchange_rate_url: str,
        *,
        http_timeout: float = 5.0,
    ) -> None:
        self._store = store
        self._goldapi_base_url = goldapi_base_url.rstrip("/")
        self._goldapi_key = goldapi_key
        self._spot_url = spot_url
        self._exchange_rate_url = exchange_rate_url
        self._http_timeout = http_timeout

    async def evaluate(self) -> SystemHealth:
        """Run checks concurrently and aggregate system health."""

        checks = {
            "redis": asyncio.create_task(self._check_store()),
            "goldapi": asyncio.create_task(self._check_goldapi()),
            "gold_spot": asyncio.create_task(
                self._hit_http_endpoint(name="gold_spot", url=self._spot_url)
            ),
            "exchange_rate": asyncio.create_task(
                self._hit_http_endpoint(
                    name="exchange_rate", url=self._exchange_rate_url
                )
            ),
        }

        statuses: List[DependencyStatus] = []
        for name, task in checks.items():
            try:
                statuses.append(await task)
            except Exception as exc:  # pragma: no cover - defensive fallback
                logger.warning("health.check_failed", dependency=name, error=str(exc))
                statuses.append(
                    DependencyStatus(
                        name=name, status=ServiceStatus.DOWN, message=str(exc)
                    )
                )

        return SystemHealth.aggregate(statuses)

    async def _check_store(self) -> DependencyStatus:
        if not self._store.configured:
            return DependencyStatus(
                name="redis",
                status=ServiceStatus.UNKNOWN,
                message="Redis store not configured; every read is a miss",
            )

        start = perf_counter()
        healthy = await self._store.ping()
        latency_ms = (perf_counter() - start) * 1000
        if healthy:
            return DependencyStatus(
                name="redis",
                status=ServiceStatus.UP,
                message="Redis ping successful",
                latency_ms=latency_ms,
            )
        return DependencyStatus(
            name="redis",
            status=ServiceStatus.DOWN,
            message="Redis ping failed",
            latency_ms=latency_ms,
        )

    async def _check_goldapi(self) -> DependencyStatus:
        if not self._goldapi_key:
            return DependencyStatus(
                name="goldapi",
                status=ServiceStatus.UNKNOWN,
                message="GoldAPI key not configured; fallback prices in use",
            )

        # /stat reports quota usage without consuming a quote request
        return await self._hit_http_endpoint(
            name="goldapi",
            url=f"{self._goldapi_base_url}/stat",
            headers={"x-access-token": self._goldapi_key},
        )

    async def _hit_http_endpoint(
        self,
        *,
        name: str,
        url: str,
        headers: Optional[Dict[str, str]] = None,
    ) -> DependencyStatus:
        if not url:
            return DependencyStatus(
                name=name,
                status=ServiceStatus.UNKNOWN,
                message="Service URL not configured.",
            )

        start = perf_counter()
        try:
            async with httpx.AsyncClient(timeout=self._http_timeout) as client:
                response = await client.get(url, headers=headers)
        except httpx.RequestError as exc:
            latency_ms = (perf_counter() - start) * 1000
            return DependencyStatus(
                name=name,
                status=ServiceStatus.DOWN,
                message=f"HTTP request failed: {exc}",
                latency_ms=latency_ms,
                details={"url": url},
            )

        latency_ms = (perf_counter() - start) * 1000
        status_code = response.status_code
        if status_code >= 500:
            status = ServiceStatus.DOWN
        elif status_code >= 400:
            status = ServiceStatus.DEGRADED
        else:
            status = ServiceStatus.UP

        return DependencyStatus(
            name=name,
            status=status,
            message=f"HTTP {status_code}",
            latency_ms=latency_ms,
            details={"url": url, "status_code": status_code},
        )
