"""Health and info use cases backing the system endpoints."""

from datetime import datetime, timezone
from typing import Callable, Optional

from dhab.application.dtos.health_dto import ApplicationInfoDTO, SystemHealthDTO
from dhab.application.models import SystemInfo
from dhab.domain.entities.health import ApplicationInfo, ServiceStatus, SystemHealth
from dhab.domain.ports.health_check import IHealthCheckService
from dhab.shared import get_logger

logger = get_logger(__name__)

Clock = Callable[[], datetime]


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _log_unhealthy(health: SystemHealth) -> None:
    for dependency in health.dependencies:
        if dependency.status is ServiceStatus.DOWN:
            logger.warning(
                "health.dependency.down",
                dependency=dependency.name,
                message=dependency.message,
            )


class GetHealthStatusUseCase:
    def __init__(self, health_check_service: IHealthCheckService) -> None:
        self._health_check_service = health_check_service

    async def execute(self) -> SystemHealthDTO:
        health = await self._health_check_service.evaluate()
        _log_unhealthy(health)
        return SystemHealthDTO.from_domain(health)


class GetApplicationInfoUseCase:
    """Combine static service facts with a fresh dependency check."""

    def __init__(
        self,
        health_check_service: IHealthCheckService,
        system_info: SystemInfo,
        clock: Clock = _utc_now,
    ) -> None:
        self._health_check_service = health_check_service
        self._system_info = system_info
        self._clock = clock

    async def execute(self, started_at: Optional[datetime]) -> ApplicationInfoDTO:
        health = await self._health_check_service.evaluate()
        now = self._clock()
        started = started_at or now
        facts = self._system_info

        return ApplicationInfoDTO.from_domain(
            ApplicationInfo(
                name=facts.title,
                version=facts.version,
                environment=facts.environment,
                git_commit=facts.git_commit,
                started_at=started,
                uptime_seconds=max(0.0, (now - started).total_seconds()),
                status=health.status,
                store_configured=facts.store_configured,
                price_api_configured=facts.price_api_configured,
                dependencies=health.dependencies,
            )
        )
