from __future__ import annotations

from datetime import datetime, timezone
from types import SimpleNamespace

import pytest
from fastapi import Request, Response

from dhab.application.models import SystemInfo
from dhab.application.use_cases.health_use_cases import (
    GetApplicationInfoUseCase,
    GetHealthStatusUseCase,
)
from dhab.domain.entities.health import DependencyStatus, ServiceStatus, SystemHealth
from dhab.presentation.controllers.system_controller import health, info


class _HealthService:
    def __init__(self, status: ServiceStatus):
        self._health = SystemHealth(
            status=status,
            dependencies=[DependencyStatus(name="redis", status=status)],
        )

    async def evaluate(self) -> SystemHealth:
        return self._health


@pytest.mark.asyncio
async def test_health_endpoint_returns_status():
    dto = await health(
        response=Response(),
        get_health_status_use_case=GetHealthStatusUseCase(
            _HealthService(ServiceStatus.UP)
        )
    )
    assert dto.status is ServiceStatus.UP
    assert dto.dependencies[0].name == "redis"


@pytest.mark.asyncio
async def test_info_endpoint_returns_application_info():
    health_service = _HealthService(ServiceStatus.DEGRADED)
    system_info = SystemInfo(
        title="Dhab Gold Price API",
        version="1.0",
        environment="development",
        git_commit="abc",
        store_configured=True,
        price_api_configured=True,
    )
    info_use_case = GetApplicationInfoUseCase(health_service, system_info)

    scope = {
        "type": "http",
        "method": "GET",
        "path": "/info",
        "headers": [],
        "query_string": b"",
        "server": ("test", 80),
        "app": SimpleNamespace(
            state=SimpleNamespace(started_at=datetime.now(timezone.utc))
        ),
    }
    request = Request(scope)

    dto = await info(
        request=request,
        get_application_info_use_case=info_use_case,
        expose_errors=True,
    )
    assert dto.name == "Dhab Gold Price API"
    assert dto.status is ServiceStatus.DEGRADED
    assert dto.store_configured is True


@pytest.mark.asyncio
async def test_health_endpoint_answers_503_when_down():
    response = Response()
    dto = await health(
        response=response,
        get_health_status_use_case=GetHealthStatusUseCase(
            _HealthService(ServiceStatus.DOWN)
        ),
    )
    assert response.status_code == 503
    assert dto.status is ServiceStatus.DOWN


@pytest.mark.asyncio
async def test_health_endpoint_keeps_200_when_degraded():
    response = Response()
    await health(
        response=response,
        get_health_status_use_case=GetHealthStatusUseCase(
            _HealthService(ServiceStatus.DEGRADED)
        ),
    )
    assert response.status_code == 200
