"""
System Router - Presentation Layer

Liveness and build information. /health is exempt from rate limiting.
"""

from datetime import datetime
from typing import Optional

import structlog
from dependency_injector.wiring import Provide, inject
from fastapi import APIRouter, Depends, Request, Response, status

from dhab.application.dtos.health_dto import ApplicationInfoDTO, SystemHealthDTO
from dhab.application.use_cases.health_use_cases import (
    GetApplicationInfoUseCase,
    GetHealthStatusUseCase,
)
from dhab.domain.entities.health import ServiceStatus

from .errors import internal_server_error

logger = structlog.get_logger(__name__)

router = APIRouter(tags=["System"])


@router.get(
    "/health",
    response_model=SystemHealthDTO,
    responses={503: {"model": SystemHealthDTO}},
)
@inject
async def health(
    response: Response,
    get_health_status_use_case: GetHealthStatusUseCase = Depends(
        Provide["get_health_status_use_case"]
    ),
) -> SystemHealthDTO:
    """Probe Redis and the upstream price APIs; 503 only when DOWN."""
    report = await get_health_status_use_case.execute()
    if report.status is ServiceStatus.DOWN:
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    logger.debug("health.checked", status=report.status.value)
    return report


@router.get("/info", response_model=ApplicationInfoDTO)
@inject
async def info(
    request: Request,
    get_application_info_use_case: GetApplicationInfoUseCase = Depends(
        Provide["get_application_info_use_case"]
    ),
    expose_errors: bool = Depends(Provide["expose_error_details"]),
) -> ApplicationInfoDTO:
    started_at: Optional[datetime] = getattr(request.app.state, "started_at", None)
    try:
        return await get_application_info_use_case.execute(started_at)
    except Exception as e:
        raise internal_server_error(
            e, event="info.failed", expose_details=expose_errors
        )
