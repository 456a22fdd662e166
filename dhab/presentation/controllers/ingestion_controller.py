"""
Ingestion Router - Presentation Layer

Endpoints meant for a scheduler: refresh the current prices and backfill
past days. When a cron secret is configured, callers must present it as
a bearer token.
"""

import hmac
from typing import Optional

import structlog
from dependency_injector.wiring import Provide, inject
from fastapi import APIRouter, Depends, Header, HTTPException, Query, status

from dhab.application.dtos.ingestion_dto import BackfillResultDTO, RefreshResultDTO
from dhab.application.use_cases.ingestion_use_cases import (
    BackfillHistoryUseCase,
    RefreshCurrentPricesUseCase,
)
from dhab.domain.entities.errors import InvalidRequestError, PriceUnavailableError

from .errors import internal_server_error

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/ingest", tags=["Ingestion"])


def require_cron_secret(authorization: Optional[str], secret: Optional[str]) -> None:
    """Raise 401 unless ``authorization`` is ``Bearer <secret>``."""
    if not secret:
        return

    expected = f"Bearer {secret}"
    if not authorization or not hmac.compare_digest(
        authorization.encode(), expected.encode()
    ):
        logger.warning("ingestion.unauthorized")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized"
        )


@router.get(
    "/current",
    response_model=RefreshResultDTO,
    response_model_exclude_none=True,
)
@inject
async def refresh_current_prices(
    authorization: Optional[str] = Header(None),
    cron_secret: Optional[str] = Depends(Provide["cron_secret"]),
    refresh_current_prices_use_case: RefreshCurrentPricesUseCase = Depends(
        Provide["refresh_current_prices_use_case"]
    ),
    expose_errors: bool = Depends(Provide["expose_error_details"]),
) -> RefreshResultDTO:
    """Fetch the live prices, store them and append them to the history."""
    require_cron_secret(authorization, cron_secret)
    try:
        return await refresh_current_prices_use_case.execute()
    except PriceUnavailableError as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=e.message,
        )
    except Exception as e:
        raise internal_server_error(
            e, event="ingestion.refresh.failed", expose_details=expose_errors
        )


@router.get(
    "/backfill",
    response_model=BackfillResultDTO,
    response_model_exclude_none=True,
)
@inject
async def backfill_history(
    days: Optional[str] = Query(None, description="Days to cover, 1 to 1825"),
    offset: Optional[str] = Query(None, description="Start this many days ago"),
    limit: Optional[str] = Query(None, description="Days per run, 1 to 31"),
    authorization: Optional[str] = Header(None),
    cron_secret: Optional[str] = Depends(Provide["cron_secret"]),
    backfill_history_use_case: BackfillHistoryUseCase = Depends(
        Provide["backfill_history_use_case"]
    ),
    expose_errors: bool = Depends(Provide["expose_error_details"]),
) -> BackfillResultDTO:
    """
    Store historical prices for ``min(days, limit)`` days.

    Days that fail are reported in the results and do not stop the run.
    """
    require_cron_secret(authorization, cron_secret)
    try:
        return await backfill_history_use_case.execute(
            days=days, offset=offset, limit=limit
        )
    except InvalidRequestError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message)
    except Exception as e:
        raise internal_server_error(
            e, event="ingestion.backfill.failed", expose_details=expose_errors
        )
