"""
Prices Router - Presentation Layer

Current price snapshot and per-karat price history.
"""

from typing import Optional

import structlog
from dependency_injector.wiring import Provide, inject
from fastapi import APIRouter, Depends, HTTPException, Query, status

from dhab.application.dtos.gold_dto import CurrentPriceSnapshotDTO, HistoryResponseDTO
from dhab.application.use_cases.current_price_use_case import GetCurrentPriceUseCase
from dhab.application.use_cases.history_use_cases import GetHistoricalPricesUseCase
from dhab.domain.entities.errors import InvalidRequestError, PriceUnavailableError

from .errors import internal_server_error

logger = structlog.get_logger(__name__)

router = APIRouter(tags=["Prices"])


@router.get(
    "/current-price",
    response_model=CurrentPriceSnapshotDTO,
    response_model_exclude_none=True,
)
@inject
async def get_current_price(
    get_current_price_use_case: GetCurrentPriceUseCase = Depends(
        Provide["get_current_price_use_case"]
    ),
    expose_errors: bool = Depends(Provide["expose_error_details"]),
) -> CurrentPriceSnapshotDTO:
    """
    Get the current EGP price of every karat.

    The stored snapshot is served while it is less than an hour old;
    otherwise it is refreshed from the price sources first.
    """
    try:
        return await get_current_price_use_case.execute()
    except PriceUnavailableError as e:
        logger.error("current_price.unavailable", error=e.message)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=e.message,
        )
    except Exception as e:
        raise internal_server_error(
            e, event="current_price.failed", expose_details=expose_errors
        )


@router.get("/history", response_model=HistoryResponseDTO)
@inject
async def get_history(
    karat: Optional[str] = Query(
        None, description="One of 24k, 22k, 21k, 18k (default 24k)"
    ),
    days: Optional[str] = Query(
        None, description="Window length in days, 1 to 1825 (default 90)"
    ),
    get_historical_prices_use_case: GetHistoricalPricesUseCase = Depends(
        Provide["get_historical_prices_use_case"]
    ),
    expose_errors: bool = Depends(Provide["expose_error_details"]),
) -> HistoryResponseDTO:
    """Get the stored gram prices of a karat over the last ``days`` days."""
    try:
        return await get_historical_prices_use_case.execute(karat=karat, days=days)
    except InvalidRequestError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message)
    except Exception as e:
        raise internal_server_error(
            e, event="history.failed", expose_details=expose_errors, karat=karat
        )
