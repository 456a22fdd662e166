"""
Predictions Router - Presentation Layer

Forecasts per karat and the metadata of the last regeneration.
"""

from typing import Optional

from dependency_injector.wiring import Provide, inject
from fastapi import APIRouter, Depends, HTTPException, Query, status

from dhab.application.dtos.prediction_dto import ModelMetadataDTO, PredictionSetDTO
from dhab.application.use_cases.prediction_use_cases import (
    GetModelMetadataUseCase,
    GetPredictionsUseCase,
)
from dhab.domain.entities.errors import InvalidRequestError

from .errors import internal_server_error

router = APIRouter(tags=["Predictions"])


@router.get("/predict", response_model=PredictionSetDTO)
@inject
async def get_predictions(
    karat: Optional[str] = Query(
        None, description="One of 24k, 22k, 21k, 18k (default 24k)"
    ),
    days: Optional[str] = Query(
        None, description="Days ahead to forecast, 1 to 30 (default 7)"
    ),
    get_predictions_use_case: GetPredictionsUseCase = Depends(
        Provide["get_predictions_use_case"]
    ),
    expose_errors: bool = Depends(Provide["expose_error_details"]),
) -> PredictionSetDTO:
    """
    Get the price forecast of a karat.

    Forecasts are cached for 24 hours and regenerated from the last 90
    days of history once they expire.
    """
    try:
        return await get_predictions_use_case.execute(karat=karat, days=days)
    except InvalidRequestError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message)
    except Exception as e:
        raise internal_server_error(
            e, event="prediction.failed", expose_details=expose_errors, karat=karat
        )


@router.get("/model", response_model=ModelMetadataDTO)
@inject
async def get_model_metadata(
    get_model_metadata_use_case: GetModelMetadataUseCase = Depends(
        Provide["get_model_metadata_use_case"]
    ),
    expose_errors: bool = Depends(Provide["expose_error_details"]),
) -> ModelMetadataDTO:
    """Get version and training details of the forecast model."""
    try:
        metadata = await get_model_metadata_use_case.execute()
    except Exception as e:
        raise internal_server_error(
            e, event="model_metadata.failed", expose_details=expose_errors
        )

    if metadata is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="No model metadata recorded yet",
        )
    return metadata
