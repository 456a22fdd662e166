from __future__ import annotations

import random

import pytest
from fastapi import HTTPException

from dhab.application.use_cases.prediction_use_cases import (
    GetModelMetadataUseCase,
    GetPredictionsUseCase,
)
from dhab.domain.services.forecast_engine import ForecastEngine
from dhab.presentation.controllers.predictions_controller import (
    get_model_metadata,
    get_predictions,
)


def _predictions_use_case(repository, now) -> GetPredictionsUseCase:
    engine = ForecastEngine(rng=random.Random(0), clock=lambda: now)
    return GetPredictionsUseCase(repository, engine, clock=lambda: now)


@pytest.mark.asyncio
async def test_predict_returns_requested_days(repository, now):
    dto = await get_predictions(
        karat="18k",
        days="3",
        get_predictions_use_case=_predictions_use_case(repository, now),
        expose_errors=False,
    )

    assert len(dto.predictions) == 3
    assert dto.karat.value == "18k"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("karat", "days", "detail"),
    [
        ("19k", None, "Invalid karat. Must be one of: 24k, 22k, 21k, 18k"),
        (None, "45", "Invalid days parameter. Must be between 1 and 30"),
    ],
)
async def test_predict_invalid_parameters_map_to_400(repository, now, karat, days, detail):
    with pytest.raises(HTTPException) as exc_info:
        await get_predictions(
            karat=karat,
            days=days,
            get_predictions_use_case=_predictions_use_case(repository, now),
            expose_errors=False,
        )

    assert exc_info.value.status_code == 400
    assert exc_info.value.detail == detail


@pytest.mark.asyncio
async def test_model_metadata_missing_maps_to_404(repository):
    with pytest.raises(HTTPException) as exc_info:
        await get_model_metadata(
            get_model_metadata_use_case=GetModelMetadataUseCase(repository),
            expose_errors=False,
        )

    assert exc_info.value.status_code == 404


@pytest.mark.asyncio
async def test_model_metadata_after_prediction(repository, now):
    await _predictions_use_case(repository, now).execute()

    dto = await get_model_metadata(
        get_model_metadata_use_case=GetModelMetadataUseCase(repository),
        expose_errors=False,
    )

    assert dto.training_data_points == 0
    assert dto.last_trained == now
