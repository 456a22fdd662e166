from __future__ import annotations

from datetime import datetime, timezone

import pytest
from dependency_injector import providers
from fastapi.testclient import TestClient

from dhab.infrastructure.database.redis_store import RedisStore
from dhab.main.app import create_app
from dhab.main.container import get_container

AUTH = {"Authorization": "Bearer s3cr3t"}


@pytest.fixture()
def gateway(make_gateway, make_snapshot):
    return make_gateway(current=make_snapshot(moment=datetime.now(timezone.utc)))


@pytest.fixture()
def build_client(monkeypatch, fake_redis, gateway):
    monkeypatch.delenv("STORE_URL", raising=False)
    monkeypatch.delenv("REDIS_URL", raising=False)
    monkeypatch.setenv("ENVIRONMENT", "development")
    monkeypatch.setenv("INGEST_CRON_SECRET", "s3cr3t")
    monkeypatch.setenv("INGEST_BACKFILL_DELAY_SECONDS", "0")

    def _build(**env):
        for key, value in env.items():
            monkeypatch.setenv(key, value)
        app = create_app()
        container = get_container()
        container.redis_store.override(
            providers.Object(RedisStore(url=None, client=fake_redis))
        )
        container.gold_price_gateway.override(providers.Object(gateway))
        return TestClient(app)

    return _build


@pytest.fixture()
def client(build_client):
    with build_client() as test_client:
        yield test_client


def test_current_price_serves_camel_case_snapshot(client, gateway):
    response = client.get("/current-price")

    assert response.status_code == 200
    payload = response.json()
    assert set(payload["prices"]) == {"24k", "22k", "21k", "18k"}
    assert payload["prices"]["24k"]["gram"] == 7400
    assert payload["prices"]["24k"]["changePercent"] == 0
    assert payload["usdEgpRate"] == 50.85
    assert response.headers["x-frame-options"] == "DENY"
    assert response.headers["cache-control"] == "no-store, max-age=0"

    # second call is served from the store
    assert client.get("/current-price").status_code == 200
    assert gateway.current_calls == 1


def test_current_price_without_any_source_returns_500(client, gateway):
    gateway.current = None

    response = client.get("/current-price")

    assert response.status_code == 500
    assert response.json() == {"detail": "Failed to fetch gold prices"}


def test_ingest_requires_cron_secret(client, gateway):
    assert client.get("/ingest/current").status_code == 401
    assert (
        client.get("/ingest/current", headers={"Authorization": "Bearer nope"}).status_code
        == 401
    )
    assert client.get("/ingest/backfill").status_code == 401
    assert gateway.current_calls == 0


def test_ingest_then_read_history(client):
    refresh = client.get("/ingest/current", headers=AUTH)
    assert refresh.status_code == 200
    assert refresh.json()["success"] is True
    assert refresh.json()["message"] == "Gold prices updated successfully"

    history = client.get("/history", params={"karat": "21k", "days": "7"})
    assert history.status_code == 200
    payload = history.json()
    assert payload["karat"] == "21k"
    assert payload["count"] == 1
    assert payload["data"][0]["price"] == 6475


def test_backfill_reports_failed_days(client, gateway):
    response = client.get(
        "/ingest/backfill", params={"days": "3", "limit": "2"}, headers=AUTH
    )

    assert response.status_code == 200
    payload = response.json()
    assert payload["success"] is True
    assert payload["processed"] == 2
    assert [day["status"] for day in payload["results"]] == ["failed", "failed"]
    assert len(gateway.historical_calls) == 2


@pytest.mark.parametrize(
    ("path", "params", "detail"),
    [
        ("/history", {"karat": "19k"}, "Invalid karat. Must be one of: 24k, 22k, 21k, 18k"),
        ("/history", {"days": "2000"}, "Invalid days parameter. Must be between 1 and 1825"),
        ("/predict", {"days": "31"}, "Invalid days parameter. Must be between 1 and 30"),
        ("/predict", {"karat": "19k"}, "Invalid karat. Must be one of: 24k, 22k, 21k, 18k"),
    ],
)
def test_invalid_parameters_return_400(client, path, params, detail):
    response = client.get(path, params=params)

    assert response.status_code == 400
    assert response.json() == {"detail": detail}


def test_predictions_and_model_metadata(client):
    assert client.get("/model").status_code == 404

    response = client.get("/predict", params={"karat": "22k", "days": "10"})
    assert response.status_code == 200
    payload = response.json()
    assert payload["karat"] == "22k"
    assert payload["modelVersion"] == "v1.0-linear-regression"
    assert payload["accuracy"] == 88.5
    assert len(payload["predictions"]) == 10
    assert {"date", "timestamp", "price", "confidence", "lowerBound", "upperBound"} <= set(
        payload["predictions"][0]
    )

    cached = client.get("/predict", params={"karat": "22k", "days": "3"})
    assert cached.json()["lastTrained"] == payload["lastTrained"]
    assert len(cached.json()["predictions"]) == 3

    model = client.get("/model")
    assert model.status_code == 200
    assert model.json()["trainingDataPoints"] == 0


def test_rate_limit_returns_429(build_client):
    with build_client(SECURITY_RATE_LIMIT_REQUESTS="2") as limited:
        assert limited.get("/current-price").status_code == 200
        assert limited.get("/current-price").status_code == 200
        response = limited.get("/current-price")

    assert response.status_code == 429
    assert response.json() == {"detail": "Too many requests"}
    assert response.headers["x-content-type-options"] == "nosniff"
