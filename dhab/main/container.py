"""
Dependency Container - Main Layer

Wires the Redis store, the price-source chain, the forecast engine and
the use cases behind the HTTP routers.
"""

from contextlib import asynccontextmanager
from typing import Optional

from dependency_injector import containers, providers

from dhab.application.models import SystemInfo
from dhab.application.use_cases.current_price_use_case import GetCurrentPriceUseCase
from dhab.application.use_cases.health_use_cases import (
    GetApplicationInfoUseCase,
    GetHealthStatusUseCase,
)
from dhab.application.use_cases.history_use_cases import GetHistoricalPricesUseCase
from dhab.application.use_cases.ingestion_use_cases import (
    BackfillHistoryUseCase,
    RefreshCurrentPricesUseCase,
)
from dhab.application.use_cases.prediction_use_cases import (
    GetModelMetadataUseCase,
    GetPredictionsUseCase,
)
from dhab.domain.services.forecast_engine import ForecastEngine
from dhab.infrastructure.database import RedisStore
from dhab.infrastructure.gateways import (
    DefaultPriceSource,
    GoldApiSource,
    GoldPriceGateway,
    SpotExchangeSource,
)
from dhab.infrastructure.repositories import RedisGoldPriceRepository
from dhab.infrastructure.services.health_check_service import HealthCheckService
from dhab.presentation.middleware.security import InMemoryRateLimiter
from dhab.shared import EnumEnvironment, get_logger

from .config import AppSettings

logger = get_logger(__name__)


def _enum_value(value) -> str:
    return value.value if hasattr(value, "value") else str(value)


def _optional_secret(value: Optional[str]) -> Optional[str]:
    return value or None


class AppContainer(containers.DeclarativeContainer):
    """Composition Root using dependency-injector."""

    wiring_config = containers.WiringConfiguration(packages=["..presentation"])

    # Settings
    config = providers.Configuration()

    # Infrastructure
    redis_store = providers.Singleton(
        RedisStore,
        url=config.store.url,
        token=config.store.token,
        timeout=config.store.timeout,
    )

    gold_price_repository = providers.Singleton(
        RedisGoldPriceRepository,
        store=redis_store,
    )

    # Gateways
    goldapi_source = providers.Singleton(
        GoldApiSource,
        api_key=config.price_api.api_key,
        base_url=config.price_api.base_url,
        timeout=config.price_api.timeout,
    )

    spot_exchange_source = providers.Singleton(
        SpotExchangeSource,
        spot_url=config.price_api.spot_url,
        exchange_rate_url=config.price_api.exchange_rate_url,
        timeout=config.price_api.fallback_timeout,
    )

    default_price_source = providers.Singleton(DefaultPriceSource)

    gold_price_gateway = providers.Singleton(
        GoldPriceGateway,
        current_sources=providers.List(
            goldapi_source, spot_exchange_source, default_price_source
        ),
        historical_sources=providers.List(goldapi_source),
    )

    # Domain services
    forecast_engine = providers.Singleton(ForecastEngine)

    # Presentation
    rate_limiter = providers.Singleton(
        InMemoryRateLimiter,
        max_requests=config.security.rate_limit_requests,
        window_seconds=config.security.rate_limit_window_seconds,
    )

    cron_secret = providers.Callable(_optional_secret, config.ingestion.cron_secret)

    expose_error_details = providers.Callable(
        lambda env: _enum_value(env) != EnumEnvironment.PRODUCTION.value,
        config.environment,
    )

    # Application (use cases)
    get_current_price_use_case = providers.Factory(
        GetCurrentPriceUseCase,
        repository=gold_price_repository,
        gateway=gold_price_gateway,
    )

    get_historical_prices_use_case = providers.Factory(
        GetHistoricalPricesUseCase,
        repository=gold_price_repository,
    )

    get_predictions_use_case = providers.Factory(
        GetPredictionsUseCase,
        repository=gold_price_repository,
        engine=forecast_engine,
    )

    get_model_metadata_use_case = providers.Factory(
        GetModelMetadataUseCase,
        repository=gold_price_repository,
    )

    refresh_current_prices_use_case = providers.Factory(
        RefreshCurrentPricesUseCase,
        repository=gold_price_repository,
        gateway=gold_price_gateway,
    )

    backfill_history_use_case = providers.Factory(
        BackfillHistoryUseCase,
        repository=gold_price_repository,
        gateway=gold_price_gateway,
        delay_seconds=config.ingestion.backfill_delay_seconds,
    )

    health_check_service = providers.Singleton(
        HealthCheckService,
        store=redis_store,
        goldapi_base_url=config.price_api.base_url,
        goldapi_key=config.price_api.api_key,
        spot_url=config.price_api.spot_url,
        exchange_rate_url=config.price_api.exchange_rate_url,
    )

    system_info = providers.Singleton(
        SystemInfo,
        title=config.service.title,
        version=config.service.version,
        environment=providers.Callable(_enum_value, config.environment),
        git_commit=config.service.git_commit,
        store_configured=providers.Callable(bool, config.store.url),
        price_api_configured=providers.Callable(bool, config.price_api.api_key),
    )

    get_health_status_use_case = providers.Factory(
        GetHealthStatusUseCase,
        health_check_service=health_check_service,
    )

    get_application_info_use_case = providers.Factory(
        GetApplicationInfoUseCase,
        health_check_service=health_check_service,
        system_info=system_info,
    )


# -------------------------
# Global Container Instance
# -------------------------
_app_container: AppContainer | None = None


def init_container(settings: AppSettings) -> AppContainer:
    """Initialize global container with application settings."""

    global _app_container

    container = AppContainer()
    container.config.from_pydantic(settings)
    _app_container = container
    return container


def get_container() -> AppContainer:
    """Get the initialized global container."""

    if _app_container is None:
        raise RuntimeError("Container has not been initialized yet")

    return _app_container


@asynccontextmanager
async def app_lifespan():
    """
    Centralized lifecycle management for external resources.

    Opens nothing eagerly: the Redis client connects on first use. On
    shutdown the client is closed and the rate limiter counters dropped.
    """
    container = get_container()

    redis_store = container.redis_store()
    rate_limiter = container.rate_limiter()

    try:
        logger.info(
            "container.resources.initialized",
            store_configured=redis_store.configured,
        )
        yield container

    finally:
        logger.info("container.redis.close")
        await redis_store.close()
        rate_limiter.reset()

        logger.info("container.resources.shutdown")
