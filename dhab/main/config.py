"""
Application Settings - Main Layer

One pydantic-settings class per concern (service, store, price APIs,
ingestion, security, celery, logging), read from the environment or `.env`.

Every external credential is optional: without a GoldAPI key the
fallback sources are used, and without a store URL the service runs
without persistence.
"""

from typing import List, Optional

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from dhab.shared import EnumEnvironment, EnumLogLevel
from dhab.shared.env import load_secret_file_variables  # noqa: F401


class ServiceSettings(BaseSettings):
    """HTTP service identity and server options."""

    title: str = Field(default="Dhab Gold Price API", description="API title")
    description: str = Field(
        default="Egyptian gold prices per karat, price history and "
        "short-term forecasts",
        description="API description",
    )
    version: str = Field(default="1.0.0", description="API version")
    git_commit: str = Field(
        default="unknown",
        description="Git commit hash",
        validation_alias=AliasChoices("APP_GIT_COMMIT", "GIT_COMMIT"),
    )
    debug: bool = Field(default=False, description="Enable debug mode")
    host: str = Field(default="0.0.0.0", description="Interface to bind")
    port: int = Field(default=8000, description="Port to bind the server")
    reload: bool = Field(
        default=False, description="Enable auto-reload for development"
    )
    cors_origins: List[str] = Field(
        default_factory=lambda: ["*"], description="Allowed CORS origins"
    )

    model_config = SettingsConfigDict(
        env_prefix="APP_", case_sensitive=False, extra="ignore"
    )


class StoreSettings(BaseSettings):
    """Redis store connection settings."""

    url: Optional[str] = Field(
        default=None,
        description="Redis URL; unset disables persistence",
        validation_alias=AliasChoices("STORE_URL", "REDIS_URL"),
    )
    token: Optional[str] = Field(
        default=None,
        description="Password used when the URL carries none",
        validation_alias=AliasChoices("STORE_TOKEN", "REDIS_TOKEN"),
    )
    timeout: float = Field(default=3.0, gt=0, description="Per-command timeout")

    model_config = SettingsConfigDict(
        env_prefix="STORE_", case_sensitive=False, extra="ignore"
    )


class PriceApiSettings(BaseSettings):
    """Upstream price API settings."""

    api_key: Optional[str] = Field(
        default=None,
        description="GoldAPI access token",
        validation_alias=AliasChoices("GOLDAPI_API_KEY", "GOLDAPI_KEY"),
    )
    base_url: str = Field(
        default="https://www.goldapi.io/api", description="GoldAPI root URL"
    )
    timeout: float = Field(default=10.0, gt=0, description="GoldAPI timeout")
    spot_url: str = Field(
        default="https://api.gold-api.com/price/XAU",
        description="USD spot ounce endpoint",
    )
    exchange_rate_url: str = Field(
        default="https://api.exchangerate-api.com/v4/latest/USD",
        description="USD exchange rates endpoint",
    )
    fallback_timeout: float = Field(
        default=5.0, gt=0, description="Timeout of the fallback endpoints"
    )

    model_config = SettingsConfigDict(
        env_prefix="GOLDAPI_", case_sensitive=False, extra="ignore"
    )


class IngestionSettings(BaseSettings):
    """Ingestion job settings."""

    cron_secret: Optional[str] = Field(
        default=None,
        description="Bearer secret required by the /ingest endpoints",
        validation_alias=AliasChoices("INGEST_CRON_SECRET", "CRON_SECRET"),
    )
    backfill_delay_seconds: float = Field(
        default=0.5, ge=0, description="Pause between historical requests"
    )
    refresh_interval_seconds: Optional[int] = Field(
        default=None,
        gt=0,
        description="Celery beat period of the current-price refresh",
    )

    model_config = SettingsConfigDict(
        env_prefix="INGEST_", case_sensitive=False, extra="ignore"
    )


class SecuritySettings(BaseSettings):
    """HTTP rate limiting settings."""

    rate_limit_requests: int = Field(default=100, gt=0)
    rate_limit_window_seconds: float = Field(default=60.0, gt=0)

    model_config = SettingsConfigDict(
        env_prefix="SECURITY_", case_sensitive=False, extra="ignore"
    )


class CelerySettings(BaseSettings):
    """Celery configuration settings."""

    broker_url: str = Field(
        default="redis://redis:6379/0",
        description="Message broker URL",
        alias="CELERY_BROKER_URL",
    )
    result_backend_url: str = Field(
        default="redis://redis:6379/1",
        description="Result backend URL",
        alias="CELERY_RESULT_BACKEND",
    )

    model_config = SettingsConfigDict(
        env_prefix="CELERY_", case_sensitive=False, extra="ignore"
    )


class LoggingSettings(BaseSettings):
    """Logging configuration settings."""

    level: EnumLogLevel = Field(default=EnumLogLevel.INFO, description="Logging level")
    format: str = Field(
        default="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        description="Logging format",
    )
    file_path: Optional[str] = Field(
        default=None, description="Log file path (if None, logs to console)"
    )

    model_config = SettingsConfigDict(
        env_prefix="LOG_", case_sensitive=False, extra="ignore"
    )


class AppSettings(BaseSettings):
    """Main application settings, aggregating all sub-settings."""

    environment: EnumEnvironment = Field(
        default=EnumEnvironment.DEVELOPMENT, description="Application environment"
    )

    service: ServiceSettings = Field(default_factory=ServiceSettings)
    store: StoreSettings = Field(default_factory=StoreSettings)
    price_api: PriceApiSettings = Field(default_factory=PriceApiSettings)
    ingestion: IngestionSettings = Field(default_factory=IngestionSettings)
    security: SecuritySettings = Field(default_factory=SecuritySettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    celery: CelerySettings = Field(default_factory=CelerySettings)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        env_nested_delimiter="__",
        extra="ignore",
    )

    @property
    def is_production(self) -> bool:
        return self.environment == EnumEnvironment.PRODUCTION


def get_settings() -> AppSettings:
    """Read a fresh `AppSettings` from the current environment."""
    return AppSettings()


settings = get_settings()
