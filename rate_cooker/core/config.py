from functools import lru_cache
from pathlib import Path
from typing import List, Optional

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from rate_cooker import __version__
from rate_cooker.core.errors import ConfigurationError
from rate_cooker.models.constants import DEFAULT_SUPPORTED_CURRENCIES

ALLOWED_RATE_PROVIDERS = {"exchangerate-api", "static"}
ALLOWED_STORE_BACKENDS = {"dynamodb", "sqlite"}
LOG_LEVELS = {"debug", "info", "warn", "warning", "error"}


def _env(name: str, field: str) -> AliasChoices:
    return AliasChoices(name, field)


class Settings(BaseSettings):
    """Job settings loaded from environment with defaults.

    The legacy environment names (EXCHANGE_RATE_DB_NAME, EXCHANGE_RATE_API_KEY,
    SUPPORTED_CURRENCIES, LOG_LEVEL) are honoured; every field can also be
    passed by name when constructing Settings directly (tests, scripts).
    """

    model_config = SettingsConfigDict(
        env_file=".env", case_sensitive=False, extra="ignore", populate_by_name=True
    )

    app_name: str = "Exchange Rate Cooker"
    version: str = __version__

    # Persistence
    table_name: Optional[str] = Field(
        None, validation_alias=_env("EXCHANGE_RATE_DB_NAME", "table_name")
    )
    rate_store_backend: str = "dynamodb"
    sqlite_path: Path = Path("data/exchange_rates.sqlite3")
    aws_region: Optional[str] = None
    dynamodb_endpoint_url: Optional[str] = None

    # Rate provider
    exchange_rate_provider: str = "exchangerate-api"
    exchange_api_key: Optional[str] = Field(
        None, validation_alias=_env("EXCHANGE_RATE_API_KEY", "exchange_api_key")
    )
    authenticated_api_base_url: str = "https://v6.exchangerate-api.com/v6"
    public_api_base_url: str = "https://api.exchangerate-api.com/v4/latest"
    http_timeout_seconds: float = 10.0
    http_retries: int = Field(0, ge=0)

    # Currencies processed on every invocation, pipe-delimited ("EUR|GBP")
    supported_currencies_raw: str = Field(
        "", validation_alias=_env("SUPPORTED_CURRENCIES", "supported_currencies_raw")
    )

    log_level: str = "info"

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, v: object) -> str:
        level = str(v or "").strip().lower()
        return level if level in LOG_LEVELS else "info"

    @field_validator("exchange_api_key", "table_name", mode="before")
    @classmethod
    def blank_is_none(cls, v: object) -> object:
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @property
    def currencies(self) -> List[str]:
        parsed = [c.strip() for c in self.supported_currencies_raw.split("|")]
        parsed = [c for c in parsed if c]
        return parsed or list(DEFAULT_SUPPORTED_CURRENCIES)

    @property
    def api_key_configured(self) -> bool:
        return self.exchange_api_key is not None

    def init_post_load(self) -> None:
        """Validate required and enumerated fields; raise ConfigurationError."""
        if not self.table_name:
            raise ConfigurationError(
                "EXCHANGE_RATE_DB_NAME environment variable is required"
            )
        if self.exchange_rate_provider not in ALLOWED_RATE_PROVIDERS:
            raise ConfigurationError(
                f"Unsupported exchange_rate_provider '{self.exchange_rate_provider}'. "
                f"Allowed: {sorted(ALLOWED_RATE_PROVIDERS)}"
            )
        if self.rate_store_backend not in ALLOWED_STORE_BACKENDS:
            raise ConfigurationError(
                f"Unsupported rate_store_backend '{self.rate_store_backend}'. "
                f"Allowed: {sorted(ALLOWED_STORE_BACKENDS)}"
            )


@lru_cache
def get_settings() -> Settings:
    settings = Settings()
    settings.init_post_load()
    return settings
