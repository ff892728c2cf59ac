"""Application configuration loaded from environment variables and ``.env``."""

import os
from enum import Enum
from pathlib import Path

from dotenv import find_dotenv, load_dotenv
from pydantic import BaseModel, Field, ValidationError

from .clients.errors import ConfigurationError

KNOWN_PRICE_PROVIDERS = ("coinmarketcap", "coingecko", "lifi")


class Environment(str, Enum):
    DEVELOPMENT = "development"
    PRODUCTION = "production"
    TESTING = "testing"


class CacheBackend(str, Enum):
    MEMORY = "memory"
    FILE = "file"
    REDIS = "redis"


class AlchemyConfig(BaseModel):
    """Balances provider settings."""

    api_key: str = ""
    rate_limit: int = 300  # requests per minute
    networks: dict[int, str] | None = None  # chain id -> base URL, None keeps the built-in map


class CoinMarketCapConfig(BaseModel):
    api_key: str | None = None
    base_url: str = "https://pro-api.coinmarketcap.com"
    rate_limit: int = 30
    map_limit: int = 5000


class CoinGeckoConfig(BaseModel):
    api_key: str | None = None
    base_url: str = "https://api.coingecko.com/api/v3"
    rate_limit: int = 30


class LiFiConfig(BaseModel):
    base_url: str = "https://li.quest/v1"
    rate_limit: int = 60


class ProcessingConfig(BaseModel):
    """Fan-out and retry settings."""

    chain_batch_size: int = Field(default=3, ge=1)
    chain_batch_delay: float = Field(default=0.1, ge=0)
    token_batch_size: int = Field(default=5, ge=1)
    token_batch_delay: float = Field(default=0.25, ge=0)
    request_timeout: float = Field(default=10.0, gt=0)
    max_retries: int = Field(default=2, ge=0)
    backoff_base: float = Field(default=1.0, ge=0)


class CacheConfig(BaseModel):
    backend: CacheBackend = CacheBackend.MEMORY
    file_cache_dir: Path = Path(".cache/holdings")
    redis_url: str = "redis://localhost:6379/0"
    key_prefix: str = "holdings:"
    ttl_holdings: int = Field(default=24 * 60 * 60, gt=0)
    ttl_metadata: int = Field(default=24 * 60 * 60, ge=0)
    ttl_provider_map: int = Field(default=60 * 60, ge=0)
    max_size_mb: int = Field(default=50, ge=1)


class AppConfig(BaseModel):
    environment: Environment = Environment.DEVELOPMENT
    debug: bool = False
    log_level: str = "INFO"

    alchemy: AlchemyConfig = Field(default_factory=AlchemyConfig)
    coinmarketcap: CoinMarketCapConfig = Field(default_factory=CoinMarketCapConfig)
    coingecko: CoinGeckoConfig = Field(default_factory=CoinGeckoConfig)
    lifi: LiFiConfig = Field(default_factory=LiFiConfig)
    processing: ProcessingConfig = Field(default_factory=ProcessingConfig)
    cache: CacheConfig = Field(default_factory=CacheConfig)

    token_price_providers: list[str] = Field(default_factory=lambda: ["coinmarketcap", "coingecko"])
    native_price_providers: list[str] = Field(default_factory=lambda: ["coinmarketcap", "coingecko", "lifi"])

    def validate_providers(self) -> None:
        for name in [*self.token_price_providers, *self.native_price_providers]:
            if name not in KNOWN_PRICE_PROVIDERS:
                raise ConfigurationError(f"Unknown price provider: {name}")


def _env_list(name: str) -> list[str] | None:
    value = os.getenv(name)
    if not value:
        return None
    return [item.strip().lower() for item in value.split(",") if item.strip()]


def _env_bool(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def load_config_from_env() -> AppConfig:
    """Build an :class:`AppConfig` from environment variables."""
    load_dotenv(find_dotenv(usecwd=True))

    processing: dict[str, str] = {}
    for field_name, env_name in (
        ("chain_batch_size", "CHAIN_BATCH_SIZE"),
        ("chain_batch_delay", "CHAIN_BATCH_DELAY"),
        ("token_batch_size", "TOKEN_BATCH_SIZE"),
        ("token_batch_delay", "TOKEN_BATCH_DELAY"),
        ("request_timeout", "REQUEST_TIMEOUT"),
        ("max_retries", "MAX_RETRIES"),
        ("backoff_base", "BACKOFF_BASE"),
    ):
        if os.getenv(env_name):
            processing[field_name] = os.environ[env_name]

    cache: dict[str, str] = {}
    for field_name, env_name in (
        ("backend", "CACHE_BACKEND"),
        ("file_cache_dir", "CACHE_DIR"),
        ("redis_url", "REDIS_URL"),
        ("ttl_holdings", "CACHE_TTL_HOLDINGS"),
        ("ttl_metadata", "CACHE_TTL_METADATA"),
    ):
        if os.getenv(env_name):
            cache[field_name] = os.environ[env_name]

    data: dict = {
        "environment": os.getenv("ENVIRONMENT", Environment.DEVELOPMENT.value).lower(),
        "debug": _env_bool("DEBUG"),
        "log_level": os.getenv("LOG_LEVEL", "INFO").upper(),
        "alchemy": {"api_key": os.getenv("ALCHEMY_API_KEY", "")},
        "coinmarketcap": {"api_key": os.getenv("COINMARKETCAP_API_KEY") or None},
        "coingecko": {"api_key": os.getenv("COINGECKO_API_KEY") or None},
        "processing": processing,
        "cache": cache,
    }
    if token_providers := _env_list("TOKEN_PRICE_PROVIDERS"):
        data["token_price_providers"] = token_providers
    if native_providers := _env_list("NATIVE_PRICE_PROVIDERS"):
        data["native_price_providers"] = native_providers

    try:
        config = AppConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration: {e}") from e

    config.validate_providers()
    return config


_config: AppConfig | None = None


def get_config() -> AppConfig:
    """Return the process-wide configuration, loading it on first use."""
    global _config
    if _config is None:
        _config = load_config_from_env()
    return _config


def reset_config() -> None:
    global _config
    _config = None
