"""Environment-based configuration using pydantic-settings.

Example:
    >>> from deepchain.foundation.config import get_settings
    >>> settings = get_settings()
    >>> settings.cache.chain_ttl
    3600.0

    # Or with environment variables:
    # DEEPCHAIN_CACHE_CHAIN_TTL=600
    # DEEPCHAIN_LOG_LEVEL=DEBUG
    # DEEPSEEK_API_KEY=sk-...
"""

from __future__ import annotations

from functools import lru_cache
from typing import Annotated, Literal

from pydantic import AliasChoices, Field, NonNegativeFloat, PositiveFloat, PositiveInt, SecretStr, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict


class CacheSettings(BaseSettings):
    """TTLs for the chain and step result caches."""
    
    model_config = SettingsConfigDict(env_prefix="DEEPCHAIN_CACHE_", extra="ignore")
    
    chain_ttl: NonNegativeFloat = Field(default=3600.0, description="Whole-chain cache TTL in seconds")
    step_ttl: NonNegativeFloat = Field(default=3600.0, description="Per-step cache TTL in seconds")


class LoggingSettings(BaseSettings):
    """Logging configuration."""
    
    model_config = SettingsConfigDict(env_prefix="DEEPCHAIN_LOG_", extra="ignore")
    
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    format: Literal["console", "json", "none"] = "console"


class UpstreamSettings(BaseSettings):
    """Completion provider connection settings."""
    
    model_config = SettingsConfigDict(env_prefix="DEEPCHAIN_UPSTREAM_", extra="ignore", populate_by_name=True)
    
    api_key: SecretStr | None = Field(
        default=None,
        validation_alias=AliasChoices("DEEPCHAIN_UPSTREAM_API_KEY", "DEEPSEEK_API_KEY"),
        description="Bearer token for the completion API",
    )
    base_url: str = "https://api.deepseek.com/v1"
    timeout: PositiveFloat = Field(default=60.0, description="HTTP request timeout in seconds")
    max_tokens: PositiveInt = 2000
    default_temperature: Annotated[float, Field(ge=0.0, le=2.0)] = 0.7
    
    @computed_field
    @property
    def configured(self) -> bool:
        return self.api_key is not None and bool(self.api_key.get_secret_value())


class ExecutorSettings(BaseSettings):
    """Chain executor behaviour."""
    
    model_config = SettingsConfigDict(env_prefix="DEEPCHAIN_EXECUTOR_", extra="ignore")
    
    invoke_timeout: PositiveFloat | None = Field(
        default=None,
        description="Per-invocation timeout in seconds (unset waits indefinitely)",
    )


class DeepchainSettings(BaseSettings):
    """Root settings, loaded from DEEPCHAIN_* environment variables and .env.
    
    Example environment variables:
        DEEPCHAIN_CACHE_STEP_TTL=120
        DEEPCHAIN_LOG_FORMAT=json
        DEEPCHAIN_UPSTREAM_BASE_URL=http://localhost:8080/v1
        DEEPCHAIN_EXECUTOR_INVOKE_TIMEOUT=30
    """
    
    model_config = SettingsConfigDict(
        env_prefix="DEEPCHAIN_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
        validate_default=True,
    )
    
    server_name: str = "deepseek-server"
    cache: CacheSettings = Field(default_factory=CacheSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    upstream: UpstreamSettings = Field(default_factory=UpstreamSettings)
    executor: ExecutorSettings = Field(default_factory=ExecutorSettings)


@lru_cache(maxsize=1)
def get_settings() -> DeepchainSettings:
    """Get the process-wide settings instance (cached)."""
    return DeepchainSettings()


def clear_settings_cache() -> None:
    """Clear the settings cache so the next get_settings() re-reads the environment."""
    get_settings.cache_clear()
