"""Settings configuration"""
from functools import lru_cache
from typing import List, Optional

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class GatewaySettings(BaseSettings):
    """Gateway configuration: scheduling constants, provider endpoints, logging."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
        populate_by_name=True,
        validate_assignment=True,
    )

    # Scheduling (seconds)
    min_request_interval: float = Field(default=2.0, validation_alias="MIN_REQUEST_INTERVAL", ge=0)
    batch_size: int = Field(default=3, validation_alias="BATCH_SIZE", ge=1)
    cooldown_period: float = Field(default=60.0, validation_alias="COOLDOWN_PERIOD", ge=0)
    cooldown_probe_interval: float = Field(default=5.0, validation_alias="COOLDOWN_PROBE_INTERVAL", gt=0)
    next_tick_delay: float = Field(default=0.1, validation_alias="NEXT_TICK_DELAY", ge=0)
    batch_item_delay: float = Field(default=0.5, validation_alias="BATCH_ITEM_DELAY", ge=0)
    offline_response_delay: float = Field(default=0.5, validation_alias="OFFLINE_RESPONSE_DELAY", ge=0)

    # Failure handling
    max_failed_calls_before_fallback: int = Field(
        default=3, validation_alias="MAX_FAILED_CALLS_BEFORE_FALLBACK", ge=1
    )
    max_retries: int = Field(default=4, validation_alias="MAX_RETRIES", ge=0)
    retry_delays: List[float] = Field(default=[3.0, 7.0, 15.0, 30.0], validation_alias="RETRY_DELAYS")
    request_timeout: float = Field(default=60.0, validation_alias="REQUEST_TIMEOUT", gt=0)

    # Providers
    default_provider: str = Field(default="openai", validation_alias="DEFAULT_PROVIDER")
    default_offline_mode: bool = Field(default=True, validation_alias="DEFAULT_OFFLINE_MODE")
    openai_base_url: str = Field(default="https://api.openai.com/v1", validation_alias="OPENAI_BASE_URL")
    anthropic_base_url: str = Field(default="https://api.anthropic.com", validation_alias="ANTHROPIC_BASE_URL")
    anthropic_version: str = Field(default="2023-06-01", validation_alias="ANTHROPIC_VERSION")
    anthropic_max_tokens: int = Field(default=1024, validation_alias="ANTHROPIC_MAX_TOKENS", ge=1)

    # API Keys
    openai_api_key: Optional[SecretStr] = Field(default=None, validation_alias="OPENAI_API_KEY")
    anthropic_api_key: Optional[SecretStr] = Field(default=None, validation_alias="ANTHROPIC_API_KEY")
    openai_organization: Optional[str] = Field(default=None, validation_alias="OPENAI_ORGANIZATION")

    # Persistence
    settings_file: str = Field(default="~/.agent_gateway/settings.json", validation_alias="SETTINGS_FILE")

    # Logging
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")
    log_format: str = Field(default="console", validation_alias="LOG_FORMAT")

    @field_validator("retry_delays")
    @classmethod
    def check_retry_delays(cls, v):
        if not v:
            raise ValueError("retry_delays must contain at least one delay")
        if any(delay < 0 for delay in v):
            raise ValueError("retry_delays must not be negative")
        return v

    @field_validator("openai_base_url", "anthropic_base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    @field_validator("log_format")
    @classmethod
    def check_log_format(cls, v: str) -> str:
        v = v.lower()
        if v not in ("json", "console"):
            raise ValueError("log_format must be 'json' or 'console'")
        return v

    # Properties
    @property
    def initial_api_keys(self) -> dict:
        keys = {}
        if self.openai_api_key:
            keys["openai"] = self.openai_api_key.get_secret_value()
        if self.anthropic_api_key:
            keys["anthropic"] = self.anthropic_api_key.get_secret_value()
        return keys


@lru_cache()
def get_settings() -> GatewaySettings:
    """Get cached settings instance"""
    return GatewaySettings()
