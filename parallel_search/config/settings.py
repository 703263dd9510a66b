"""Application settings with Pydantic v2 patterns."""

from functools import lru_cache
from pathlib import Path

from pydantic import BaseModel, Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


# Settings sections that configure a search source
SOURCE_SECTIONS = ("dataforseo", "brave")


class RetryConfig(BaseModel):
    """Retry configuration settings."""

    max_retries: int = Field(default=1, ge=0, description="Maximum retry attempts")
    base_delay: float = Field(
        default=0.5, gt=0, description="Base delay between retries"
    )
    max_delay: float = Field(
        default=5.0, gt=0, description="Maximum delay between retries"
    )
    exponential_base: float = Field(
        default=2.0, gt=1, description="Exponential backoff base"
    )
    jitter: bool = Field(default=True, description="Add randomization to retry delays")


class SearchDefaults(BaseModel):
    """Defaults applied to tool arguments the caller leaves out."""

    count: int = Field(
        default=10, ge=1, le=50, description="Results requested per source"
    )
    country: str = Field(default="France", description="Country for results")
    language: str = Field(default="fr", description="Language code for results")


class ProviderSettings(BaseModel):
    """Settings shared by both search sources."""

    enabled: bool = Field(default=True, description="Whether the source is queried")
    timeout: float = Field(
        default=15.0, gt=0, description="Per-call deadline in seconds"
    )


class DataForSeoSettings(ProviderSettings):
    """DataForSEO SERP API settings."""

    endpoint: str = Field(
        default="https://api.dataforseo.com/v3/serp/google/organic/live/advanced",
        description="Live organic SERP endpoint",
    )
    login: str = Field(default="", description="DataForSEO API login")
    password: SecretStr = Field(
        default=SecretStr(""), description="DataForSEO API password"
    )


class BraveSettings(ProviderSettings):
    """Brave Search API settings."""

    endpoint: str = Field(
        default="https://api.search.brave.com/res/v1/web/search",
        description="Web search endpoint",
    )
    api_key: SecretStr = Field(
        default=SecretStr(""), description="Brave subscription token"
    )


class AppSettings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
        validate_assignment=True,
        validate_default=True,
    )

    # Application metadata
    app_name: str = Field(default="Parallel Search", description="Application name")
    environment: str = Field(default="development", description="Runtime environment")

    # Server configuration
    host: str = Field(default="0.0.0.0", description="Server host")
    port: int = Field(default=8000, ge=1, le=65535, description="Server port")
    log_level: str = Field(default="INFO", description="Logging level")
    transport: str = Field(default="stdio", description="Transport mode")

    # Call behaviour
    call_timeout: float | None = Field(
        default=None, gt=0, description="Overall deadline for one search call"
    )
    error_message_max_length: int = Field(
        default=500, ge=20, description="Longest per-source error message surfaced"
    )
    credentials_file: Path | None = Field(
        default=None, description="Optional JSON secrets file with source credentials"
    )

    # Nested configurations
    defaults: SearchDefaults = Field(
        default_factory=SearchDefaults, description="Tool argument defaults"
    )
    retry: RetryConfig = Field(
        default_factory=RetryConfig, description="Retry settings"
    )
    dataforseo: DataForSeoSettings = Field(
        default_factory=DataForSeoSettings, description="DataForSEO source"
    )
    brave: BraveSettings = Field(
        default_factory=BraveSettings, description="Brave source"
    )

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Validate environment value."""
        valid_envs = {"development", "staging", "production", "test"}
        if v.lower() not in valid_envs:
            raise ValueError(f"Invalid environment: {v}. Must be one of {valid_envs}")
        return v.lower()

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in valid_levels:
            raise ValueError(f"Invalid log level: {v}. Must be one of {valid_levels}")
        return v.upper()

    @field_validator("transport")
    @classmethod
    def validate_transport(cls, v: str) -> str:
        """Validate transport mode."""
        valid_transports = {"stdio", "streamable-http"}
        if v.lower() not in valid_transports:
            raise ValueError(
                f"Invalid transport: {v}. Must be one of {valid_transports}"
            )
        return v.lower()

    def get_provider_config(self, provider_name: str) -> ProviderSettings | None:
        """Get configuration for a specific source, or None if it is unknown."""
        name = provider_name.lower()
        if name not in SOURCE_SECTIONS:
            return None
        return getattr(self, name)


@lru_cache(maxsize=1)
def get_settings() -> AppSettings:
    """Get cached application settings."""
    return AppSettings()
