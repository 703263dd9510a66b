"""Configuration management module."""

from .settings import (
    AppSettings,
    BraveSettings,
    DataForSeoSettings,
    ProviderSettings,
    RetryConfig,
    SearchDefaults,
    get_settings,
)

__all__ = [
    "AppSettings",
    "BraveSettings",
    "DataForSeoSettings",
    "ProviderSettings",
    "RetryConfig",
    "SearchDefaults",
    "get_settings",
]
