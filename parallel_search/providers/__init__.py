"""Providers package."""

from .base import SearchProvider
from .brave import BraveProvider
from .credentials import (
    Credential,
    CredentialResolver,
    EnvironmentCredentialSource,
    JsonFileCredentialSource,
    SettingsCredentialSource,
)
from .dataforseo import DataForSeoProvider

__all__ = [
    "SearchProvider",
    "BraveProvider",
    "DataForSeoProvider",
    "Credential",
    "CredentialResolver",
    "EnvironmentCredentialSource",
    "JsonFileCredentialSource",
    "SettingsCredentialSource",
]
