"""Credential resolution for search sources.

Credentials are looked up through an explicit priority chain. The first
entry that yields every field a source needs wins; a source with no complete
credential anywhere is skipped rather than reported as failing.
"""

import json
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Protocol

from pydantic import BaseModel, SecretStr

from ..config.settings import AppSettings
from ..models.results import BRAVE, DATAFORSEO
from ..utils.logging import get_logger

logger = get_logger(__name__)

REQUIRED_FIELDS: dict[str, tuple[str, ...]] = {
    DATAFORSEO: ("login", "password"),
    BRAVE: ("api_key",),
}


class Credential(BaseModel):
    """Secrets for one source and where they came from."""

    source: str
    origin: str
    values: dict[str, SecretStr]

    def get(self, name: str) -> str:
        return self.values[name].get_secret_value()


class CredentialSource(Protocol):
    """One entry of the resolution chain."""

    name: str

    def lookup(self, source: str) -> Mapping[str, str]:
        """Return whatever fields this entry knows for ``source``."""
        ...


class SettingsCredentialSource:
    """Credentials from application settings (nested env vars, .env, CLI)."""

    name = "settings"

    def __init__(self, settings: AppSettings):
        self.settings = settings

    def lookup(self, source: str) -> Mapping[str, str]:
        if source == DATAFORSEO:
            return {
                "login": self.settings.dataforseo.login,
                "password": self.settings.dataforseo.password.get_secret_value(),
            }
        if source == BRAVE:
            return {"api_key": self.settings.brave.api_key.get_secret_value()}
        return {}


class EnvironmentCredentialSource:
    """Credentials from the conventional flat environment variables."""

    name = "environment"

    ENV_VARS: dict[str, dict[str, str]] = {
        DATAFORSEO: {
            "login": "DATAFORSEO_LOGIN",
            "password": "DATAFORSEO_PASSWORD",
        },
        BRAVE: {"api_key": "BRAVE_API_KEY"},
    }

    def __init__(self, environ: Mapping[str, str] | None = None):
        self.environ = os.environ if environ is None else environ

    def lookup(self, source: str) -> Mapping[str, str]:
        names = self.ENV_VARS.get(source, {})
        return {field: self.environ.get(var, "") for field, var in names.items()}


class JsonFileCredentialSource:
    """Credentials from a JSON secrets file.

    Accepted layouts::

        {"dataforseo": {"login": "...", "password": "..."},
         "brave": {"api_key": "..."}}

        {"login": "...", "password": "...", "brave_api_key": "..."}
    """

    name = "file"

    def __init__(self, path: Path | str):
        self.path = Path(path)

    def _load(self) -> dict:
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.debug(f"Credentials file {self.path} not usable: {e}")
            return {}
        return data if isinstance(data, dict) else {}

    def lookup(self, source: str) -> Mapping[str, str]:
        data = self._load()
        section = data.get(source)
        if isinstance(section, dict):
            return {k: v for k, v in section.items() if isinstance(v, str)}
        if source == DATAFORSEO:
            return {
                k: data[k]
                for k in ("login", "password")
                if isinstance(data.get(k), str)
            }
        if source == BRAVE and isinstance(data.get("brave_api_key"), str):
            return {"api_key": data["brave_api_key"]}
        return {}


class CredentialResolver:
    """Resolve source credentials through an ordered chain."""

    def __init__(self, chain: list[CredentialSource]):
        self.chain = list(chain)

    def resolve(self, source: str) -> Credential | None:
        """Return the first complete credential for ``source``, if any."""
        required = REQUIRED_FIELDS.get(source)
        if not required:
            return None

        for entry in self.chain:
            found = entry.lookup(source)
            values = {name: (found.get(name) or "").strip() for name in required}
            if all(values.values()):
                logger.debug(f"Resolved {source} credentials from {entry.name}")
                return Credential(
                    source=source,
                    origin=entry.name,
                    values={k: SecretStr(v) for k, v in values.items()},
                )

        logger.debug(f"No credentials found for {source}")
        return None

    @classmethod
    def from_settings(cls, settings: AppSettings) -> "CredentialResolver":
        """Build the default chain: settings, environment, secrets file."""
        chain: list[CredentialSource] = [
            SettingsCredentialSource(settings),
            EnvironmentCredentialSource(),
        ]
        if settings.credentials_file is not None:
            chain.append(JsonFileCredentialSource(settings.credentials_file))
        return cls(chain)
