"""Test configuration for Parallel Search."""

import asyncio

import pytest

from parallel_search.config import AppSettings, get_settings
from parallel_search.models.results import BRAVE, DATAFORSEO, RawResult, SourceSuccess
from parallel_search.providers.base import SearchProvider

CREDENTIAL_ENV_VARS = (
    "DATAFORSEO_LOGIN",
    "DATAFORSEO_PASSWORD",
    "BRAVE_API_KEY",
    "DATAFORSEO__LOGIN",
    "DATAFORSEO__PASSWORD",
    "BRAVE__API_KEY",
    "CALL_TIMEOUT",
    "CREDENTIALS_FILE",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep credentials from the developer's shell out of the tests."""
    for name in CREDENTIAL_ENV_VARS:
        monkeypatch.delenv(name, raising=False)

    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def mock_env(monkeypatch):
    """Mock environment variables for testing."""
    monkeypatch.setenv("DATAFORSEO_LOGIN", "test_login")
    monkeypatch.setenv("DATAFORSEO_PASSWORD", "test_password")
    monkeypatch.setenv("BRAVE_API_KEY", "test_brave_key")
    monkeypatch.setenv("LOG_LEVEL", "DEBUG")

    # Clear lru_cache to ensure it picks up the new env vars
    get_settings.cache_clear()

    yield

    get_settings.cache_clear()


@pytest.fixture
def settings():
    """Settings isolated from any local .env file."""
    return AppSettings(_env_file=None)


def make_result(url: str, title: str | None = None, **kwargs) -> RawResult:
    """Build a raw result with a title derived from the URL."""
    return RawResult(title=title or url, url=url, **kwargs)


class FakeProvider(SearchProvider):
    """Source that replays a canned outcome instead of calling an API."""

    def __init__(self, name, config, results=None, error=None, delay=0.0, cost=None):
        super().__init__(config)
        self.name = name
        self.label = name.capitalize()
        self.results = results or []
        self.error = error
        self.delay = delay
        self.cost = cost
        self.calls = []

    async def search(self, request, credential):
        self.calls.append(request)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error:
            raise self.error
        return SourceSuccess(source=self.name, results=self.results, cost=self.cost)


class StaticSource:
    """Credential chain entry backed by a dict."""

    name = "static"

    def __init__(self, data):
        self.data = data

    def lookup(self, source):
        return self.data.get(source, {})


ALL_CREDENTIALS = {
    DATAFORSEO: {"login": "user", "password": "pass"},
    BRAVE: {"api_key": "key"},
}
