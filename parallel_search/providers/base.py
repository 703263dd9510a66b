"""Base class for the search source adapters.

An adapter turns one provider's HTTP API into a ``SourceSuccess`` carrying
``RawResult`` items in the provider's native order. Adapters raise
``ProviderError`` subclasses on transport problems; turning those into
per-source failure outcomes is the orchestrator's job.

Example:
    Creating a new adapter:
        >>> class MyProvider(SearchProvider):
        ...     name = "mine"
        ...     async def search(self, request, credential) -> SourceSuccess:
        ...         data = await self._request_json("GET", "https://example.com")
        ...         return SourceSuccess(source=self.name, results=[])
"""

from __future__ import annotations

import asyncio
import time
from abc import ABC, abstractmethod
from typing import Any

import httpx

from ..config.settings import ProviderSettings
from ..models.query import SourceRequest
from ..models.results import SourceSuccess
from ..utils.errors import (
    NetworkConnectionError,
    NetworkTimeoutError,
    ProviderAuthenticationError,
    ProviderError,
    ProviderRateLimitError,
    ProviderServiceError,
    ProviderTimeoutError,
)
from ..utils.logging import get_logger
from ..utils.retry import RetryConfig
from .credentials import Credential
from .retry_mixin import RetryMixin

logger = get_logger(__name__)

# Longest slice of an upstream body quoted in an error message
BODY_EXCERPT_LENGTH = 500


def safe_trim(value: Any) -> str:
    """Trim strings; anything else becomes ``""``."""
    return value.strip() if isinstance(value, str) else ""


class ProviderMetrics(dict[str, Any]):
    """Metrics for a search source."""

    def __init__(self):
        super().__init__(
            {
                "total_queries": 0,
                "successful_queries": 0,
                "failed_queries": 0,
                "timeouts": 0,
                "avg_response_time_ms": 0.0,
                "total_results": 0,
                "last_query_time": None,
                "last_error": None,
            }
        )


class SearchProvider(RetryMixin, ABC):
    """Base class for all search source adapters."""

    name: str = "base"
    label: str = "Base"

    def __init__(
        self,
        config: ProviderSettings,
        client: httpx.AsyncClient | None = None,
        retry_config: RetryConfig | None = None,
    ):
        """Initialize the adapter.

        Args:
            config: Source settings (enabled flag, deadline, endpoint)
            client: HTTP client to use; one is created when omitted
            retry_config: Retry policy overriding the application settings
        """
        self.config = config
        self.enabled = config.enabled
        self.timeout = config.timeout
        self.retry_config = retry_config
        self.client = client or httpx.AsyncClient(
            timeout=config.timeout,
            limits=httpx.Limits(max_connections=20),
        )
        self.metrics = ProviderMetrics()

    @abstractmethod
    async def search(
        self, request: SourceRequest, credential: Credential
    ) -> SourceSuccess:
        """Query the source and return its results in native order."""
        ...

    async def execute(
        self, request: SourceRequest, credential: Credential
    ) -> SourceSuccess:
        """Run ``search`` under the source deadline, tracking metrics.

        Raises:
            ProviderTimeoutError: The deadline expired
            ProviderError: Any transport or response error from ``search``
        """
        start_time = time.time()
        self.metrics["total_queries"] += 1
        self.metrics["last_query_time"] = start_time

        try:
            async with asyncio.timeout(self.timeout):
                outcome = await self.search(request, credential)
        except TimeoutError as e:
            self.metrics["timeouts"] += 1
            error = ProviderTimeoutError(
                self.name,
                timeout=self.timeout,
                message=f"{self.label} request timed out after {self.timeout}s",
                original_error=e,
            )
            self._record_failure(error)
            raise error from e
        except Exception as e:
            self._record_failure(e)
            raise

        duration_ms = (time.time() - start_time) * 1000
        self.metrics["successful_queries"] += 1
        prev_avg = self.metrics["avg_response_time_ms"]
        prev_count = self.metrics["successful_queries"] - 1
        self.metrics["avg_response_time_ms"] = (
            prev_avg * prev_count + duration_ms
        ) / self.metrics["successful_queries"]
        self.metrics["total_results"] += len(outcome.results)

        return outcome

    def _record_failure(self, error: Exception) -> None:
        self.metrics["failed_queries"] += 1
        self.metrics["last_error"] = str(error)[:BODY_EXCERPT_LENGTH]
        logger.error(f"Provider {self.name} search error: {error}")

    async def _request_json(self, method: str, url: str, **kwargs: Any) -> Any:
        """Send a request with retry and decode its JSON body.

        Raises:
            ProviderAuthenticationError: HTTP 401/403
            ProviderRateLimitError: HTTP 429
            ProviderServiceError: Other non-2xx status or a non-JSON body
            NetworkTimeoutError: The HTTP client timed out
            NetworkConnectionError: The request could not be sent
        """

        @self.with_retry
        async def send_http_request():
            response = await self.client.request(method, url, **kwargs)
            response.raise_for_status()
            return response

        try:
            response = await send_http_request()
        except httpx.HTTPStatusError as e:
            raise self._status_error(e.response) from e
        except httpx.TimeoutException as e:
            raise NetworkTimeoutError(
                message=f"{self.label} request timed out",
                url=url,
                original_error=e,
            ) from e
        except httpx.RequestError as e:
            raise NetworkConnectionError(
                message=f"{self.label} request failed: {e}",
                url=url,
                original_error=e,
            ) from e

        try:
            return response.json()
        except ValueError as e:
            raise ProviderServiceError(
                self.name,
                message=f"Invalid JSON response: {response.text[:BODY_EXCERPT_LENGTH]}",
                original_error=e,
            ) from e

    def _status_error(self, response: httpx.Response) -> ProviderError:
        status = response.status_code
        message = f"HTTP {status}: {response.text[:BODY_EXCERPT_LENGTH]}"

        if status in (401, 403):
            return ProviderAuthenticationError(self.name, message=message)
        if status == 429:
            retry_after = response.headers.get("retry-after")
            return ProviderRateLimitError(
                self.name,
                retry_after=float(retry_after)
                if retry_after and retry_after.isdigit()
                else None,
                message=message,
            )
        return ProviderServiceError(self.name, message=message, status_code=status)

    def get_metrics(self) -> dict[str, Any]:
        """Get current metrics."""
        return dict(self.metrics)

    async def close(self):
        """Close the HTTP client."""
        await self.client.aclose()
