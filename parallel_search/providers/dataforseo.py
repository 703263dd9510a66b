"""DataForSEO SERP provider implementation."""

from typing import Any

import httpx

from ..config.settings import DataForSeoSettings
from ..models.query import SourceRequest
from ..models.results import DATAFORSEO, RawResult, SourceSuccess
from ..result_processing.normalization import domain_from_url
from ..utils.errors import ProviderServiceError
from ..utils.retry import RetryConfig
from .base import SearchProvider, safe_trim
from .credentials import Credential

# DataForSEO reports its own status codes inside 200 responses
STATUS_ERROR_THRESHOLD = 40000


class DataForSeoProvider(SearchProvider):
    """Google organic results through the DataForSEO live SERP API."""

    name = DATAFORSEO
    label = "DataForSEO"

    def __init__(
        self,
        config: DataForSeoSettings | None = None,
        client: httpx.AsyncClient | None = None,
        retry_config: RetryConfig | None = None,
    ):
        config = config or DataForSeoSettings()
        super().__init__(config, client=client, retry_config=retry_config)
        self.endpoint = config.endpoint

    async def search(
        self, request: SourceRequest, credential: Credential
    ) -> SourceSuccess:
        """Execute a live organic SERP query."""
        body = [
            {
                "keyword": request.query,
                "language_code": request.language,
                "location_name": request.country,
                "depth": request.count,
            }
        ]

        data = await self._request_json(
            "POST",
            self.endpoint,
            auth=(credential.get("login"), credential.get("password")),
            json=body,
        )

        self._raise_for_api_status(data)
        task = self._first_task(data)

        cost = task.get("cost")
        return SourceSuccess(
            source=self.name,
            results=self.parse_items(self._extract_items(task)),
            cost=float(cost)
            if isinstance(cost, int | float) and not isinstance(cost, bool)
            else None,
        )

    @staticmethod
    def _first_task(data: Any) -> dict[str, Any]:
        if not isinstance(data, dict):
            return {}
        tasks = data.get("tasks")
        if isinstance(tasks, list) and tasks and isinstance(tasks[0], dict):
            return tasks[0]
        return {}

    def _raise_for_api_status(self, data: Any) -> None:
        """Fail on API-level errors reported inside a 200 response."""
        for level in (data, self._first_task(data)):
            if not isinstance(level, dict):
                continue
            code = level.get("status_code")
            if isinstance(code, int) and code >= STATUS_ERROR_THRESHOLD:
                message = safe_trim(level.get("status_message")) or "Unknown error"
                raise ProviderServiceError(
                    self.name,
                    message=f"DataForSEO error {code}: {message}",
                    details={"api_status_code": code},
                )

    @staticmethod
    def _extract_items(task: dict[str, Any]) -> list[Any]:
        result = task.get("result")
        candidates = []
        if isinstance(result, list) and result and isinstance(result[0], dict):
            candidates.append(result[0].get("items"))
        if isinstance(result, dict):
            candidates.append(result.get("items"))
        candidates.append(task.get("items"))

        # The first level that carries items wins, even an empty list
        items = next((c for c in candidates if c is not None), None)
        return items if isinstance(items, list) else []

    @staticmethod
    def parse_items(items: list[Any]) -> list[RawResult]:
        """Map SERP items to raw results, dropping anything without a URL."""
        results = []
        for item in items:
            if not isinstance(item, dict):
                continue

            url = (
                safe_trim(item.get("url"))
                or safe_trim(item.get("link"))
                or safe_trim(item.get("ranked_url"))
                or safe_trim(item.get("href"))
            )
            if not url:
                continue

            description = (
                safe_trim(item.get("description"))
                or safe_trim(item.get("snippet"))
                or safe_trim(item.get("text"))
            )
            results.append(
                RawResult(
                    title=safe_trim(item.get("title")) or url,
                    url=url,
                    description=description or None,
                    domain=domain_from_url(url) or None,
                    type=safe_trim(item.get("type")) or "organic",
                )
            )
        return results
