"""Brave Search provider implementation."""

from typing import Any

import httpx

from ..config.settings import BraveSettings
from ..models.query import SourceRequest
from ..models.results import BRAVE, RawResult, SourceSuccess
from ..result_processing.normalization import domain_from_url
from ..utils.retry import RetryConfig
from .base import SearchProvider, safe_trim
from .credentials import Credential

# Brave expects ISO 3166-1 alpha-2 country codes
COUNTRY_TO_ISO = {
    "france": "FR",
    "germany": "DE",
    "spain": "ES",
    "italy": "IT",
    "portugal": "PT",
    "netherlands": "NL",
    "belgium": "BE",
    "switzerland": "CH",
    "austria": "AT",
    "united states": "US",
    "united kingdom": "GB",
    "canada": "CA",
    "australia": "AU",
    "brazil": "BR",
    "mexico": "MX",
    "argentina": "AR",
    "chile": "CL",
    "japan": "JP",
    "china": "CN",
    "india": "IN",
    "south korea": "KR",
    "indonesia": "ID",
    "malaysia": "MY",
    "philippines": "PH",
    "hong kong": "HK",
    "taiwan": "TW",
    "new zealand": "NZ",
    "south africa": "ZA",
    "saudi arabia": "SA",
    "turkey": "TR",
    "russia": "RU",
    "poland": "PL",
    "sweden": "SE",
    "norway": "NO",
    "denmark": "DK",
    "finland": "FI",
    "greece": "GR",
    "singapore": "SG",
}


def country_to_iso(country: str) -> str:
    """Map a country name or code to the code Brave expects.

    Two-letter inputs are taken as codes already; unknown names are passed
    through upper-cased.
    """
    name = country.strip() if country else ""
    if not name:
        return ""
    if len(name) == 2:
        return name.upper()
    return COUNTRY_TO_ISO.get(name.lower(), name.upper())


class BraveProvider(SearchProvider):
    """Web results from the Brave Search API."""

    name = BRAVE
    label = "Brave"

    def __init__(
        self,
        config: BraveSettings | None = None,
        client: httpx.AsyncClient | None = None,
        retry_config: RetryConfig | None = None,
    ):
        config = config or BraveSettings()
        super().__init__(config, client=client, retry_config=retry_config)
        self.endpoint = config.endpoint

    def build_params(self, request: SourceRequest) -> dict[str, str]:
        """Build the query-string parameters for a request."""
        params = {"q": request.query, "count": str(request.count)}
        if request.language:
            params["search_lang"] = request.language
        country = country_to_iso(request.country)
        if country:
            params["country"] = country
        if request.freshness:
            params["freshness"] = request.freshness
        return params

    async def search(
        self, request: SourceRequest, credential: Credential
    ) -> SourceSuccess:
        """Execute a Brave web search."""
        data = await self._request_json(
            "GET",
            self.endpoint,
            params=self.build_params(request),
            headers={
                "X-Subscription-Token": credential.get("api_key"),
                "Accept": "application/json",
            },
        )

        return SourceSuccess(
            source=self.name,
            results=self.parse_items(self._extract_items(data)),
        )

    @staticmethod
    def _extract_items(data: Any) -> list[Any]:
        if not isinstance(data, dict):
            return []
        web = data.get("web")
        items = web.get("results") if isinstance(web, dict) else None
        if not items:
            items = data.get("results")
        return items if isinstance(items, list) else []

    @staticmethod
    def parse_items(items: list[Any]) -> list[RawResult]:
        """Map Brave web results to raw results, dropping anything without a URL."""
        results = []
        for item in items:
            if not isinstance(item, dict):
                continue

            url = safe_trim(item.get("url"))
            if not url:
                continue

            results.append(
                RawResult(
                    title=safe_trim(item.get("title")) or url,
                    url=url,
                    description=safe_trim(item.get("description")) or None,
                    domain=domain_from_url(url) or None,
                    type="organic",
                )
            )
        return results
