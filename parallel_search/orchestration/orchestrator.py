"""Parallel dispatch of both search sources and fusion of their outcomes.

The orchestrator queries the privileged source and the secondary source
concurrently, waits for both to settle, and runs the fusion pipeline over
whatever came back. A source that fails or times out only costs its own
results; a source without credentials is skipped without being called.

Example:
    >>> orchestrator = ParallelSearchOrchestrator(
    ...     DataForSeoProvider(), BraveProvider(), CredentialResolver.from_settings(settings)
    ... )
    >>> output = await orchestrator.search(ParallelSearchQuery(query="tropical wood"))
"""

from __future__ import annotations

import asyncio

from ..config import AppSettings, get_settings
from ..models.query import ParallelSearchQuery, SourceRequest
from ..models.results import (
    ParallelSearchOutput,
    SearchStats,
    SourceFailure,
    SourceOutcome,
    SourceSkipped,
)
from ..providers.base import SearchProvider
from ..providers.credentials import Credential, CredentialResolver
from ..result_processing import compute_stats, fuse, order_records
from ..utils.errors import QueryValidationError, bounded_message
from ..utils.logging import get_logger, log_query, log_results

logger = get_logger(__name__)


class ParallelSearchOrchestrator:
    """Run one search call across two sources.

    Attributes:
        primary: The privileged source; its ranking and field values win
        secondary: The source that fills gaps and contributes extra results
        resolver: Credential lookup chain consulted on every call
        settings: Application settings (defaults, deadlines, message bounds)
    """

    def __init__(
        self,
        primary: SearchProvider,
        secondary: SearchProvider,
        resolver: CredentialResolver,
        settings: AppSettings | None = None,
    ):
        self.primary = primary
        self.secondary = secondary
        self.resolver = resolver
        self.settings = settings or get_settings()

    @property
    def providers(self) -> tuple[SearchProvider, SearchProvider]:
        return (self.primary, self.secondary)

    @property
    def privileged(self) -> str:
        return self.primary.name

    def build_request(self, query: ParallelSearchQuery) -> SourceRequest:
        """Apply the configured defaults to the caller's arguments."""
        defaults = self.settings.defaults
        return SourceRequest(
            query=query.query,
            count=query.count if query.count is not None else defaults.count,
            country=query.country or defaults.country,
            language=query.language or defaults.language,
            freshness=query.freshness,
        )

    def credential_for(self, provider: SearchProvider) -> Credential | None:
        """Return the credential to dispatch ``provider`` with, or None to skip it."""
        if not provider.enabled:
            logger.debug(f"Source {provider.name} is disabled, skipping")
            return None

        credential = self.resolver.resolve(provider.name)
        if credential is None:
            logger.debug(f"No credentials for {provider.name}, skipping")
        return credential

    async def _dispatch(
        self,
        provider: SearchProvider,
        request: SourceRequest,
        credential: Credential | None,
    ) -> SourceOutcome:
        if credential is None:
            return SourceSkipped(source=provider.name)

        try:
            return await provider.execute(request, credential)
        except Exception as e:
            message = bounded_message(e, self.settings.error_message_max_length)
            logger.warning(f"{provider.label} search failed: {message}")
            return SourceFailure(source=provider.name, message=message)

    async def search(self, query: ParallelSearchQuery) -> ParallelSearchOutput:
        """Execute one parallel search call.

        Args:
            query: The validated tool arguments

        Returns:
            Ranked, deduplicated results with stats and per-source errors

        Raises:
            QueryValidationError: The query is empty after trimming
        """
        if not query.query:
            raise QueryValidationError("Missing required param: query", query="")

        request = self.build_request(query)
        credentials = [self.credential_for(p) for p in self.providers]
        dispatched = [
            p for p, c in zip(self.providers, credentials, strict=True) if c is not None
        ]
        log_query(logger, request.model_dump(), sources=[p.name for p in dispatched])

        call_timeout = self.settings.call_timeout
        try:
            async with asyncio.timeout(call_timeout):
                primary, secondary = await asyncio.gather(
                    self._dispatch(self.primary, request, credentials[0]),
                    self._dispatch(self.secondary, request, credentials[1]),
                )
        except TimeoutError:
            # Per-source deadlines never escape _dispatch, so this is the call deadline
            logger.warning(f"Call deadline of {call_timeout}s expired for {query.query!r}")
            return self._deadline_output(query.query, dispatched, call_timeout)

        return self.compose(query.query, primary, secondary)

    def compose(
        self, query: str, primary: SourceOutcome, secondary: SourceOutcome
    ) -> ParallelSearchOutput:
        """Fuse, rank and summarize two settled outcomes."""
        fused = fuse(primary, secondary, privileged=self.privileged)
        results = order_records(
            fused.records,
            fused.keys_for(primary.source),
            fused.keys_for(secondary.source),
            self.privileged,
        )
        stats = compute_stats(primary, secondary, results)

        errors = {
            outcome.source: outcome.message
            for outcome in (primary, secondary)
            if isinstance(outcome, SourceFailure)
        }

        log_results(logger, stats.model_dump())
        return ParallelSearchOutput(
            query=query, results=results, stats=stats, errors=errors or None
        )

    def _deadline_output(
        self,
        query: str,
        dispatched: list[SearchProvider],
        call_timeout: float | None,
    ) -> ParallelSearchOutput:
        errors = {
            p.name: f"{p.label} search cancelled: call deadline of {call_timeout}s expired"
            for p in dispatched
        }
        return ParallelSearchOutput(
            query=query, results=[], stats=SearchStats(), errors=errors or None
        )

    async def close(self):
        """Close both sources' HTTP clients."""
        results = await asyncio.gather(
            *(p.close() for p in self.providers), return_exceptions=True
        )
        for provider, result in zip(self.providers, results, strict=True):
            if isinstance(result, Exception):
                logger.error(f"Failed to close {provider.name}: {result}")
