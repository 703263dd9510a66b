"""FastMCP server exposing the parallel search tool.

This module provides the SearchServer class that wires the whole system
together: settings, logging, the DataForSEO and Brave sources, the credential
resolver and the orchestrator. It registers the ``parallel_search`` MCP tool
and two plain HTTP routes for use outside an MCP client.

The server supports both stdio and streamable HTTP transports.

Example:
    Basic server initialization:
        >>> server = SearchServer()
        >>> server.run(transport="streamable-http", host="0.0.0.0", port=8000)

    For MCP clients over stdio:
        >>> server = SearchServer()
        >>> server.run(transport="stdio")
"""

from __future__ import annotations

import asyncio
from typing import Annotated, Any

from fastmcp import FastMCP
from fastmcp.exceptions import ToolError
from pydantic import Field, ValidationError
from starlette.requests import Request
from starlette.responses import JSONResponse

from .config import AppSettings, get_settings
from .models.base import HealthResponse, HealthStatus, SourceStatus
from .models.query import MAX_COUNT, MIN_COUNT, ParallelSearchQuery
from .models.results import BRAVE, DATAFORSEO
from .orchestration import ParallelSearchOrchestrator
from .providers import BraveProvider, CredentialResolver, DataForSeoProvider
from .providers.base import SearchProvider
from .utils.errors import (
    ConfigurationError,
    QueryValidationError,
    SearchError,
    format_exception,
    http_error_response,
)
from .utils.logging import configure_logging, get_logger

logger = get_logger(__name__)

SUPPORTED_TRANSPORTS = ("stdio", "streamable-http")

TOOL_DESCRIPTION = (
    "Search the web using DataForSEO + Brave in parallel, "
    "merge and deduplicate results."
)


class SearchServer:
    """FastMCP server for the parallel search tool.

    Attributes:
        settings: Server configuration settings
        mcp: FastMCP server instance
        orchestrator: Runs each call across both sources
    """

    def __init__(
        self,
        settings: AppSettings | None = None,
        primary: SearchProvider | None = None,
        secondary: SearchProvider | None = None,
        resolver: CredentialResolver | None = None,
    ) -> None:
        """Initialize the server and all of its components.

        Every argument defaults to what the application settings describe;
        passing them explicitly is mostly useful in tests.
        """
        self.settings = settings or get_settings()
        configure_logging(self.settings.log_level)

        self.mcp = FastMCP(
            name=self.settings.app_name,
            instructions="""
            This server searches the web with DataForSEO and Brave in parallel.
            Use the parallel_search tool to get one deduplicated result list;
            DataForSEO ranking comes first, Brave adds what DataForSEO missed.
            """,
        )

        self.orchestrator = ParallelSearchOrchestrator(
            primary=primary
            or DataForSeoProvider(self.settings.get_provider_config(DATAFORSEO)),
            secondary=secondary
            or BraveProvider(self.settings.get_provider_config(BRAVE)),
            resolver=resolver or CredentialResolver.from_settings(self.settings),
            settings=self.settings,
        )
        logger.info(
            "Initialized sources: "
            f"{[p.name for p in self.orchestrator.providers]}"
        )

        self._register_tools()
        self._register_custom_routes()

    async def handle_parallel_search(self, params: dict[str, Any]) -> dict[str, Any]:
        """Run one search call from its raw arguments and return the JSON payload.

        Raises:
            QueryValidationError: The arguments are invalid or the query is empty
        """
        try:
            query = ParallelSearchQuery.model_validate(params)
        except ValidationError as e:
            raise QueryValidationError(
                "Invalid search parameters",
                validation_errors=[err["msg"] for err in e.errors()],
            ) from e

        output = await self.orchestrator.search(query)
        return output.to_payload()

    def _register_tools(self):
        """Register the search tool with the FastMCP server."""

        @self.mcp.tool(name="parallel_search", description=TOOL_DESCRIPTION)
        async def parallel_search(
            query: Annotated[str, Field(description="Search query")],
            count: Annotated[
                int | None,
                Field(
                    description="Number of results per engine (default 10)",
                    ge=MIN_COUNT,
                    le=MAX_COUNT,
                ),
            ] = None,
            country: Annotated[
                str | None,
                Field(description="Country for results (default: France)"),
            ] = None,
            language: Annotated[
                str | None, Field(description="Language code (default: fr)")
            ] = None,
            freshness: Annotated[
                str | None,
                Field(description="Freshness filter for Brave (pd, pw, pm, py)"),
            ] = None,
        ) -> dict[str, Any]:
            try:
                return await self.handle_parallel_search(
                    {
                        "query": query,
                        "count": count,
                        "country": country,
                        "language": language,
                        "freshness": freshness,
                    }
                )
            except QueryValidationError as e:
                raise ToolError(e.message) from e

    def source_status(self, provider: SearchProvider) -> SourceStatus:
        """Describe whether a source would be dispatched and how it has fared."""
        metrics = provider.get_metrics()

        if not provider.enabled:
            return SourceStatus(
                name=provider.name,
                health=HealthStatus.UNHEALTHY,
                configured=False,
                message="Disabled",
                metrics=metrics,
            )
        if self.orchestrator.resolver.resolve(provider.name) is None:
            return SourceStatus(
                name=provider.name,
                health=HealthStatus.UNHEALTHY,
                configured=False,
                message="No credentials; source is skipped",
                metrics=metrics,
            )

        if metrics["failed_queries"] and not metrics["successful_queries"]:
            return SourceStatus(
                name=provider.name,
                health=HealthStatus.DEGRADED,
                configured=True,
                message=f"Last error: {metrics['last_error']}",
                metrics=metrics,
            )
        return SourceStatus(
            name=provider.name,
            health=HealthStatus.HEALTHY,
            configured=True,
            message="Ready",
            metrics=metrics,
        )

    def health(self) -> HealthResponse:
        """Build the health report for both sources."""
        sources = {
            p.name: self.source_status(p) for p in self.orchestrator.providers
        }

        overall = HealthStatus.HEALTHY
        if all(s.health == HealthStatus.UNHEALTHY for s in sources.values()):
            overall = HealthStatus.UNHEALTHY
        elif any(s.health != HealthStatus.HEALTHY for s in sources.values()):
            overall = HealthStatus.DEGRADED

        return HealthResponse(
            status=overall.value,
            configured_sources=sum(1 for s in sources.values() if s.configured),
            total_sources=len(sources),
            sources=sources,
        )

    def _register_custom_routes(self):
        """Register plain HTTP routes served alongside the MCP endpoint."""

        @self.mcp.custom_route("/search", methods=["POST"])
        async def search(request: Request) -> JSONResponse:
            """Execute a parallel search from a JSON body."""
            try:
                try:
                    data = await request.json()
                except ValueError as e:
                    raise QueryValidationError(f"Invalid JSON body: {e}") from e
                if not isinstance(data, dict):
                    raise QueryValidationError("Request body must be a JSON object")
                payload = await self.handle_parallel_search(data)
                return JSONResponse(content=payload)
            except SearchError as e:
                return JSONResponse(
                    content=http_error_response(e), status_code=e.status_code
                )
            except Exception as e:
                logger.error(
                    f"Unhandled error in /search: {e}",
                    extra={"error": format_exception(e)},
                )
                return JSONResponse(
                    content=http_error_response(e, status_code=500), status_code=500
                )

        @self.mcp.custom_route("/health", methods=["GET"])
        async def health_check(request: Request) -> JSONResponse:
            """Health check endpoint."""
            response = self.health()
            status_code = 200 if response.status == HealthStatus.HEALTHY.value else 503
            return JSONResponse(
                content=response.model_dump(mode="json"), status_code=status_code
            )

    async def start(
        self,
        transport: str = "stdio",
        host: str = "0.0.0.0",
        port: int = 8000,
    ):
        """Start the FastMCP server.

        Raises:
            ConfigurationError: The transport is not supported
        """
        if transport not in SUPPORTED_TRANSPORTS:
            raise ConfigurationError(
                f"Unsupported transport: {transport}", config_key="transport"
            )

        logger.info(
            f"Starting {self.settings.app_name} with transport {transport}"
            + (f" on {host}:{port}" if transport != "stdio" else "")
        )

        try:
            if transport == "stdio":
                await self.mcp.run_async(transport="stdio")
            else:
                await self.mcp.run_async(transport=transport, host=host, port=port)
        finally:
            await self.close()

    def run(
        self,
        transport: str | None = None,
        host: str | None = None,
        port: int | None = None,
    ):
        """Run the server synchronously."""
        asyncio.run(
            self.start(
                transport=transport or self.settings.transport,
                host=host or self.settings.host,
                port=port or self.settings.port,
            )
        )

    async def close(self):
        """Close both sources' HTTP clients."""
        logger.info("Closing sources...")
        await self.orchestrator.close()
        logger.info("All resources closed")
