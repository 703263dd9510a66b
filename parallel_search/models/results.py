"""Result models.

A call moves through three shapes of result: ``RawResult`` items produced by a
source adapter and wrapped in a per-source outcome, ``MergedRecord``
accumulators built while deduplicating, and the frozen ``RankedResult`` items
returned to the caller inside ``ParallelSearchOutput``.
"""

from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field

DATAFORSEO = "dataforseo"
BRAVE = "brave"


class RawResult(BaseModel):
    """A single result as returned by one source."""

    model_config = ConfigDict(frozen=True)

    title: str = Field(..., description="Result title")
    url: str = Field(..., description="Result URL as returned by the source")
    description: str | None = Field(None, description="Result snippet")
    domain: str | None = Field(None, description="Host name without www.")
    type: str = Field("organic", description="Result type reported by the source")


class SourceSuccess(BaseModel):
    """A source answered; ``results`` keeps its native ranking order."""

    status: Literal["success"] = "success"
    source: str
    results: list[RawResult] = Field(default_factory=list)
    cost: float | None = Field(None, description="Cost reported by the source")

    def raw_results(self) -> list[RawResult]:
        return self.results


class SourceFailure(BaseModel):
    """A source was queried and errored."""

    status: Literal["failure"] = "failure"
    source: str
    message: str

    def raw_results(self) -> list[RawResult]:
        return []


class SourceSkipped(BaseModel):
    """A source was never queried (no credentials or disabled)."""

    status: Literal["skipped"] = "skipped"
    source: str

    def raw_results(self) -> list[RawResult]:
        return []


SourceOutcome = Annotated[
    SourceSuccess | SourceFailure | SourceSkipped, Field(discriminator="status")
]


class MergedRecord(BaseModel):
    """Accumulator for every result sharing one canonical URL."""

    key: str = Field(..., description="Canonical URL used for deduplication")
    title: str
    url: str
    description: str | None = None
    domain: str | None = None
    type: str = "organic"
    sources: set[str] = Field(default_factory=set)

    @classmethod
    def seed(cls, key: str, result: RawResult, source: str) -> "MergedRecord":
        """Start a record from the first result seen for ``key``."""
        return cls(
            key=key,
            title=result.title,
            url=result.url,
            description=result.description,
            domain=result.domain,
            type=result.type,
            sources={source},
        )


class RankedResult(BaseModel):
    """A deduplicated result with its final rank."""

    model_config = ConfigDict(frozen=True)

    position: int = Field(..., ge=1, description="1-based rank")
    title: str
    url: str
    description: str | None = None
    domain: str | None = None
    type: str = "organic"
    found_by: list[str] = Field(..., min_length=1)


class SearchStats(BaseModel):
    """Outcome statistics for one call."""

    dataforseo_count: int = 0
    brave_count: int = 0
    total_unique: int = 0
    common: int = 0
    dataforseo_cost: float | None = None


class ParallelSearchOutput(BaseModel):
    """Payload returned by the ``parallel_search`` tool."""

    query: str
    results: list[RankedResult] = Field(default_factory=list)
    stats: SearchStats = Field(default_factory=SearchStats)
    errors: dict[str, str] | None = Field(
        None, description="Per-source error messages, only for failed sources"
    )

    def to_payload(self) -> dict[str, Any]:
        """Serialize without absent optional fields."""
        return self.model_dump(mode="json", exclude_none=True)
