"""Query models."""

from pydantic import BaseModel, Field, field_validator

MIN_COUNT = 1
MAX_COUNT = 50


class ParallelSearchQuery(BaseModel):
    """A search call as submitted to the orchestrator."""

    query: str = Field("", description="The search query text")
    count: int | None = Field(
        None, description="Number of results requested from each source"
    )
    country: str | None = Field(None, description="Country for results")
    language: str | None = Field(None, description="Language code for results")
    freshness: str | None = Field(
        None, description="Freshness filter for Brave (pd, pw, pm, py)"
    )

    @field_validator("query", mode="before")
    @classmethod
    def strip_query(cls, v: object) -> str:
        """Trim the query; anything that is not a string counts as empty."""
        return v.strip() if isinstance(v, str) else ""

    @field_validator("country", "language", "freshness", mode="before")
    @classmethod
    def blank_to_none(cls, v: object) -> str | None:
        """Treat blank optional strings as absent."""
        if not isinstance(v, str):
            return None
        return v.strip() or None

    @field_validator("count")
    @classmethod
    def clamp_count(cls, v: int | None) -> int | None:
        """Clamp the requested count into the supported range."""
        if v is None:
            return None
        return max(MIN_COUNT, min(MAX_COUNT, v))


class SourceRequest(BaseModel):
    """Fully resolved parameters handed to each source adapter."""

    query: str
    count: int = Field(10, ge=MIN_COUNT, le=MAX_COUNT)
    country: str = "France"
    language: str = "fr"
    freshness: str | None = None
