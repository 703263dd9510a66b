"""Outcome statistics for a fused call."""

from ..models.results import (
    BRAVE,
    DATAFORSEO,
    RankedResult,
    SearchStats,
    SourceOutcome,
    SourceSuccess,
)


def compute_stats(
    primary: SourceOutcome,
    secondary: SourceOutcome,
    results: list[RankedResult],
) -> SearchStats:
    """Count what each source contributed and how much overlapped.

    Cost comes from the DataForSEO outcome only and stays ``None`` when the
    source did not report one; an unknown cost is not a free query.
    """
    counts = {DATAFORSEO: 0, BRAVE: 0}
    cost = None

    for outcome in (primary, secondary):
        if outcome.source in counts:
            counts[outcome.source] = len(outcome.raw_results())
        if outcome.source == DATAFORSEO and isinstance(outcome, SourceSuccess):
            cost = outcome.cost

    return SearchStats(
        dataforseo_count=counts[DATAFORSEO],
        brave_count=counts[BRAVE],
        total_unique=len(results),
        common=sum(1 for r in results if len(r.found_by) > 1),
        dataforseo_cost=cost,
    )
