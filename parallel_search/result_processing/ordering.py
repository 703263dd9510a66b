"""Final ranking of deduplicated records."""

from collections.abc import Iterable, Mapping

from ..models.results import MergedRecord, RankedResult


def sort_sources(sources: Iterable[str], privileged: str) -> list[str]:
    """Privileged source first, then the rest alphabetically."""
    return sorted(sources, key=lambda s: (s != privileged, s))


def order_records(
    records: Mapping[str, MergedRecord],
    privileged_keys: list[str],
    secondary_keys: list[str],
    privileged_source: str,
) -> list[RankedResult]:
    """Assign final positions to the deduplicated records.

    The privileged source's native order comes first, then results only the
    secondary source found, in its native order. Within one source the first
    occurrence of a key decides its rank. Any record neither walk reached is
    appended in creation order so nothing is dropped.

    ``records`` is only used for lookup; rank never depends on its iteration
    order except for that final safety net.
    """
    emitted: dict[str, None] = {}

    for key in privileged_keys:
        if key in records and key not in emitted:
            emitted[key] = None

    privileged_set = set(privileged_keys)
    for key in secondary_keys:
        if key in privileged_set or key in emitted:
            continue
        if key in records:
            emitted[key] = None

    for key in records:
        if key not in emitted:
            emitted[key] = None

    ranked = []
    for position, key in enumerate(emitted, start=1):
        record = records[key]
        ranked.append(
            RankedResult(
                position=position,
                title=record.title,
                url=record.url,
                description=record.description or None,
                domain=record.domain or None,
                type=record.type or "organic",
                found_by=sort_sources(record.sources, privileged_source),
            )
        )
    return ranked
