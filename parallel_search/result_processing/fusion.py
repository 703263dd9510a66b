"""Cross-source deduplication with field-fill merging."""

from dataclasses import dataclass, field

from ..models.results import MergedRecord, RawResult, SourceOutcome, SourceSuccess
from .normalization import normalize_url

MERGED_FIELDS = ("title", "url", "description", "domain", "type")


@dataclass
class FusionResult:
    """Records keyed by canonical URL plus each source's raw key order.

    ``records`` preserves creation order. ``keys_by_source`` lists the key of
    every kept raw result in the source's native order, duplicates included.
    """

    records: dict[str, MergedRecord] = field(default_factory=dict)
    keys_by_source: dict[str, list[str]] = field(default_factory=dict)

    def keys_for(self, source: str) -> list[str]:
        return self.keys_by_source.get(source, [])


def _overwrite(record: MergedRecord, result: RawResult) -> None:
    # Privileged data wins wherever it actually carries a value
    for name in MERGED_FIELDS:
        value = getattr(result, name)
        if value:
            setattr(record, name, value)


def _fill_gaps(record: MergedRecord, result: RawResult) -> None:
    for name in MERGED_FIELDS:
        value = getattr(result, name)
        if value and not getattr(record, name):
            setattr(record, name, value)


def fuse(
    primary: SourceOutcome,
    secondary: SourceOutcome,
    privileged: str | None = None,
) -> FusionResult:
    """Deduplicate the results of two sources by canonical URL.

    Args:
        primary: Outcome of the first source
        secondary: Outcome of the second source
        privileged: Source whose field values overwrite the others'
            (defaults to the primary source)

    Returns:
        The merged records and the per-source key order
    """
    if privileged is None:
        privileged = primary.source

    fused = FusionResult()

    for outcome in (primary, secondary):
        keys = fused.keys_by_source.setdefault(outcome.source, [])
        if not isinstance(outcome, SourceSuccess):
            continue

        for result in outcome.results:
            if not result.url or not result.url.strip():
                continue

            key = normalize_url(result.url)
            keys.append(key)

            record = fused.records.get(key)
            if record is None:
                fused.records[key] = MergedRecord.seed(key, result, outcome.source)
                continue

            record.sources.add(outcome.source)
            if outcome.source == privileged:
                _overwrite(record, result)
            else:
                _fill_gaps(record, result)

    return fused
