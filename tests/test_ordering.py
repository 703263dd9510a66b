"""Test final ranking of merged records."""

from parallel_search.models.results import (
    BRAVE,
    DATAFORSEO,
    SourceFailure,
    SourceSkipped,
    SourceSuccess,
)
from parallel_search.result_processing.fusion import fuse
from parallel_search.result_processing.ordering import order_records, sort_sources
from tests.conftest import make_result


def rank(primary, secondary):
    fused = fuse(primary, secondary, privileged=DATAFORSEO)
    return order_records(
        fused.records,
        fused.keys_for(DATAFORSEO),
        fused.keys_for(BRAVE),
        DATAFORSEO,
    )


def test_privileged_order_then_secondary_only():
    primary = SourceSuccess(
        source=DATAFORSEO,
        results=[make_result(f"https://example.com/{k}") for k in "ABC"],
    )
    secondary = SourceSuccess(
        source=BRAVE,
        results=[make_result(f"https://example.com/{k}") for k in "BD"],
    )

    results = rank(primary, secondary)

    assert [r.url for r in results] == [
        "https://example.com/A",
        "https://example.com/B",
        "https://example.com/C",
        "https://example.com/D",
    ]
    assert [r.position for r in results] == [1, 2, 3, 4]
    assert results[1].found_by == [DATAFORSEO, BRAVE]
    assert results[0].found_by == [DATAFORSEO]
    assert results[3].found_by == [BRAVE]


def test_secondary_order_used_when_privileged_failed():
    primary = SourceFailure(source=DATAFORSEO, message="HTTP 401: unauthorized")
    secondary = SourceSuccess(
        source=BRAVE,
        results=[make_result("https://y.com/"), make_result("https://x.com/")],
    )

    results = rank(primary, secondary)

    assert [r.url for r in results] == ["https://y.com/", "https://x.com/"]
    assert [r.position for r in results] == [1, 2]


def test_privileged_results_unchanged_when_secondary_skipped():
    urls = ["https://b.com/1", "https://a.com/2", "https://c.com/3"]
    primary = SourceSuccess(
        source=DATAFORSEO,
        results=[make_result(u, description=f"d{i}") for i, u in enumerate(urls)],
    )

    results = rank(primary, SourceSkipped(source=BRAVE))

    assert [r.url for r in results] == urls
    assert [r.description for r in results] == ["d0", "d1", "d2"]


def test_first_occurrence_decides_rank():
    primary = SourceSuccess(
        source=DATAFORSEO,
        results=[
            make_result("https://example.com/a"),
            make_result("https://example.com/b"),
            make_result("https://www.example.com/a/"),
        ],
    )

    results = rank(primary, SourceSkipped(source=BRAVE))

    assert [r.url for r in results] == [
        "https://www.example.com/a/",
        "https://example.com/b",
    ]
    assert [r.position for r in results] == [1, 2]


def test_positions_are_contiguous_and_unique():
    primary = SourceSuccess(
        source=DATAFORSEO,
        results=[make_result(f"https://p.com/{i}") for i in range(4)],
    )
    secondary = SourceSuccess(
        source=BRAVE,
        results=[make_result(f"https://p.com/{i}") for i in range(2, 7)],
    )

    results = rank(primary, secondary)

    assert [r.position for r in results] == list(range(1, len(results) + 1))
    assert len({r.url for r in results}) == len(results)


def test_empty_when_both_unavailable():
    results = rank(
        SourceSkipped(source=DATAFORSEO),
        SourceFailure(source=BRAVE, message="boom"),
    )
    assert results == []


def test_sort_sources_puts_privileged_first():
    assert sort_sources({BRAVE, DATAFORSEO}, DATAFORSEO) == [DATAFORSEO, BRAVE]
    assert sort_sources(["zeta", "alpha", DATAFORSEO], DATAFORSEO) == [
        DATAFORSEO,
        "alpha",
        "zeta",
    ]
