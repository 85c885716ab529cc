from __future__ import annotations

from osm_changeset_stats.aggregator import AggregateResult, fold
from osm_changeset_stats.models import ChangesetRecord


def _record(id: str, created_at: str, changes_count: int = 1, editor_tag: str = "iD") -> ChangesetRecord:
    return ChangesetRecord(
        id=id,
        created_at=created_at,
        closed_at=None,
        changes_count=changes_count,
        min_lon=None,
        min_lat=None,
        max_lon=None,
        max_lat=None,
        editor_tag=editor_tag,
    )


def test_fold_accumulates_totals_and_returns_earliest():
    records = [
        _record("3", "2020-01-02T10:00:00Z", 5, "JOSM/1.5 (12345)"),
        _record("2", "2020-01-01T00:00:00Z", 3, "iD 2.20"),
        _record("1", "2020-01-02T08:00:00Z", 0, "unknown"),
    ]

    aggregate, earliest = fold(AggregateResult(), records)

    assert earliest == "2020-01-01T00:00:00Z"
    assert aggregate.total_edits == 8
    assert aggregate.active_days == 2
    assert aggregate.editor_histogram == {"JOSM": 1, "iD": 1, "unknown": 1}
    assert aggregate.record_count == 3
    assert [row[0] for row in aggregate.export_rows] == ["3", "2", "1"]


def test_fold_continues_from_previous_aggregate():
    first, _ = fold(AggregateResult(), [_record("2", "2020-01-02T00:00:00Z", 4)])
    second, earliest = fold(first, [_record("1", "2020-01-02T00:00:00Z", 6, "JOSM/1.0")])

    assert earliest == "2020-01-02T00:00:00Z"
    assert second.total_edits == 10
    assert second.active_days == 1
    assert second.editor_histogram == {"iD": 1, "JOSM": 1}
    assert sum(second.editor_histogram.values()) == second.record_count == 2
    # the earlier aggregate is left untouched
    assert first.total_edits == 4
    assert first.record_count == 1


def test_fold_empty_batch():
    aggregate, earliest = fold(AggregateResult(), [])

    assert earliest is None
    assert aggregate == AggregateResult()


def test_aggregate_to_csv_has_header_and_rows():
    aggregate, _ = fold(AggregateResult(), [_record("1", "2020-01-01T00:00:00Z", 2)])

    lines = aggregate.to_csv().splitlines()

    assert lines[0] == "id,created_at,closed_at,changes_count,min_lon,min_lat,max_lon,max_lat,editor,comment"
    assert lines[1] == "1,2020-01-01T00:00:00Z,,2,,,,,iD,"
