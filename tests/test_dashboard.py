from __future__ import annotations

from osm_changeset_stats.aggregator import AggregateResult
from osm_changeset_stats.dashboard import DashboardCache, render_summary, render_table
from osm_changeset_stats.models import UserStatRow


def test_dashboard_cache_orders_by_edits_and_upserts():
    cache = DashboardCache([UserStatRow("bob", 5), UserStatRow("alice", 10)])
    cache.upsert(UserStatRow("bob", 20))
    cache.upsert(UserStatRow("carol", 10))

    assert cache.users() == ["bob", "alice", "carol"]
    assert len(cache) == 3

    cache.replace([UserStatRow("dave", 1)])
    assert cache.rows() == [UserStatRow("dave", 1)]


def test_render_summary_lists_editors_by_count():
    aggregate = AggregateResult(
        total_edits=1234,
        days=frozenset({"2020-01-01", "2020-01-02"}),
        editor_histogram={"iD": 1, "JOSM": 3},
        export_rows=(("1",), ("2",), ("3",), ("4",)),
    )

    text = render_summary("mapper", aggregate)

    assert "Total edits: 1,234" in text
    assert "Active days: 2" in text
    lines = text.splitlines()
    josm = next(i for i, line in enumerate(lines) if "JOSM" in line)
    ident = next(i for i, line in enumerate(lines) if line.strip().startswith("iD"))
    assert josm < ident
    assert "75.0%" in lines[josm]


def test_render_table():
    text = render_table([UserStatRow("alice", 12000), UserStatRow("bob", 7)])

    lines = text.splitlines()
    assert lines[0].startswith("User")
    assert "12,000" in lines[2]
    assert lines[3].startswith("bob")


def test_render_table_without_rows():
    assert render_table([]) == "No users stored yet."
