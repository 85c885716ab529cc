"""Caller-owned dashboard state and plain-text rendering."""

from __future__ import annotations

from typing import Iterable

from .aggregator import AggregateResult
from .models import UserStatRow


class DashboardCache:
    """Last known ``user -> edits`` rows, owned by whoever renders the dashboard."""

    def __init__(self, rows: Iterable[UserStatRow] = ()) -> None:
        self._rows: dict[str, UserStatRow] = {}
        self.replace(rows)

    def replace(self, rows: Iterable[UserStatRow]) -> None:
        self._rows = {row.user: row for row in rows}

    def upsert(self, row: UserStatRow) -> None:
        self._rows[row.user] = row

    def rows(self) -> list[UserStatRow]:
        return sorted(self._rows.values(), key=lambda row: (-row.edits, row.user))

    def users(self) -> list[str]:
        return [row.user for row in self.rows()]

    def __len__(self) -> int:
        return len(self._rows)


def render_summary(username: str, aggregate: AggregateResult) -> str:
    lines = [
        f"{username}",
        f"  Total edits: {aggregate.total_edits:,}",
        f"  Active days: {aggregate.active_days:,}",
        f"  Changesets:  {aggregate.record_count:,}",
    ]
    histogram = sorted(aggregate.editor_histogram.items(), key=lambda item: (-item[1], item[0]))
    if histogram:
        lines.append("  Editors:")
        width = max(len(name) for name, _ in histogram)
        total = aggregate.record_count or 1
        for name, count in histogram:
            lines.append(f"    {name:<{width}}  {count:>6}  {count / total:6.1%}")
    return "\n".join(lines)


def render_table(rows: Iterable[UserStatRow]) -> str:
    rows = list(rows)
    if not rows:
        return "No users stored yet."
    width = max(len("User"), *(len(row.user) for row in rows))
    lines = [f"{'User':<{width}}  {'Edits':>10}", f"{'-' * width}  {'-' * 10}"]
    for row in rows:
        lines.append(f"{row.user:<{width}}  {row.edits:>10,}")
    return "\n".join(lines)


__all__ = ["DashboardCache", "render_summary", "render_table"]
