"""Folding changesets into per-user totals."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Mapping

from .export import export_row, render_export
from .models import ChangesetRecord


@dataclass(slots=True, frozen=True)
class AggregateResult:
    """Totals accumulated over one user's full changeset history."""

    total_edits: int = 0
    days: frozenset[str] = frozenset()
    editor_histogram: Mapping[str, int] = field(default_factory=dict)
    export_rows: tuple[tuple[str, ...], ...] = ()

    @property
    def active_days(self) -> int:
        return len(self.days)

    @property
    def record_count(self) -> int:
        return len(self.export_rows)

    def to_csv(self) -> str:
        return render_export(self.export_rows)


def fold(
    aggregate: AggregateResult, records: Iterable[ChangesetRecord]
) -> tuple[AggregateResult, str | None]:
    """Fold ``records`` into ``aggregate``.

    Returns the new aggregate and the smallest ``created_at`` in the batch,
    or ``None`` when the batch is empty. Timestamps are compared as strings;
    they must all share the upstream's fixed-width UTC format.
    """

    total_edits = aggregate.total_edits
    days = set(aggregate.days)
    histogram = dict(aggregate.editor_histogram)
    rows = list(aggregate.export_rows)
    earliest: str | None = None

    for record in records:
        total_edits += record.changes_count
        days.add(record.day)
        editor = record.editor
        histogram[editor] = histogram.get(editor, 0) + 1
        rows.append(export_row(record))
        if earliest is None or record.created_at < earliest:
            earliest = record.created_at

    updated = AggregateResult(
        total_edits=total_edits,
        days=frozenset(days),
        editor_histogram=histogram,
        export_rows=tuple(rows),
    )
    return updated, earliest


__all__ = ["AggregateResult", "fold"]
