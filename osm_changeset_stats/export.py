"""CSV export artifacts."""

from __future__ import annotations

import csv
import io
from typing import Iterable, Sequence

from .models import ChangesetRecord, UserStatRow

EXPORT_FIELDNAMES = (
    "id",
    "created_at",
    "closed_at",
    "changes_count",
    "min_lon",
    "min_lat",
    "max_lon",
    "max_lat",
    "editor",
    "comment",
)

DASHBOARD_FIELDNAMES = ("user", "edits")


def export_row(record: ChangesetRecord) -> tuple[str, ...]:
    # comment is reserved and always empty
    return (
        record.id,
        record.created_at,
        record.closed_at or "",
        str(record.changes_count),
        record.min_lon or "",
        record.min_lat or "",
        record.max_lon or "",
        record.max_lat or "",
        record.editor,
        "",
    )


def render_export(rows: Iterable[Sequence[str]]) -> str:
    return _render(EXPORT_FIELDNAMES, rows)


def render_dashboard(rows: Iterable[UserStatRow]) -> str:
    return _render(DASHBOARD_FIELDNAMES, ((row.user, str(row.edits)) for row in rows))


def _render(header: Sequence[str], rows: Iterable[Sequence[str]]) -> str:
    handle = io.StringIO()
    writer = csv.writer(handle, lineterminator="\n")
    writer.writerow(header)
    writer.writerows(rows)
    return handle.getvalue()


__all__ = ["EXPORT_FIELDNAMES", "DASHBOARD_FIELDNAMES", "export_row", "render_export", "render_dashboard"]
