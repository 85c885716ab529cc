"""Domain models used by the changeset pipeline."""

from __future__ import annotations

from dataclasses import dataclass
from xml.etree.ElementTree import Element


UNKNOWN_EDITOR = "unknown"


@dataclass(slots=True, frozen=True)
class ChangesetRecord:
    """Normalized representation of one OpenStreetMap changeset."""

    id: str
    created_at: str
    closed_at: str | None
    changes_count: int
    min_lon: str | None
    min_lat: str | None
    max_lon: str | None
    max_lat: str | None
    editor_tag: str = UNKNOWN_EDITOR

    @classmethod
    def from_element(cls, element: Element) -> "ChangesetRecord":
        """Convert a ``<changeset>`` element into a :class:`ChangesetRecord`.

        Raises ``ValueError`` when ``created_at`` is missing.
        """

        created_at = element.get("created_at")
        if not created_at:
            raise ValueError(f"changeset {element.get('id')!r} has no created_at")

        editor_tag = UNKNOWN_EDITOR
        for tag in element.findall("tag"):
            if tag.get("k") == "created_by":
                editor_tag = tag.get("v") or UNKNOWN_EDITOR
                break

        return cls(
            id=element.get("id", ""),
            created_at=created_at,
            closed_at=element.get("closed_at") or None,
            changes_count=_parse_count(element.get("changes_count")),
            min_lon=element.get("min_lon") or None,
            min_lat=element.get("min_lat") or None,
            max_lon=element.get("max_lon") or None,
            max_lat=element.get("max_lat") or None,
            editor_tag=editor_tag,
        )

    @property
    def day(self) -> str:
        return self.created_at[:10]

    @property
    def editor(self) -> str:
        return editor_name(self.editor_tag)


def editor_name(tag: str) -> str:
    """Strip version and trailing metadata: ``"JOSM/1.5 (12345)"`` -> ``"JOSM"``."""

    return tag.split("/")[0].split(" ")[0]


def _parse_count(value: str | None) -> int:
    if value is None:
        return 0
    try:
        count = int(value)
    except ValueError:
        return 0
    return max(count, 0)


@dataclass(slots=True, frozen=True)
class UserStatRow:
    """Persisted per-user total."""

    user: str
    edits: int


__all__ = ["ChangesetRecord", "UserStatRow", "editor_name", "UNKNOWN_EDITOR"]
