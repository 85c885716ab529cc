"""Decoding of changeset listing responses."""

from __future__ import annotations

from xml.etree import ElementTree

from .errors import MalformedResponse
from .models import ChangesetRecord


def parse_changesets(body: str | bytes) -> list[ChangesetRecord]:
    """Return every top-level ``<changeset>`` in ``body``.

    An empty list means the window held no more changesets. Bodies that are
    not well-formed XML raise :class:`MalformedResponse`.
    """

    try:
        root = ElementTree.fromstring(body)
    except ElementTree.ParseError as exc:
        raise MalformedResponse(f"Response is not well-formed XML: {exc}") from exc

    records: list[ChangesetRecord] = []
    for element in root.findall("changeset"):
        try:
            records.append(ChangesetRecord.from_element(element))
        except ValueError as exc:
            raise MalformedResponse(str(exc)) from exc
    return records


__all__ = ["parse_changesets"]
