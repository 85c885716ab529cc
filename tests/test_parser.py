from __future__ import annotations

import pytest

from osm_changeset_stats.errors import MalformedResponse
from osm_changeset_stats.parser import parse_changesets


PAGE = """<?xml version="1.0" encoding="UTF-8"?>
<osm version="0.6" generator="OpenStreetMap server">
  <changeset id="2" created_at="2020-01-02T00:00:00Z" closed_at="2020-01-02T00:10:00Z" changes_count="5">
    <tag k="created_by" v="iD 2.20.0"/>
  </changeset>
  <changeset id="1" created_at="2020-01-01T00:00:00Z" changes_count="3"/>
</osm>
"""


def test_parse_changesets_returns_records_in_document_order():
    records = parse_changesets(PAGE)

    assert [record.id for record in records] == ["2", "1"]
    assert records[0].editor == "iD"
    assert records[1].editor == "unknown"


def test_parse_changesets_empty_document_is_end_of_data():
    assert parse_changesets('<osm version="0.6" generator="OpenStreetMap server"></osm>') == []


def test_parse_changesets_ignores_nested_changeset_elements():
    body = '<osm><note><changeset id="5" created_at="2020-01-01T00:00:00Z"/></note></osm>'

    assert parse_changesets(body) == []


@pytest.mark.parametrize("body", ["", "not xml", "<html><body>Bad Gateway</body>", "<osm><changeset></osm>"])
def test_parse_changesets_rejects_malformed_bodies(body):
    with pytest.raises(MalformedResponse):
        parse_changesets(body)


def test_parse_changesets_rejects_changeset_without_created_at():
    with pytest.raises(MalformedResponse):
        parse_changesets('<osm><changeset id="7"/></osm>')
