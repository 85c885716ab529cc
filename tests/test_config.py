from __future__ import annotations

from pathlib import Path

import pydantic
import pytest

from osm_changeset_stats.config import AppConfig, OsmSettings


def test_from_env_defaults():
    config = AppConfig.from_env(env={})

    assert config.osm.api_url == "https://api.openstreetmap.org/api/0.6"
    assert config.osm.page_size == 100
    assert config.osm.request_delay == 1.1
    assert config.osm.request_timeout == 30.0
    assert config.osm.max_pages is None
    assert config.storage.export_directory == Path("changesets")
    assert config.refresh.interval == 1200.0
    assert config.refresh.max_concurrency == 1


def test_from_env_reads_environment_and_overrides():
    env = {
        "OSM_API_URL": "https://master.apis.dev.openstreetmap.org/api/0.6",
        "OSM_PAGE_SIZE": "50",
        "OSM_REQUEST_DELAY": "2.5",
        "OSM_MAX_PAGES": "10",
        "DATABASE_URL": "postgresql://db/stats",
        "EXPORT_DIRECTORY": "/tmp/exports",
        "REFRESH_INTERVAL": "60",
    }

    config = AppConfig.from_env(env=env, overrides={"database_dsn": "postgresql://override/stats"})

    assert config.osm.api_url == env["OSM_API_URL"]
    assert config.osm.page_size == 50
    assert config.osm.request_delay == 2.5
    assert config.osm.max_pages == 10
    assert config.database.dsn == "postgresql://override/stats"
    assert config.storage.export_directory == Path("/tmp/exports")
    assert config.refresh.interval == 60.0


def test_page_size_is_capped_at_one_hundred():
    with pytest.raises(pydantic.ValidationError):
        OsmSettings(page_size=101)
