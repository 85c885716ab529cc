"""Command line interface for OSM changeset stats."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Any, Optional

import typer

from .config import AppConfig
from .dashboard import render_summary, render_table
from .db import Database
from .errors import (
    CollectionError,
    ExportNotFound,
    NoContributions,
    PersistenceError,
    UnknownUser,
)
from .export_store import ExportStore
from .osm_client import OsmApiClient
from .service import StatsService

app = typer.Typer(add_completion=False)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


def _load_config(dsn: Optional[str], export_dir: Optional[Path] = None) -> AppConfig:
    overrides: dict[str, Any] = {}
    if dsn:
        overrides["database_dsn"] = dsn
    if export_dir:
        overrides["export_directory"] = export_dir
    return AppConfig.from_env(overrides=overrides)


def _fail(message: str, code: int = 1) -> None:
    typer.secho(f"Error: {message}", fg=typer.colors.RED, err=True)
    raise typer.Exit(code)


@app.command("init-db")
def init_db(
    dsn: Optional[str] = typer.Option(None, help="Postgres DSN to use"),
    log_level: str = typer.Option("INFO", help="Logging level"),
) -> None:
    """Create database schema."""

    configure_logging(log_level)
    config = _load_config(dsn)

    async def runner() -> None:
        async with Database(config.database) as database:
            await database.create_schema()

    try:
        asyncio.run(runner())
    except PersistenceError as exc:
        _fail(str(exc))


@app.command("fetch")
def fetch(
    username: str = typer.Argument(..., help="OpenStreetMap display name"),
    dsn: Optional[str] = typer.Option(None, help="Postgres DSN"),
    export_dir: Optional[Path] = typer.Option(None, file_okay=False, help="Directory for CSV exports"),
    log_level: str = typer.Option("INFO", help="Logging level"),
) -> None:
    """Fetch a user's changesets, store the totals and print a summary."""

    configure_logging(log_level)
    config = _load_config(dsn, export_dir)

    async def runner():
        async with OsmApiClient(config.osm) as client:
            async with Database(config.database) as database:
                service = StatsService(config, client, database, ExportStore(config.storage.export_directory))
                return await service.collect(username.strip())

    try:
        outcome = asyncio.run(runner())
    except UnknownUser as exc:
        _fail(f"{exc}. Check the spelling of the username.", code=2)
    except NoContributions as exc:
        _fail(str(exc), code=3)
    except CollectionError as exc:
        _fail(f"{exc} (while {exc.phase})")
    except PersistenceError as exc:
        _fail(str(exc))

    typer.echo(render_summary(outcome.username, outcome.aggregate))
    if not outcome.persisted:
        _fail(f"Results were not saved: {outcome.persistence_error}", code=4)


@app.command("users")
def users(
    dsn: Optional[str] = typer.Option(None, help="Postgres DSN"),
    log_level: str = typer.Option("WARNING", help="Logging level"),
) -> None:
    """Print stored users ordered by edits."""

    configure_logging(log_level)
    config = _load_config(dsn)

    async def runner():
        async with Database(config.database) as database:
            return await database.list_users()

    try:
        rows = asyncio.run(runner())
    except PersistenceError as exc:
        _fail(str(exc))
    typer.echo(render_table(rows))


@app.command("export")
def export(
    username: str = typer.Argument(..., help="OpenStreetMap display name"),
    output: Path = typer.Option(..., dir_okay=False, help="Destination file"),
    export_dir: Optional[Path] = typer.Option(None, file_okay=False, help="Directory for CSV exports"),
) -> None:
    """Write the stored changeset CSV of a user to a file."""

    config = _load_config(None, export_dir)
    store = ExportStore(config.storage.export_directory)
    try:
        csv_text = store.fetch_export(username)
    except ExportNotFound as exc:
        _fail(str(exc), code=2)
    except PersistenceError as exc:
        _fail(str(exc))
    output.write_text(csv_text, encoding="utf-8")
    typer.echo(f"Wrote {output}")


@app.command("dashboard-export")
def dashboard_export(
    output: Path = typer.Option(Path("dashboard.csv"), dir_okay=False, help="Destination file"),
    dsn: Optional[str] = typer.Option(None, help="Postgres DSN"),
    log_level: str = typer.Option("WARNING", help="Logging level"),
) -> None:
    """Write every user's total edits to a CSV file."""

    configure_logging(log_level)
    config = _load_config(dsn)

    async def runner() -> str:
        async with Database(config.database) as database:
            return await database.dashboard_csv()

    try:
        csv_text = asyncio.run(runner())
    except PersistenceError as exc:
        _fail(str(exc))
    output.write_text(csv_text, encoding="utf-8")
    typer.echo(f"Wrote {output}")


@app.command("refresh")
def refresh(
    once: bool = typer.Option(False, "--once", help="Run a single refresh round and exit"),
    dsn: Optional[str] = typer.Option(None, help="Postgres DSN"),
    export_dir: Optional[Path] = typer.Option(None, file_okay=False, help="Directory for CSV exports"),
    log_level: str = typer.Option("INFO", help="Logging level"),
) -> None:
    """Re-fetch every stored user, repeating every refresh interval."""

    configure_logging(log_level)
    config = _load_config(dsn, export_dir)

    async def runner() -> None:
        async with OsmApiClient(config.osm) as client:
            async with Database(config.database) as database:
                service = StatsService(config, client, database, ExportStore(config.storage.export_directory))
                await service.refresh_forever(rounds=1 if once else None)
                typer.echo(render_table(service.cache.rows()))

    try:
        asyncio.run(runner())
    except PersistenceError as exc:
        _fail(str(exc))


__all__ = ["app"]
