"""Postgres storage for per-user edit totals."""

from __future__ import annotations

from pathlib import Path

import asyncpg

from .config import DatabaseSettings
from .errors import DbError
from .export import render_dashboard
from .models import UserStatRow

SCHEMA_PATH = Path(__file__).resolve().parent / "sql" / "schema.sql"

UPSERT_USER_SQL = """
    INSERT INTO user_stats ("user", edits, updated_at)
    VALUES ($1, $2, NOW())
    ON CONFLICT ("user") DO UPDATE SET
        edits = EXCLUDED.edits,
        updated_at = EXCLUDED.updated_at
"""

LIST_USERS_SQL = """
    SELECT "user", edits
    FROM user_stats
    ORDER BY edits DESC, "user"
"""


class Database:
    """Async helper for reading and writing ``user_stats`` rows."""

    def __init__(self, settings: DatabaseSettings) -> None:
        self._settings = settings
        self._pool: asyncpg.Pool | None = None

    async def connect(self) -> None:
        if self._pool is not None:
            return
        try:
            self._pool = await asyncpg.create_pool(
                dsn=self._settings.dsn,
                init=self._init_connection,
                command_timeout=self._settings.statement_timeout,
            )
        except (asyncpg.PostgresError, OSError) as exc:
            raise DbError(f"Could not connect to database: {exc}") from exc

    async def close(self) -> None:
        if self._pool:
            await self._pool.close()
            self._pool = None

    async def __aenter__(self) -> "Database":
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:  # type: ignore[override]
        await self.close()

    async def create_schema(self) -> None:
        pool = self._ensure_pool()
        statements = _load_sql_statements(SCHEMA_PATH)
        try:
            async with pool.acquire() as conn:
                for statement in statements:
                    await conn.execute(statement)
        except (asyncpg.PostgresError, OSError) as exc:
            raise DbError(f"Could not create schema: {exc}") from exc

    async def upsert_user(self, username: str, edits: int) -> None:
        """Insert or replace the total for ``username``; the last write wins."""

        pool = self._ensure_pool()
        try:
            async with pool.acquire() as conn:
                await conn.execute(UPSERT_USER_SQL, username, edits)
        except (asyncpg.PostgresError, OSError) as exc:
            raise DbError(f"Could not store totals for {username!r}: {exc}") from exc

    async def list_users(self) -> list[UserStatRow]:
        pool = self._ensure_pool()
        try:
            async with pool.acquire() as conn:
                rows = await conn.fetch(LIST_USERS_SQL)
        except (asyncpg.PostgresError, OSError) as exc:
            raise DbError(f"Could not list users: {exc}") from exc
        return [UserStatRow(user=row["user"], edits=row["edits"]) for row in rows]

    async def dashboard_csv(self) -> str:
        return render_dashboard(await self.list_users())

    def _ensure_pool(self) -> asyncpg.Pool:
        if self._pool is None:
            raise RuntimeError("Database pool has not been initialized")
        return self._pool

    async def _init_connection(self, conn: asyncpg.Connection) -> None:
        await conn.execute("SET TIME ZONE 'UTC'")
        await conn.execute(f"SET statement_timeout = {int(self._settings.statement_timeout * 1000)}")


def _load_sql_statements(path: Path) -> list[str]:
    script = path.read_text(encoding="utf-8")
    statements: list[str] = []
    for part in script.split(";"):
        statement = part.strip()
        if statement:
            statements.append(statement)
    return statements


__all__ = ["Database"]
