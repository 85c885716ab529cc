"""Fetch-then-persist orchestration for one or many users."""

from __future__ import annotations

import asyncio
import logging
import weakref
from dataclasses import dataclass
from typing import Awaitable, Callable, Protocol

from .aggregator import AggregateResult
from .config import AppConfig
from .dashboard import DashboardCache
from .errors import CollectionError, PersistenceError
from .export_store import ExportStore
from .models import UserStatRow
from .paginator import BackwardPaginator, Limiter, PageFetcher
from .rate_limiter import RateLimiter

LOGGER = logging.getLogger(__name__)


class UserStatsStore(Protocol):
    async def upsert_user(self, username: str, edits: int) -> None: ...

    async def list_users(self) -> list[UserStatRow]: ...

    async def dashboard_csv(self) -> str: ...


@dataclass(slots=True)
class CollectOutcome:
    username: str
    aggregate: AggregateResult
    persistence_error: PersistenceError | None = None

    @property
    def persisted(self) -> bool:
        return self.persistence_error is None


@dataclass(slots=True)
class RefreshResult:
    outcomes: list[CollectOutcome]
    failures: dict[str, CollectionError]


class StatsService:
    """Runs the changeset pipeline for users and stores what it finds."""

    def __init__(
        self,
        config: AppConfig,
        fetcher: PageFetcher,
        database: UserStatsStore,
        exports: ExportStore,
        *,
        limiter: Limiter | None = None,
        cache: DashboardCache | None = None,
    ) -> None:
        self._config = config
        self._fetcher = fetcher
        self._database = database
        self._exports = exports
        # One limiter for every user: the upstream limit is per client.
        self._limiter = limiter or RateLimiter(config.osm.request_delay)
        self.cache = cache if cache is not None else DashboardCache()
        # entries vanish once no collect holds or waits on the lock
        self._user_locks: weakref.WeakValueDictionary[str, asyncio.Lock] = weakref.WeakValueDictionary()

    async def collect(self, username: str) -> CollectOutcome:
        """Fetch the full history of ``username`` and persist the result.

        Pipeline errors propagate and nothing is stored. Storage errors are
        reported on the outcome so the aggregate is still returned.
        """

        async with self._lock_for(username):
            paginator = BackwardPaginator(self._fetcher, self._limiter, max_pages=self._config.osm.max_pages)
            aggregate = await paginator.run(username)
            outcome = CollectOutcome(username=username, aggregate=aggregate)
            try:
                await self._database.upsert_user(username, aggregate.total_edits)
                self._exports.store_export(username, aggregate.to_csv())
            except PersistenceError as exc:
                LOGGER.error("Could not persist stats for %s: %s", username, exc)
                outcome.persistence_error = exc
            else:
                self.cache.upsert(UserStatRow(user=username, edits=aggregate.total_edits))
            return outcome

    async def load_dashboard(self) -> list[UserStatRow]:
        rows = await self._database.list_users()
        self.cache.replace(rows)
        return self.cache.rows()

    async def generate_dashboard_export(self) -> str:
        return await self._database.dashboard_csv()

    def fetch_export(self, username: str) -> str:
        return self._exports.fetch_export(username)

    async def refresh_all(self) -> RefreshResult:
        """Re-collect every known user; one user's failure does not stop the rest."""

        # reload each round so users added by other processes are picked up
        users = [row.user for row in await self.load_dashboard()]
        semaphore = asyncio.Semaphore(self._config.refresh.max_concurrency)
        result = RefreshResult(outcomes=[], failures={})

        async def refresh(username: str) -> None:
            async with semaphore:
                try:
                    result.outcomes.append(await self.collect(username))
                except CollectionError as exc:
                    LOGGER.warning("Refresh of %s failed during %s: %s", username, exc.phase, exc)
                    result.failures[username] = exc

        await asyncio.gather(*(refresh(user) for user in users))
        LOGGER.info(
            "Refreshed %s users, %s failed", len(result.outcomes), len(result.failures)
        )
        return result

    async def refresh_forever(
        self,
        *,
        rounds: int | None = None,
        sleep: Callable[[float], Awaitable[None]] | None = None,
    ) -> None:
        """Refresh all users every ``refresh.interval`` seconds."""

        sleep = sleep or asyncio.sleep
        completed = 0
        while rounds is None or completed < rounds:
            await self.refresh_all()
            completed += 1
            if rounds is not None and completed >= rounds:
                break
            await sleep(self._config.refresh.interval)

    def _lock_for(self, username: str) -> asyncio.Lock:
        lock = self._user_locks.get(username)
        if lock is None:
            lock = self._user_locks[username] = asyncio.Lock()
        return lock


__all__ = ["StatsService", "CollectOutcome", "RefreshResult", "UserStatsStore"]
