"""Backward pagination over a user's changeset history."""

from __future__ import annotations

import enum
import logging
from datetime import datetime, timedelta
from typing import AsyncContextManager, Callable, Protocol

from .aggregator import AggregateResult, fold
from .config import UTC
from .errors import (
    FetchFailed,
    MalformedResponse,
    NoContributions,
    NotFound,
    TransportError,
    UnknownUser,
    UpstreamContractViolation,
)
from .osm_client import EPOCH, parse_timestamp
from .parser import parse_changesets

LOGGER = logging.getLogger(__name__)

WINDOW_STEP = timedelta(seconds=1)


class PageFetcher(Protocol):
    async def fetch_page(self, username: str, window_end: datetime) -> str: ...


class Limiter(Protocol):
    def slot(self) -> AsyncContextManager[None]: ...


class PaginationState(str, enum.Enum):
    START = "start"
    FETCHING = "fetching"
    PARSING = "parsing"
    ACCUMULATING = "accumulating"
    DECIDING = "deciding"
    DONE = "done"
    FAILED = "failed"


def _utcnow() -> datetime:
    return datetime.now(tz=UTC)


class BackwardPaginator:
    """Walks a user's changesets from now back to ``EPOCH``, one page at a time.

    Each page covers ``[EPOCH, window_end]``. After a non-empty page the window
    end moves to one second before the earliest changeset seen, so boundary
    records are never counted twice. If more than a full page of changesets
    share that same second, the ones beyond the page limit are skipped.
    """

    def __init__(
        self,
        fetcher: PageFetcher,
        limiter: Limiter,
        *,
        now: Callable[[], datetime] = _utcnow,
        max_pages: int | None = None,
    ) -> None:
        self._fetcher = fetcher
        self._limiter = limiter
        self._now = now
        self._max_pages = max_pages
        self.state = PaginationState.START

    async def run(self, username: str) -> AggregateResult:
        """Fetch and aggregate the complete history of ``username``."""

        self._transition(PaginationState.START, username)
        window_end = self._now()
        first_page = True
        pages = 0
        aggregate = AggregateResult()

        try:
            while True:
                self._transition(PaginationState.FETCHING, username)
                try:
                    async with self._limiter.slot():
                        body = await self._fetcher.fetch_page(username, window_end)
                except NotFound as exc:
                    raise UnknownUser(username, PaginationState.FETCHING.value) from exc
                except TransportError as exc:
                    raise FetchFailed(username, PaginationState.FETCHING.value, str(exc)) from exc

                self._transition(PaginationState.PARSING, username)
                try:
                    records = parse_changesets(body)
                except MalformedResponse as exc:
                    raise UpstreamContractViolation(username, PaginationState.PARSING.value, str(exc)) from exc

                self._transition(PaginationState.DECIDING, username)
                if not records:
                    if first_page:
                        raise NoContributions(username, PaginationState.DECIDING.value)
                    break
                first_page = False
                # the empty page that ends the walk does not count towards the limit
                if self._max_pages is not None and pages >= self._max_pages:
                    raise FetchFailed(
                        username, PaginationState.DECIDING.value, f"page limit of {self._max_pages} reached"
                    )
                pages += 1

                self._transition(PaginationState.ACCUMULATING, username)
                aggregate, earliest = fold(aggregate, records)
                LOGGER.info(
                    "Page %s for %s: %s changesets, %s total, earliest %s",
                    pages,
                    username,
                    len(records),
                    aggregate.record_count,
                    earliest,
                )

                self._transition(PaginationState.DECIDING, username)
                try:
                    window_end = parse_timestamp(earliest) - WINDOW_STEP
                except ValueError as exc:
                    raise UpstreamContractViolation(
                        username, PaginationState.DECIDING.value, f"invalid created_at {earliest!r}"
                    ) from exc
                if window_end < EPOCH:
                    break
        except Exception:
            self._transition(PaginationState.FAILED, username)
            raise

        self._transition(PaginationState.DONE, username)
        LOGGER.info(
            "Finished %s after %s pages: %s changesets, %s edits",
            username,
            pages,
            aggregate.record_count,
            aggregate.total_edits,
        )
        return aggregate

    def _transition(self, state: PaginationState, username: str) -> None:
        LOGGER.debug("%s: %s -> %s", username, self.state.value, state.value)
        self.state = state


__all__ = ["BackwardPaginator", "PaginationState", "PageFetcher", "Limiter"]
