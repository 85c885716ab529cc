"""Exception hierarchy for fetching, aggregating and storing changeset stats."""

from __future__ import annotations


class OsmStatsError(RuntimeError):
    """Base class for every error raised by this package."""


class NotFound(OsmStatsError):
    """The changeset API answered 404 for the requested user."""


class TransportError(OsmStatsError):
    """A request failed on the network or returned a non-success status."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class MalformedResponse(OsmStatsError):
    """A response body could not be decoded into changesets."""


class CollectionError(OsmStatsError):
    """A user fetch was aborted; carries the user and the phase that failed."""

    def __init__(self, username: str, phase: str, message: str) -> None:
        super().__init__(message)
        self.username = username
        self.phase = phase


class UnknownUser(CollectionError):
    def __init__(self, username: str, phase: str = "fetching") -> None:
        super().__init__(username, phase, f"Unknown OpenStreetMap user {username!r}")


class NoContributions(CollectionError):
    def __init__(self, username: str, phase: str = "deciding") -> None:
        super().__init__(username, phase, f"User {username!r} has no contributions yet")


class FetchFailed(CollectionError):
    def __init__(self, username: str, phase: str, reason: str) -> None:
        super().__init__(username, phase, f"Fetching changesets for {username!r} failed: {reason}")
        self.reason = reason


class UpstreamContractViolation(CollectionError):
    def __init__(self, username: str, phase: str, reason: str) -> None:
        super().__init__(username, phase, f"Unexpected changeset response for {username!r}: {reason}")
        self.reason = reason


class PersistenceError(OsmStatsError):
    """Raised by the storage layer."""


class DbError(PersistenceError):
    pass


class IoError(PersistenceError):
    pass


class ExportNotFound(PersistenceError):
    """No stored export exists for the requested user."""


__all__ = [
    "OsmStatsError",
    "NotFound",
    "TransportError",
    "MalformedResponse",
    "CollectionError",
    "UnknownUser",
    "NoContributions",
    "FetchFailed",
    "UpstreamContractViolation",
    "PersistenceError",
    "DbError",
    "IoError",
    "ExportNotFound",
]
