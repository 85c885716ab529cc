"""Filesystem storage for per-user CSV exports."""

from __future__ import annotations

import logging
from pathlib import Path
from urllib.parse import quote

from .errors import ExportNotFound, IoError

LOGGER = logging.getLogger(__name__)


class ExportStore:
    """Keeps one ``<user>.csv`` per user under ``directory``."""

    def __init__(self, directory: Path) -> None:
        self._directory = Path(directory)

    def path_for(self, username: str) -> Path:
        # usernames may contain "/" or spaces
        return self._directory / f"{quote(username, safe='')}.csv"

    def store_export(self, username: str, csv_text: str) -> Path:
        path = self.path_for(username)
        tmp_path = path.with_suffix(".csv.tmp")
        try:
            self._directory.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(csv_text, encoding="utf-8")
            tmp_path.replace(path)
        except OSError as exc:
            raise IoError(f"Could not write export for {username!r}: {exc}") from exc
        LOGGER.debug("Stored export for %s at %s", username, path)
        return path

    def fetch_export(self, username: str) -> str:
        path = self.path_for(username)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError as exc:
            raise ExportNotFound(f"No export stored for {username!r}") from exc
        except OSError as exc:
            raise IoError(f"Could not read export for {username!r}: {exc}") from exc


__all__ = ["ExportStore"]
