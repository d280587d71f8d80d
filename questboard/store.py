# File: store.py
"""Handles persistent data storage for Quest Board.

The whole AppState is one JSON document on disk. Saves are write-through and
atomic (temp file + os.replace), so a failed write leaves the previous
snapshot in place. A missing or unreadable file loads as the default state.
"""

from __future__ import annotations

import json
import os
from pathlib import Path
import tempfile
from typing import Any

from . import const, data_builders as db


class QuestBoardStore:
    """Persistent storage for the Quest Board snapshot.

    Thin wrapper around a JSON file with an in-memory cache. The cache holds
    the raw snapshot; migration and coercion happen in the coordinator.
    """

    def __init__(self, path: str | os.PathLike[str] | None = None) -> None:
        """Initialize the store.

        Args:
            path: File to read and write (default: ./questboard_data.json)
        """
        self._path = Path(path) if path is not None else Path(const.STORAGE_FILENAME)
        self._data: dict[str, Any] = {}

    @staticmethod
    def get_default_structure(today_key: str | None = None) -> dict[str, Any]:
        """Return the empty AppState used for fresh installs and fallbacks."""
        return dict(db.build_default_app_state(today_key))

    @property
    def path(self) -> Path:
        """Location of the snapshot file."""
        return self._path

    @property
    def data(self) -> dict[str, Any]:
        """Retrieve the in-memory data cache."""
        return self._data

    def set_data(self, new_data: dict[str, Any]) -> None:
        """Replace the entire in-memory data structure."""
        self._data = new_data

    def load(self) -> dict[str, Any] | None:
        """Read the snapshot from disk.

        Returns:
            The raw snapshot, or None when no usable file exists. Read and
            parse failures are logged and reported as None.
        """
        if not self._path.exists():
            const.LOGGER.info("No existing storage found at %s", self._path)
            return None
        try:
            with self._path.open(encoding="utf-8") as handle:
                raw = json.load(handle)
        except OSError as err:
            const.LOGGER.error("Failed to read storage %s: %s", self._path, err)
            return None
        except ValueError as err:
            const.LOGGER.error(
                "Storage %s is not valid JSON (%s), starting fresh", self._path, err
            )
            return None
        if not isinstance(raw, dict):
            const.LOGGER.error(
                "Storage %s holds %s instead of an object, starting fresh",
                self._path,
                type(raw).__name__,
            )
            return None
        const.LOGGER.debug(
            "Loaded storage: %s quests, %s day entries",
            len(raw.get(const.DATA_QUESTS) or []),
            len(raw.get(const.DATA_DAYS) or {}),
        )
        return raw

    def initialize(self, today_key: str | None = None) -> dict[str, Any]:
        """Load data into the cache, falling back to the default structure."""
        raw = self.load()
        self._data = raw if raw is not None else self.get_default_structure(today_key)
        return self._data

    def save(self) -> None:
        """Atomically write the cache to disk.

        Raises:
            OSError: File system failure (previous file left untouched)
            TypeError: Data that cannot be serialized to JSON
        """
        self._path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            dir=self._path.parent, prefix=f".{self._path.name}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(self._data, handle, ensure_ascii=False, indent=2)
            os.replace(tmp_name, self._path)
        except (OSError, TypeError, ValueError) as err:
            const.LOGGER.error("Failed to save storage %s: %s", self._path, err)
            Path(tmp_name).unlink(missing_ok=True)
            raise
        const.LOGGER.debug("Data saved successfully to %s", self._path)

    def clear_data(self) -> None:
        """Reset storage to the default structure and persist it."""
        const.LOGGER.warning("Clearing all Quest Board data and resetting storage")
        self._data = self.get_default_structure()
        self.save()
