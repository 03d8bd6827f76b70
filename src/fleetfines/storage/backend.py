"""Key-value persistence backends.

A backend stores opaque serialized strings by key. It is the only part
of fleetfines that touches storage I/O; repositories own serialization.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Protocol, runtime_checkable

from fleetfines._constants import SAFE_KEY_PATTERN
from fleetfines.exceptions import FleetStorageError

_logger = logging.getLogger(__name__)

_SAFE_KEY = re.compile(SAFE_KEY_PATTERN)


@runtime_checkable
class StorageBackend(Protocol):
    """Synchronous get/set/remove of serialized values by key."""

    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...

    def remove(self, key: str) -> None: ...


class InMemoryBackend:
    """Dict-backed backend. Data is lost when the process exits."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def remove(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self) -> list[str]:
        return sorted(self._data)


class JsonFileBackend:
    """One ``<key>.json`` file per key inside *directory*.

    Writes go to ``<key>.json.tmp`` first and are renamed over the target,
    so a crash mid-write leaves the previous value intact.
    """

    def __init__(self, directory: Path | str) -> None:
        self._directory = Path(directory)
        try:
            self._directory.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise FleetStorageError(f"cannot create storage directory {self._directory}") from exc

    @property
    def directory(self) -> Path:
        return self._directory

    def _path(self, key: str) -> Path:
        if not _SAFE_KEY.fullmatch(key):
            raise FleetStorageError(f"invalid storage key {key!r}", key=key)
        return self._directory / f"{key}.json"

    def get(self, key: str) -> str | None:
        path = self._path(key)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError):
            # Unreadable content reads as "nothing stored"; repositories
            # treat that the same as a missing collection.
            _logger.warning("Unreadable storage file %s", path, exc_info=True)
            return None

    def set(self, key: str, value: str) -> None:
        path = self._path(key)
        tmp_path = path.with_suffix(".json.tmp")
        if tmp_path.exists():
            tmp_path.unlink()
        try:
            tmp_path.write_text(value, encoding="utf-8")
            tmp_path.replace(path)
        except OSError as exc:
            if tmp_path.exists():
                tmp_path.unlink()
            raise FleetStorageError(f"failed to write {path}", key=key) from exc
        _logger.debug("Wrote %d bytes to %s", len(value), path)

    def remove(self, key: str) -> None:
        path = self._path(key)
        try:
            path.unlink(missing_ok=True)
        except OSError as exc:
            raise FleetStorageError(f"failed to remove {path}", key=key) from exc
