"""Local key/value storage persisted as a single JSON file with file locking.

Values are strings, the way browser ``localStorage`` holds them; callers do
their own (de)serialization. Every failure surfaces as :class:`StorageError`.
"""
from __future__ import annotations

import fcntl
import json
import os
from abc import ABC, abstractmethod
from pathlib import Path

from jobboard.errors import StorageError
from jobboard.log import get_logger

log = get_logger(__name__)


def _lock(f, exclusive: bool = True) -> None:
    """Advisory file lock (Unix fcntl)."""
    try:
        op = fcntl.LOCK_EX if exclusive else fcntl.LOCK_SH
        fcntl.flock(f.fileno(), op)
    except (OSError, AttributeError):
        pass


def _unlock(f) -> None:
    try:
        fcntl.flock(f.fileno(), fcntl.LOCK_UN)
    except (OSError, AttributeError):
        pass


class KeyValueStorage(ABC):
    @abstractmethod
    def get_item(self, key: str) -> str | None:
        pass

    @abstractmethod
    def set_item(self, key: str, value: str) -> None:
        pass

    @abstractmethod
    def remove_item(self, key: str) -> None:
        pass


class MemoryStorage(KeyValueStorage):
    """In-process storage; contents vanish with the process."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._items: dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> str | None:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)


class JsonFileStorage(KeyValueStorage):
    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def _read_all(self, f) -> dict[str, str]:
        content = f.read()
        if not content.strip():
            return {}
        try:
            data = json.loads(content)
        except json.JSONDecodeError as exc:
            raise StorageError(f"{self.path.name} is corrupt: {exc}") from exc
        if not isinstance(data, dict):
            raise StorageError(f"{self.path.name} does not hold a JSON object")
        return data

    def get_item(self, key: str) -> str | None:
        if not self.path.exists():
            return None
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                _lock(f, exclusive=False)
                try:
                    data = self._read_all(f)
                finally:
                    _unlock(f)
        except OSError as exc:
            raise StorageError(f"Cannot read {self.path}: {exc}") from exc
        value = data.get(key)
        return None if value is None else str(value)

    def _update(self, key: str, value: str | None) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, "a+", encoding="utf-8") as f:
                _lock(f)
                try:
                    f.seek(0)
                    try:
                        data = self._read_all(f)
                    except StorageError as exc:
                        log.warning("Discarding unreadable storage file: %s", exc)
                        data = {}
                    if value is None:
                        data.pop(key, None)
                    else:
                        data[key] = value
                    f.seek(0)
                    f.truncate()
                    json.dump(data, f, indent=2)
                    f.flush()
                    os.fsync(f.fileno())
                finally:
                    _unlock(f)
        except OSError as exc:
            raise StorageError(f"Cannot write {self.path}: {exc}") from exc

    def set_item(self, key: str, value: str) -> None:
        self._update(key, value)

    def remove_item(self, key: str) -> None:
        self._update(key, None)
