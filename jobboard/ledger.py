"""Applied-jobs ledger mirrored between memory and durable storage.

``add`` and ``remove`` are the only mutators and ``_persist`` is the only code
that writes the storage key, so every caller (the mark-applied action and the
submission flow) produces the same snapshot. Storage failures are logged and
swallowed: memory stays authoritative for the rest of the session.
"""
from __future__ import annotations

import json
import threading

from jobboard.errors import StorageError
from jobboard.log import get_logger
from jobboard.storage import KeyValueStorage

log = get_logger(__name__)

DEFAULT_KEY = "appliedJobs"


def _parse_ids(raw: str | None) -> list[str]:
    if raw is None:
        return []
    try:
        data = json.loads(raw)
    except (json.JSONDecodeError, TypeError) as exc:
        log.warning("Applied jobs entry is not valid JSON, starting empty: %s", exc)
        return []
    if not isinstance(data, list):
        log.warning("Applied jobs entry is not an array, starting empty")
        return []

    ids: list[str] = []
    for item in data:
        if isinstance(item, bool) or not isinstance(item, (str, int)):
            log.debug("Ignoring non-id entry %r", item)
            continue
        ids.append(str(item))
    return list(dict.fromkeys(ids))


class AppliedLedger:
    def __init__(self, storage: KeyValueStorage, key: str = DEFAULT_KEY) -> None:
        self.storage = storage
        self.key = key
        self._ids: dict[str, None] = {}
        self._lock = threading.Lock()

    def initialize(self) -> None:
        """Rebuild memory from durable storage; unreadable content means empty."""
        try:
            raw = self.storage.get_item(self.key)
        except StorageError as exc:
            log.warning("Cannot read applied jobs, starting empty: %s", exc)
            raw = None
        ids = _parse_ids(raw)
        with self._lock:
            self._ids = dict.fromkeys(ids)
        log.info("Loaded %d applied job(s)", len(ids))

    def contains(self, job_id: str) -> bool:
        with self._lock:
            return job_id in self._ids

    def __contains__(self, job_id: object) -> bool:
        return isinstance(job_id, str) and self.contains(job_id)

    def __len__(self) -> int:
        with self._lock:
            return len(self._ids)

    def ids(self) -> list[str]:
        """Applied ids in the order they were first added."""
        with self._lock:
            return list(self._ids)

    def add(self, job_id: str) -> bool:
        """Record ``job_id``; returns False (and writes nothing) if already present."""
        with self._lock:
            if job_id in self._ids:
                return False
            self._ids[job_id] = None
            self._persist()
        log.info("Marked job %s as applied", job_id)
        return True

    def remove(self, job_id: str) -> bool:
        with self._lock:
            if job_id not in self._ids:
                return False
            del self._ids[job_id]
            self._persist()
        log.info("Unmarked job %s", job_id)
        return True

    def _persist(self) -> None:
        # Caller holds self._lock, which also serializes storage writes.
        snapshot = json.dumps(list(self._ids))
        try:
            self.storage.set_item(self.key, snapshot)
        except StorageError as exc:
            log.warning("Could not persist applied jobs, keeping in memory only: %s", exc)
