"""In-memory job collection with filter criteria and request lifecycle status.

Network calls run outside the state lock. Each load takes a request token.
List loads and single-record loads keep separate lifecycles; a result is
committed only while its token is still the latest of its kind, so a slow
response cannot overwrite a newer one. Readers see LOADING while any latest
request is in flight, otherwise the outcome of the most recently settled one.
"""
from __future__ import annotations

import threading
from dataclasses import dataclass
from concurrent.futures import Executor, Future
from typing import Callable, Iterable

from jobboard.errors import NotFound
from jobboard.filtering import visible
from jobboard.log import get_logger
from jobboard.models import (
    ErrorKind,
    FallbackPolicy,
    FetchResult,
    FilterCriteria,
    JobRecord,
    LoadStatus,
)
from jobboard.sources.base import JobSourceBase
from jobboard.sources.fallback import FallbackSource, search_predicate, type_predicate

log = get_logger(__name__)


@dataclass
class _Channel:
    """Lifecycle of the latest request of one kind (list or single record)."""

    token: int = 0
    status: LoadStatus = LoadStatus.IDLE
    error: str | None = None
    kind: ErrorKind | None = None


class JobStore:
    def __init__(
        self,
        gateway: JobSourceBase,
        fallback: FallbackSource,
        policy: FallbackPolicy = FallbackPolicy.SILENT,
    ) -> None:
        self.gateway = gateway
        self.fallback = fallback
        self.policy = FallbackPolicy(policy)

        self._lock = threading.Lock()
        self._jobs: dict[str, JobRecord] = {}
        self._filters = FilterCriteria()
        self._token = 0
        self._list = _Channel()
        self._detail = _Channel()
        self._shown = self._list

    # ── reads ────────────────────────────────────────────────────────────

    def all_jobs(self) -> list[JobRecord]:
        with self._lock:
            return list(self._jobs.values())

    def filtered_jobs(self) -> list[JobRecord]:
        with self._lock:
            jobs = list(self._jobs.values())
            criteria = self._filters
        return visible(jobs, criteria)

    def get(self, job_id: str) -> JobRecord | None:
        with self._lock:
            return self._jobs.get(job_id)

    def loading_status(self) -> LoadStatus:
        with self._lock:
            if self._in_flight():
                return LoadStatus.LOADING
            return self._shown.status

    def last_error(self) -> str | None:
        with self._lock:
            return None if self._in_flight() else self._shown.error

    def last_error_kind(self) -> ErrorKind | None:
        with self._lock:
            return None if self._in_flight() else self._shown.kind

    def current_filters(self) -> FilterCriteria:
        with self._lock:
            return self._filters

    # ── filters ──────────────────────────────────────────────────────────

    def set_filter(self, **partial: str | None) -> FilterCriteria:
        with self._lock:
            self._filters = self._filters.merged(partial)
            return self._filters

    def clear_filter(self) -> None:
        with self._lock:
            self._filters = FilterCriteria()

    # ── loading ──────────────────────────────────────────────────────────

    def set_jobs(self, jobs: Iterable[JobRecord]) -> None:
        """Replace the collection directly, keeping the first record per id."""
        with self._lock:
            self._jobs = self._index(jobs)

    def load_all(self) -> LoadStatus:
        token = self._begin(list_request=True)
        result = self.gateway.fetch_all()
        return self._commit_list(token, result, self.fallback.all)

    def load_matching(self, search: str = "", job_type: str = "") -> LoadStatus:
        """Ask the remote source for a narrowed list; filter the fallback locally on failure."""
        token = self._begin(list_request=True)
        result = self.gateway.fetch_all({"search": search, "type": job_type})

        by_search = search_predicate(search)
        by_type = type_predicate(job_type)

        def _fallback() -> list[JobRecord]:
            return self.fallback.matching(
                lambda job: (not search or by_search(job)) and (not job_type or by_type(job))
            )

        return self._commit_list(token, result, _fallback)

    def submit_load_all(self, executor: Executor) -> "Future[LoadStatus]":
        return executor.submit(self.load_all)

    def load_one(self, job_id: str) -> JobRecord | None:
        token = self._begin(list_request=False)
        result = self.gateway.fetch_one(job_id)

        job: JobRecord | None = result.value
        failure: str | None = None
        kind: ErrorKind | None = None

        if result.not_found:
            failure, kind = str(result.error), ErrorKind.NOT_FOUND
        elif not result.ok:
            if self.policy is FallbackPolicy.SILENT:
                job = self.fallback.by_id(job_id)
                if job is None:
                    failure, kind = str(NotFound(job_id)), ErrorKind.NOT_FOUND
                else:
                    log.warning("Serving job %s from fallback data: %s", job_id, result.error)
            else:
                failure, kind = str(result.error), ErrorKind.FETCH

        with self._lock:
            if job is not None:
                job = self._jobs.setdefault(job.id, job)
            self._settle(self._detail, token, failure, kind)
        return job

    # ── internals ────────────────────────────────────────────────────────

    @staticmethod
    def _index(jobs: Iterable[JobRecord]) -> dict[str, JobRecord]:
        indexed: dict[str, JobRecord] = {}
        for job in jobs:
            indexed.setdefault(job.id, job)
        return indexed

    def _in_flight(self) -> bool:
        return LoadStatus.LOADING in (self._list.status, self._detail.status)

    def _begin(self, *, list_request: bool) -> int:
        channel = self._list if list_request else self._detail
        with self._lock:
            self._token += 1
            channel.token = self._token
            channel.status = LoadStatus.LOADING
            channel.error = None
            channel.kind = None
            return self._token

    def _settle(
        self,
        channel: _Channel,
        token: int,
        failure: str | None,
        kind: ErrorKind | None,
    ) -> bool:
        """Record the outcome if ``token`` is still the channel's latest request.

        The most recently settled channel is what the status readers report.
        """
        if token != channel.token:
            return False
        channel.status = LoadStatus.FAILED if failure else LoadStatus.SUCCEEDED
        channel.error = failure
        channel.kind = kind if failure else None
        self._shown = channel
        return True

    def _commit_list(
        self,
        token: int,
        result: FetchResult[list[JobRecord]],
        fallback: Callable[[], list[JobRecord]],
    ) -> LoadStatus:
        jobs: list[JobRecord] | None = result.value
        failure: str | None = None

        if not result.ok:
            if self.policy is FallbackPolicy.SILENT:
                log.warning("Remote source unavailable, using fallback data: %s", result.error)
                try:
                    jobs = fallback()
                except Exception as exc:
                    log.error("Fallback data unavailable: %s", exc)
                    jobs, failure = None, str(result.error)
            else:
                failure = str(result.error)

        with self._lock:
            if token != self._list.token:
                log.debug("Discarding stale list response (token %d < %d)", token, self._list.token)
                return self._list.status
            if jobs is not None:
                self._jobs = self._index(jobs)
            self._settle(self._list, token, failure, ErrorKind.FETCH if failure else None)
            log.info("Job collection holds %d job(s)", len(self._jobs))
            return self._list.status
