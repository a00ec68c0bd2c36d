"""Gateway to the remote job listing API.

Every call returns a :class:`FetchResult`; transport failures, timeouts and
non-2xx answers are folded into :class:`FetchError` so nothing raised by
``requests`` escapes this module. No retries happen here.
"""
from __future__ import annotations

from typing import Any, Mapping
from urllib.parse import quote

import requests

from jobboard.errors import FetchError, NotFound
from jobboard.log import get_logger
from jobboard.models import FetchResult, JobRecord
from jobboard.sources.base import JobSourceBase

log = get_logger(__name__)

DEFAULT_TIMEOUT = 10.0


class JobApiGateway(JobSourceBase):
    def __init__(
        self,
        base_url: str,
        timeout: float = DEFAULT_TIMEOUT,
        session: requests.Session | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.setdefault("Content-Type", "application/json")

    def _get(self, path: str, params: Mapping[str, Any] | None = None) -> Any:
        url = f"{self.base_url}{path}"
        try:
            r = self.session.get(url, params=params or None, timeout=self.timeout)
        except requests.Timeout as exc:
            raise FetchError(f"Timed out after {self.timeout:g}s: {url}") from exc
        except requests.RequestException as exc:
            raise FetchError(f"Request to {url} failed: {exc}") from exc

        if not 200 <= r.status_code < 300:
            raise FetchError(f"{url} answered HTTP {r.status_code}", status_code=r.status_code)
        try:
            return r.json()
        except ValueError as exc:
            raise FetchError(f"{url} returned invalid JSON", status_code=r.status_code) from exc

    def fetch_all(self, params: Mapping[str, Any] | None = None) -> FetchResult[list[JobRecord]]:
        query = {k: v for k, v in (params or {}).items() if v}
        try:
            data = self._get("/jobs", query)
        except FetchError as exc:
            log.warning("Job list fetch failed: %s", exc)
            return FetchResult(error=exc)

        if not isinstance(data, list):
            log.warning("Unexpected job list payload shape: %s", type(data).__name__)
            return FetchResult(error=FetchError("Job list payload is not an array"))

        jobs: list[JobRecord] = []
        seen: set[str] = set()
        for entry in data:
            if not isinstance(entry, dict):
                continue
            try:
                job = JobRecord.from_dict(entry)
            except ValueError as exc:
                log.warning("Skipping malformed job entry: %s", exc)
                continue
            if job.id in seen:
                log.debug("Dropping duplicate job id %s", job.id)
                continue
            seen.add(job.id)
            jobs.append(job)

        log.info("Remote source returned %d jobs", len(jobs))
        return FetchResult(value=jobs)

    def fetch_one(self, job_id: str) -> FetchResult[JobRecord]:
        try:
            data = self._get(f"/jobs/{quote(str(job_id), safe='')}")
        except FetchError as exc:
            log.warning("Job %s fetch failed: %s", job_id, exc)
            return FetchResult(error=exc)

        if not isinstance(data, dict) or not data:
            return FetchResult(error=NotFound(job_id))
        try:
            job = JobRecord.from_dict(data)
        except ValueError as exc:
            log.warning("Job %s payload unusable: %s", job_id, exc)
            return FetchResult(error=NotFound(job_id))
        return FetchResult(value=job)
