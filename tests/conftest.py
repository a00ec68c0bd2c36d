"""Shared fixtures for the job board tests."""
import os
import tempfile

# Keep test runs from writing log files into the project tree.
os.environ.setdefault("JOBBOARD_LOG_DIR", tempfile.mkdtemp(prefix="jobboard-logs-"))

from typing import Any, Mapping

import pytest

from jobboard.errors import FetchError, NotFound
from jobboard.models import FetchResult, JobRecord
from jobboard.sources.base import JobSourceBase


def make_job(job_id: str, title: str = "Engineer", **overrides: Any) -> JobRecord:
    data = {
        "id": job_id,
        "title": title,
        "company": "ACME",
        "location": "Remote",
        "job_type": "Full-time",
        "description": f"{title} role at ACME",
        "posted_date": "2024-01-01",
    }
    data.update(overrides)
    return JobRecord(**data)


class StubSource(JobSourceBase):
    """Gateway double returning canned results and recording calls."""

    def __init__(
        self,
        jobs: list[JobRecord] | None = None,
        fail: bool = False,
        missing: set[str] | None = None,
    ) -> None:
        self.jobs = list(jobs or [])
        self.fail = fail
        self.missing = set(missing or ())
        self.list_calls: list[Mapping[str, Any] | None] = []
        self.one_calls: list[str] = []

    def fetch_all(self, params=None):
        self.list_calls.append(params)
        if self.fail:
            return FetchResult(error=FetchError("connection refused"))
        return FetchResult(value=list(self.jobs))

    def fetch_one(self, job_id):
        self.one_calls.append(job_id)
        if self.fail:
            return FetchResult(error=FetchError("connection refused"))
        if job_id in self.missing:
            return FetchResult(error=NotFound(job_id))
        for job in self.jobs:
            if job.id == job_id:
                return FetchResult(value=job)
        return FetchResult(error=NotFound(job_id))


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for key in list(os.environ):
        if key.startswith("JOBBOARD_") and key != "JOBBOARD_LOG_DIR":
            monkeypatch.delenv(key, raising=False)
