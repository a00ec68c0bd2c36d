"""Local filtering of the job collection against the current criteria."""
from __future__ import annotations

from typing import Iterable

from jobboard.models import FilterCriteria, JobRecord


def _normalize(s: str) -> str:
    return (s or "").lower()


def matches_search(job: JobRecord, query: str) -> bool:
    if not query:
        return True
    q = _normalize(query)
    return q in _normalize(job.title) or q in _normalize(job.description)


def matches_location(job: JobRecord, location: str) -> bool:
    return not location or _normalize(location) in _normalize(job.location)


def matches_type(job: JobRecord, job_type: str) -> bool:
    # Exact category, not substring: "time" must not match "Full-time".
    return not job_type or _normalize(job_type) == _normalize(job.job_type)


def matches_company(job: JobRecord, company: str) -> bool:
    return not company or _normalize(company) in _normalize(job.company)


def matches(job: JobRecord, criteria: FilterCriteria) -> bool:
    return (
        matches_search(job, criteria.search)
        and matches_location(job, criteria.location)
        and matches_type(job, criteria.type)
        and matches_company(job, criteria.company)
    )


def visible(jobs: Iterable[JobRecord], criteria: FilterCriteria) -> list[JobRecord]:
    """Return the jobs satisfying every non-empty criterion, in input order."""
    return [job for job in jobs if matches(job, criteria)]
