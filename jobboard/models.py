"""Data models for job postings, filters and applications."""
from __future__ import annotations

from dataclasses import dataclass, field, fields, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Generic, Mapping, TypeVar

from jobboard.errors import FetchError, NotFound

T = TypeVar("T")


def _text(payload: Mapping[str, Any], key: str) -> str:
    value = payload.get(key)
    return "" if value is None else str(value)


@dataclass(frozen=True)
class JobRecord:
    id: str
    title: str
    company: str
    location: str
    job_type: str
    description: str
    salary: str | None = None
    requirements: tuple[str, ...] = ()
    posted_date: str = ""

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "JobRecord":
        """Build a record from a wire object; unknown keys are ignored."""
        job_id = _text(payload, "id").strip()
        if not job_id:
            raise ValueError("job payload has no id")
        title = _text(payload, "title")
        if not title:
            raise ValueError(f"job {job_id} has no title")

        raw_reqs = payload.get("requirements")
        if isinstance(raw_reqs, str):
            raw_reqs = (raw_reqs,)
        elif not isinstance(raw_reqs, (list, tuple)):
            raw_reqs = ()
        salary = payload.get("salary")

        return cls(
            id=job_id,
            title=title,
            company=_text(payload, "company"),
            location=_text(payload, "location"),
            job_type=_text(payload, "type"),
            description=_text(payload, "description"),
            salary=str(salary) if salary else None,
            requirements=tuple(str(r) for r in raw_reqs),
            posted_date=_text(payload, "postedDate"),
        )

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": self.id,
            "title": self.title,
            "company": self.company,
            "location": self.location,
            "type": self.job_type,
            "description": self.description,
            "postedDate": self.posted_date,
        }
        if self.salary is not None:
            data["salary"] = self.salary
        if self.requirements:
            data["requirements"] = list(self.requirements)
        return data


@dataclass(frozen=True)
class FilterCriteria:
    """Four independent filters; an empty field means no constraint."""

    search: str = ""
    location: str = ""
    type: str = ""
    company: str = ""

    @classmethod
    def field_names(cls) -> tuple[str, ...]:
        return tuple(f.name for f in fields(cls))

    @property
    def is_empty(self) -> bool:
        return not any(getattr(self, name) for name in self.field_names())

    def merged(self, partial: Mapping[str, str | None]) -> "FilterCriteria":
        """Return a copy with the given fields replaced; ``None`` leaves a field as-is."""
        unknown = set(partial) - set(self.field_names())
        if unknown:
            raise ValueError(f"Unknown filter field(s): {', '.join(sorted(unknown))}")
        changes = {k: (v or "").strip() for k, v in partial.items() if v is not None}
        return replace(self, **changes)


class LoadStatus(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class ErrorKind(str, Enum):
    FETCH = "fetch"
    NOT_FOUND = "not_found"


class FallbackPolicy(str, Enum):
    """What the store does when the remote source fails."""

    SILENT = "silent"
    VISIBLE = "visible"


@dataclass
class FetchResult(Generic[T]):
    """Outcome of a gateway call: a value, or the error that replaced it."""

    value: T | None = None
    error: FetchError | NotFound | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def not_found(self) -> bool:
        return isinstance(self.error, NotFound)


@dataclass
class Applicant:
    name: str
    email: str
    resume_path: str
    cover_letter: str | None = None


@dataclass
class SubmissionResult:
    """Outcome of one application submission."""

    job_id: str
    ok: bool
    message: str
    submitted_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
