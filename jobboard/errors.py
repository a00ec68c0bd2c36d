"""Error types shared across the job board core."""
from __future__ import annotations


class JobBoardError(Exception):
    """Base class for job board errors."""


class FetchError(JobBoardError):
    """Remote source unreachable, timed out, or answered with a non-2xx status."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class NotFound(JobBoardError):
    """The source answered, but holds no job with the requested id."""

    def __init__(self, job_id: str) -> None:
        super().__init__(f"Job {job_id} not found")
        self.job_id = job_id


class StorageError(JobBoardError):
    """Durable local storage could not be read or written."""


class ValidationError(JobBoardError):
    def __init__(self, field: str, message: str) -> None:
        super().__init__(f"{field}: {message}")
        self.field = field
        self.message = message


class SubmissionError(JobBoardError):
    """The external application endpoint rejected or never received a submission."""
