"""Submit job applications and record them in the applied-jobs ledger."""
from __future__ import annotations

import re
import time
from abc import ABC, abstractmethod
from typing import Any, Callable

import requests

from jobboard.errors import SubmissionError, ValidationError
from jobboard.ledger import AppliedLedger
from jobboard.log import get_logger
from jobboard.models import Applicant, SubmissionResult
from jobboard.retry import retry

log = get_logger(__name__)

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def validate_applicant(applicant: Applicant) -> None:
    """Raise ValidationError for the first field the application form would reject."""
    if len((applicant.name or "").strip()) < 2:
        raise ValidationError("name", "Name must be at least 2 characters")
    if not _EMAIL_RE.match((applicant.email or "").strip()):
        raise ValidationError("email", "Please enter a valid email address")
    if not (applicant.resume_path or "").strip():
        raise ValidationError("resume", "Please upload your resume")


def build_payload(job_id: str, applicant: Applicant) -> dict[str, Any]:
    return {
        "jobId": job_id,
        "name": applicant.name.strip(),
        "email": applicant.email.strip(),
        "coverLetter": applicant.cover_letter or "",
        "resume": applicant.resume_path,
    }


class ApplicationSender(ABC):
    @abstractmethod
    def send(self, job_id: str, applicant: Applicant) -> str:
        """Deliver the application; return an acknowledgement or raise SubmissionError."""


class SimulatedSender(ApplicationSender):
    """Stand-in for a real endpoint: waits, then acknowledges."""

    def __init__(self, delay: float = 2.0, sleep: Callable[[float], None] = time.sleep) -> None:
        self.delay = delay
        self._sleep = sleep

    def send(self, job_id: str, applicant: Applicant) -> str:
        if self.delay > 0:
            self._sleep(self.delay)
        log.debug("Simulated submission for job %s by %s", job_id, applicant.email)
        return "Application submitted successfully!"


class HttpSender(ApplicationSender):
    def __init__(
        self,
        endpoint: str,
        timeout: float = 15.0,
        max_attempts: int = 3,
        session: requests.Session | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.endpoint = endpoint
        self.timeout = timeout
        self.session = session or requests.Session()
        self._post = retry(
            max_attempts=max_attempts,
            base_delay=1.5,
            retryable=(requests.RequestException,),
            sleep=sleep,
        )(self._post_once)

    def _post_once(self, payload: dict[str, Any]) -> requests.Response:
        r = self.session.post(self.endpoint, json=payload, timeout=self.timeout)
        r.raise_for_status()
        return r

    def send(self, job_id: str, applicant: Applicant) -> str:
        try:
            r = self._post(build_payload(job_id, applicant))
        except requests.RequestException as exc:
            raise SubmissionError(f"Could not submit application for job {job_id}: {exc}") from exc
        log.info("Submitted application for job %s (HTTP %d)", job_id, r.status_code)
        return "Application submitted successfully!"


class SubmissionCoordinator:
    """Validates, sends, and on success records the job exactly once in the ledger."""

    def __init__(self, ledger: AppliedLedger, sender: ApplicationSender) -> None:
        self.ledger = ledger
        self.sender = sender

    def submit(self, job_id: str, applicant: Applicant) -> SubmissionResult:
        validate_applicant(applicant)
        if self.ledger.contains(job_id):
            log.warning("Job %s already marked as applied; submitting again", job_id)

        try:
            message = self.sender.send(job_id, applicant)
        except SubmissionError as exc:
            log.error("Submission for job %s failed: %s", job_id, exc)
            return SubmissionResult(job_id=job_id, ok=False, message=str(exc))

        self.ledger.add(job_id)
        return SubmissionResult(job_id=job_id, ok=True, message=message)
