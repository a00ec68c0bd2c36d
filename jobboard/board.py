"""The job board session: one store, one ledger, one submission coordinator.

Build it once with :meth:`JobBoard.from_settings` and hand the instance to
whatever drives it (CLI, tests). Both ways of marking a job as applied go
through the same :class:`AppliedLedger`.
"""
from __future__ import annotations

from concurrent.futures import Executor, Future

from jobboard.config import Settings
from jobboard.log import get_logger
from jobboard.ledger import AppliedLedger
from jobboard.models import Applicant, ErrorKind, FilterCriteria, JobRecord, LoadStatus, SubmissionResult
from jobboard.sources import FallbackSource, JobApiGateway
from jobboard.storage import JsonFileStorage, KeyValueStorage, MemoryStorage
from jobboard.store import JobStore
from jobboard.submission import ApplicationSender, HttpSender, SimulatedSender, SubmissionCoordinator

log = get_logger(__name__)


class JobBoard:
    def __init__(self, store: JobStore, ledger: AppliedLedger, sender: ApplicationSender) -> None:
        self.store = store
        self.ledger = ledger
        self.coordinator = SubmissionCoordinator(ledger, sender)

    @classmethod
    def from_settings(cls, settings: Settings) -> "JobBoard":
        storage: KeyValueStorage
        if settings.storage_path is None:
            log.info("No storage path configured, applied jobs kept in memory only")
            storage = MemoryStorage()
        else:
            storage = JsonFileStorage(settings.storage_path)

        ledger = AppliedLedger(storage, key=settings.storage_key)
        ledger.initialize()

        store = JobStore(
            JobApiGateway(settings.api_base_url, timeout=settings.timeout),
            FallbackSource(),
            policy=settings.fallback_policy,
        )
        sender: ApplicationSender
        if settings.submit_endpoint:
            sender = HttpSender(settings.submit_endpoint)
        else:
            sender = SimulatedSender(delay=settings.submit_delay)
        return cls(store, ledger, sender)

    # Reads

    def all_jobs(self) -> list[JobRecord]:
        return self.store.all_jobs()

    def filtered_jobs(self) -> list[JobRecord]:
        return self.store.filtered_jobs()

    def get_job(self, job_id: str) -> JobRecord | None:
        return self.store.get(job_id)

    def is_applied(self, job_id: str) -> bool:
        return self.ledger.contains(job_id)

    def applied_jobs(self) -> list[JobRecord]:
        """Loaded jobs the user applied to, in the order they were applied."""
        jobs = {job.id: job for job in self.store.all_jobs()}
        return [jobs[i] for i in self.ledger.ids() if i in jobs]

    def loading_status(self) -> LoadStatus:
        return self.store.loading_status()

    def last_error(self) -> str | None:
        return self.store.last_error()

    def last_error_kind(self) -> ErrorKind | None:
        return self.store.last_error_kind()

    def current_filters(self) -> FilterCriteria:
        return self.store.current_filters()

    # Mutations

    def set_filter(self, **partial: str | None) -> FilterCriteria:
        return self.store.set_filter(**partial)

    def clear_filter(self) -> None:
        self.store.clear_filter()

    def load_all(self) -> LoadStatus:
        return self.store.load_all()

    def load_all_in_background(self, executor: Executor) -> "Future[LoadStatus]":
        return self.store.submit_load_all(executor)

    def load_one(self, job_id: str) -> JobRecord | None:
        return self.store.load_one(job_id)

    def load_matching(self, search: str = "", job_type: str = "") -> LoadStatus:
        return self.store.load_matching(search=search, job_type=job_type)

    def mark_applied(self, job_id: str) -> bool:
        return self.ledger.add(job_id)

    def unmark_applied(self, job_id: str) -> bool:
        return self.ledger.remove(job_id)

    def submit_application(self, job_id: str, applicant: Applicant) -> SubmissionResult:
        return self.coordinator.submit(job_id, applicant)
