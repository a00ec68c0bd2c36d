"""Tests for the job collection store."""
import threading
from concurrent.futures import ThreadPoolExecutor

import pytest

from jobboard.errors import FetchError, NotFound
from jobboard.models import ErrorKind, FallbackPolicy, FetchResult, FilterCriteria, LoadStatus
from jobboard.sources.base import JobSourceBase
from jobboard.sources.fallback import FallbackSource
from jobboard.store import JobStore
from tests.conftest import StubSource, make_job


@pytest.fixture
def remote_jobs():
    return [
        make_job("10", "Backend Engineer", job_type="Full-time"),
        make_job("11", "Backend Engineer", job_type="Contract", location="Berlin"),
    ]


class TestLoadAll:
    def test_starts_idle(self):
        store = JobStore(StubSource(), FallbackSource())
        assert store.loading_status() is LoadStatus.IDLE
        assert store.all_jobs() == []
        assert store.last_error() is None

    def test_success_replaces_collection(self, remote_jobs):
        store = JobStore(StubSource(remote_jobs), FallbackSource())
        store.set_jobs([make_job("old")])

        assert store.load_all() is LoadStatus.SUCCEEDED
        assert [j.id for j in store.all_jobs()] == ["10", "11"]
        assert store.last_error() is None

    def test_failure_silently_uses_fallback(self):
        store = JobStore(StubSource(fail=True), FallbackSource())
        assert store.load_all() is LoadStatus.SUCCEEDED
        assert len(store.all_jobs()) >= 1
        assert store.all_jobs() == FallbackSource().all()
        assert store.last_error() is None

    def test_visible_policy_reports_failure_and_keeps_collection(self):
        store = JobStore(StubSource(fail=True), FallbackSource(), policy=FallbackPolicy.VISIBLE)
        store.set_jobs([make_job("kept")])

        assert store.load_all() is LoadStatus.FAILED
        assert "connection refused" in store.last_error()
        assert store.last_error_kind() is ErrorKind.FETCH
        assert [j.id for j in store.all_jobs()] == ["kept"]

    def test_policy_accepts_plain_string(self):
        store = JobStore(StubSource(), FallbackSource(), policy="visible")
        assert store.policy is FallbackPolicy.VISIBLE

    def test_success_after_failure_clears_error(self, remote_jobs):
        source = StubSource(remote_jobs, fail=True)
        store = JobStore(source, FallbackSource(), policy=FallbackPolicy.VISIBLE)
        store.load_all()
        source.fail = False
        assert store.load_all() is LoadStatus.SUCCEEDED
        assert store.last_error() is None
        assert store.last_error_kind() is None

    def test_background_load(self, remote_jobs):
        store = JobStore(StubSource(remote_jobs), FallbackSource())
        with ThreadPoolExecutor(max_workers=1) as pool:
            assert store.submit_load_all(pool).result(timeout=5) is LoadStatus.SUCCEEDED
        assert len(store.all_jobs()) == 2


class _BlockingSource(JobSourceBase):
    """First list call blocks until released; later calls return immediately."""

    def __init__(self, slow_jobs, fast_jobs):
        self.slow_jobs = slow_jobs
        self.fast_jobs = fast_jobs
        self.started = threading.Event()
        self.release = threading.Event()
        self.calls = 0
        self._lock = threading.Lock()

    def fetch_all(self, params=None):
        with self._lock:
            self.calls += 1
            first = self.calls == 1
        if first:
            self.started.set()
            self.release.wait(timeout=5)
            return FetchResult(value=self.slow_jobs)
        return FetchResult(value=self.fast_jobs)

    def fetch_one(self, job_id):
        return FetchResult(error=FetchError("unused"))


def test_stale_list_response_is_discarded():
    source = _BlockingSource([make_job("stale")], [make_job("fresh")])
    store = JobStore(source, FallbackSource())

    with ThreadPoolExecutor(max_workers=1) as pool:
        slow = store.submit_load_all(pool)
        assert source.started.wait(timeout=5)
        assert store.load_all() is LoadStatus.SUCCEEDED
        source.release.set()
        slow.result(timeout=5)

    assert [j.id for j in store.all_jobs()] == ["fresh"]
    assert store.loading_status() is LoadStatus.SUCCEEDED


class TestLoadOne:
    def test_inserts_missing_record(self, remote_jobs):
        store = JobStore(StubSource(remote_jobs), FallbackSource())
        job = store.load_one("11")
        assert job.id == "11"
        assert store.get("11") == job
        assert store.loading_status() is LoadStatus.SUCCEEDED

    def test_does_not_overwrite_existing_record(self):
        existing = make_job("10", "Original title")
        store = JobStore(StubSource([make_job("10", "Newer title")]), FallbackSource())
        store.set_jobs([existing])

        assert store.load_one("10") == existing
        assert store.get("10").title == "Original title"
        assert len(store.all_jobs()) == 1

    def test_not_found_is_distinct_from_fetch_failure(self):
        store = JobStore(StubSource(missing={"99"}), FallbackSource())
        assert store.load_one("99") is None
        assert store.loading_status() is LoadStatus.FAILED
        assert store.last_error_kind() is ErrorKind.NOT_FOUND
        assert store.last_error() == "Job 99 not found"

    def test_failure_falls_back_to_static_record(self):
        store = JobStore(StubSource(fail=True), FallbackSource())
        job = store.load_one("3")
        assert job.title == "UI/UX Designer"
        assert store.loading_status() is LoadStatus.SUCCEEDED

    def test_failure_with_unknown_id_is_not_found(self):
        store = JobStore(StubSource(fail=True), FallbackSource())
        assert store.load_one("404") is None
        assert store.last_error_kind() is ErrorKind.NOT_FOUND

    def test_visible_policy_reports_fetch_error(self):
        store = JobStore(StubSource(fail=True), FallbackSource(), policy=FallbackPolicy.VISIBLE)
        assert store.load_one("3") is None
        assert store.last_error_kind() is ErrorKind.FETCH
        assert store.get("3") is None


class TestLoadMatching:
    def test_passes_query_to_remote(self, remote_jobs):
        source = StubSource(remote_jobs)
        store = JobStore(source, FallbackSource())
        store.load_matching(search="backend", job_type="Contract")
        assert source.list_calls == [{"search": "backend", "type": "Contract"}]

    def test_fallback_filters_locally(self):
        store = JobStore(StubSource(fail=True), FallbackSource())
        assert store.load_matching(search="engineer", job_type="part-time") is LoadStatus.SUCCEEDED
        assert [j.id for j in store.all_jobs()] == ["8"]

    def test_fallback_search_covers_company(self):
        store = JobStore(StubSource(fail=True), FallbackSource())
        store.load_matching(search="dataflow")
        assert [j.id for j in store.all_jobs()] == ["2"]


class TestFilters:
    def test_set_filter_merges(self, remote_jobs):
        store = JobStore(StubSource(remote_jobs), FallbackSource())
        store.load_all()
        store.set_filter(search="engineer")
        store.set_filter(type="Full-time")

        assert store.current_filters() == FilterCriteria(search="engineer", type="Full-time")
        assert [j.id for j in store.filtered_jobs()] == ["10"]

    def test_clear_filter(self, remote_jobs):
        store = JobStore(StubSource(remote_jobs), FallbackSource())
        store.load_all()
        store.set_filter(location="berlin", company="acme")
        assert [j.id for j in store.filtered_jobs()] == ["11"]

        store.clear_filter()
        assert store.current_filters().is_empty
        assert store.filtered_jobs() == store.all_jobs()

    def test_unknown_filter_field(self):
        store = JobStore(StubSource(), FallbackSource())
        with pytest.raises(ValueError):
            store.set_filter(salary="lots")


def test_set_jobs_dedupes_by_id():
    store = JobStore(StubSource(), FallbackSource())
    store.set_jobs([make_job("1", "First"), make_job("1", "Second"), make_job("2")])
    assert [(j.id, j.title) for j in store.all_jobs()] == [("1", "First"), ("2", "Engineer")]


class _GatedListSource(JobSourceBase):
    """List calls block until released; single-record calls answer immediately."""

    def __init__(self, list_result, one_result):
        self.list_result = list_result
        self.one_result = one_result
        self.started = threading.Event()
        self.release = threading.Event()

    def fetch_all(self, params=None):
        self.started.set()
        self.release.wait(timeout=5)
        return self.list_result

    def fetch_one(self, job_id):
        return self.one_result


def _run_list_alongside_load_one(store, source, job_id):
    with ThreadPoolExecutor(max_workers=1) as pool:
        pending = store.submit_load_all(pool)
        assert source.started.wait(timeout=5)
        store.load_one(job_id)
        assert store.loading_status() is LoadStatus.LOADING
        source.release.set()
        pending.result(timeout=5)


class TestConcurrentListAndRecordLoads:
    def test_failed_list_is_reported_despite_successful_load_one(self):
        source = _GatedListSource(
            FetchResult(error=FetchError("connection refused")),
            FetchResult(value=make_job("1")),
        )
        store = JobStore(source, FallbackSource(), policy=FallbackPolicy.VISIBLE)

        _run_list_alongside_load_one(store, source, "1")

        assert store.loading_status() is LoadStatus.FAILED
        assert "connection refused" in store.last_error()
        assert store.last_error_kind() is ErrorKind.FETCH
        assert store.get("1") is not None

    def test_successful_list_supersedes_earlier_not_found(self):
        source = _GatedListSource(FetchResult(value=[make_job("10")]), FetchResult(error=NotFound("99")))
        store = JobStore(source, FallbackSource())

        _run_list_alongside_load_one(store, source, "99")

        assert store.loading_status() is LoadStatus.SUCCEEDED
        assert store.last_error() is None
        assert store.last_error_kind() is None

    def test_not_found_after_list_is_still_reported(self):
        store = JobStore(StubSource([make_job("10")], missing={"99"}), FallbackSource())
        store.load_all()
        assert store.load_one("99") is None
        assert store.last_error_kind() is ErrorKind.NOT_FOUND
        store.load_all()
        assert store.loading_status() is LoadStatus.SUCCEEDED
