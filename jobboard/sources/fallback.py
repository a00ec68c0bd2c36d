"""Static job dataset served whenever the remote source cannot answer."""
from __future__ import annotations

from typing import Callable

from jobboard.log import get_logger
from jobboard.models import JobRecord

log = get_logger(__name__)

Predicate = Callable[[JobRecord], bool]

_FALLBACK_JOBS: tuple[JobRecord, ...] = (
    JobRecord(
        id="1",
        title="Frontend Developer",
        company="TechCorp",
        location="San Francisco, CA",
        job_type="Full-time",
        description="We are looking for a skilled Frontend Developer to join our team "
        "and help build amazing user experiences.",
        salary="$80,000 - $120,000",
        requirements=("React", "TypeScript", "CSS"),
        posted_date="2024-01-15",
    ),
    JobRecord(
        id="2",
        title="Backend Engineer",
        company="DataFlow Inc",
        location="New York, NY",
        job_type="Full-time",
        description="Join our backend team to build scalable APIs and microservices "
        "using modern technologies.",
        salary="$90,000 - $130,000",
        requirements=("Node.js", "Python", "PostgreSQL"),
        posted_date="2024-01-14",
    ),
    JobRecord(
        id="3",
        title="UI/UX Designer",
        company="Creative Studio",
        location="Remote",
        job_type="Contract",
        description="Help us create beautiful and intuitive user interfaces for our products.",
        salary="$70,000 - $100,000",
        requirements=("Figma", "Adobe Creative Suite", "User Research"),
        posted_date="2024-01-13",
    ),
    JobRecord(
        id="4",
        title="DevOps Engineer",
        company="CloudTech",
        location="Austin, TX",
        job_type="Full-time",
        description="Manage our cloud infrastructure and deployment pipelines to ensure "
        "smooth operations.",
        salary="$85,000 - $125,000",
        requirements=("AWS", "Docker", "Kubernetes"),
        posted_date="2024-01-12",
    ),
    JobRecord(
        id="5",
        title="Mobile Developer",
        company="AppWorks",
        location="Seattle, WA",
        job_type="Part-time",
        description="Develop native mobile applications for iOS and Android platforms.",
        salary="$60,000 - $90,000",
        requirements=("React Native", "Swift", "Kotlin"),
        posted_date="2024-01-11",
    ),
    JobRecord(
        id="6",
        title="Data Scientist",
        company="Analytics Pro",
        location="Boston, MA",
        job_type="Full-time",
        description="Apply machine learning and statistical analysis to solve complex "
        "business problems.",
        salary="$95,000 - $140,000",
        requirements=("Python", "R", "TensorFlow"),
        posted_date="2024-01-10",
    ),
    JobRecord(
        id="7",
        title="Product Manager",
        company="Innovate Labs",
        location="Remote",
        job_type="Full-time",
        description="Lead product strategy and development for our innovative software "
        "solutions.",
        salary="$100,000 - $150,000",
        requirements=("Product Strategy", "Agile", "User Research"),
        posted_date="2024-01-09",
    ),
    JobRecord(
        id="8",
        title="QA Engineer",
        company="Quality First",
        location="Chicago, IL",
        job_type="Part-time",
        description="Ensure software quality through comprehensive testing and automation.",
        salary="$65,000 - $95,000",
        requirements=("Selenium", "Jest", "Manual Testing"),
        posted_date="2024-01-08",
    ),
)


def search_predicate(query: str) -> Predicate:
    """Case-insensitive match on title, company or description."""
    q = query.lower()
    return lambda job: (
        q in job.title.lower() or q in job.company.lower() or q in job.description.lower()
    )


def type_predicate(job_type: str) -> Predicate:
    t = job_type.lower()
    return lambda job: job.job_type.lower() == t


class FallbackSource:
    def __init__(self, jobs: tuple[JobRecord, ...] = _FALLBACK_JOBS) -> None:
        if not jobs:
            raise ValueError("Fallback dataset cannot be empty")
        self._jobs = tuple(jobs)

    def all(self) -> list[JobRecord]:
        log.info("Serving %d fallback jobs", len(self._jobs))
        return list(self._jobs)

    def by_id(self, job_id: str) -> JobRecord | None:
        for job in self._jobs:
            if job.id == job_id:
                return job
        return None

    def matching(self, predicate: Predicate) -> list[JobRecord]:
        return [job for job in self._jobs if predicate(job)]
