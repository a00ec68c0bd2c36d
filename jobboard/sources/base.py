from abc import ABC, abstractmethod
from typing import Any, Mapping

from jobboard.models import FetchResult, JobRecord


class JobSourceBase(ABC):
    @abstractmethod
    def fetch_all(self, params: Mapping[str, Any] | None = None) -> FetchResult[list[JobRecord]]:
        pass

    @abstractmethod
    def fetch_one(self, job_id: str) -> FetchResult[JobRecord]:
        pass
