"""
Registry of export jobs keyed by job id.
"""

import threading
import time
from typing import Dict, List

from .models import ExportJob
from ..errors import JobNotFound


class JobRegistry:
    """
    Thread-safe map of job id to job.

    Jobs are inserted on start and removed explicitly once their archive has
    been delivered or the job is discarded.
    """

    def __init__(self):
        self._jobs: Dict[str, ExportJob] = {}
        self._lock = threading.Lock()
        self._counter = 0

    def __len__(self) -> int:
        with self._lock:
            return len(self._jobs)

    def __contains__(self, job_id: str) -> bool:
        with self._lock:
            return job_id in self._jobs

    def new_id(self) -> str:
        with self._lock:
            self._counter += 1
            return f"job_{self._counter}_{int(time.time())}"

    def add(self, job: ExportJob) -> None:
        with self._lock:
            self._jobs[job.job_id] = job

    def get(self, job_id: str) -> ExportJob:
        with self._lock:
            job = self._jobs.get(job_id)
        if job is None:
            raise JobNotFound(job_id)
        return job

    def remove(self, job_id: str) -> ExportJob:
        with self._lock:
            job = self._jobs.pop(job_id, None)
        if job is None:
            raise JobNotFound(job_id)
        return job

    def all(self) -> List[ExportJob]:
        with self._lock:
            jobs = list(self._jobs.values())
        jobs.sort(key=lambda j: j.started_at, reverse=True)
        return jobs
