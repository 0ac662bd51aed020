"""In-memory job storage."""

from __future__ import annotations

import copy
from collections.abc import Iterable

from greenjobs.job.models import Job, JobNotFoundError, StatusLike


def contains_status(statuses: Iterable[StatusLike], status: StatusLike) -> bool:
    """Tell whether ``status`` is one of ``statuses``."""
    return status in statuses


class InMemoryJobStorage:
    """Job storage kept in a dictionary; jobs are stored and returned as copies."""

    def __init__(self) -> None:
        self._jobs: dict[str, Job] = {}

    def get_jobs(self, statuses: list[StatusLike] | None = None) -> list[Job]:
        if not statuses:
            return [copy.deepcopy(job) for job in self._jobs.values()]
        return [
            copy.deepcopy(job)
            for job in self._jobs.values()
            if contains_status(statuses, job.status)
        ]

    def create_job(self, job: Job) -> None:
        self._jobs[job.id] = copy.deepcopy(job)

    def get_job(self, job_id: str) -> Job:
        try:
            return copy.deepcopy(self._jobs[job_id])
        except KeyError:
            raise JobNotFoundError() from None

    def update_job(self, job_id: str, job: Job) -> Job:
        if job_id not in self._jobs:
            raise JobNotFoundError()
        self._jobs[job_id] = copy.deepcopy(job)
        return job