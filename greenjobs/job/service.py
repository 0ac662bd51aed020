"""Job service: validation and lifecycle of jobs."""

from __future__ import annotations

import unicodedata
import uuid
from dataclasses import replace
from datetime import datetime, timezone

from greenjobs.job.models import (
    EmptyParameterError,
    InvalidIDFormatError,
    InvalidImageVersionError,
    Job,
    JobCreate,
    JobError,
    JobNotFoundError,
    JobOutcome,
    JobStatus,
    JobStorage,
    MissingErrorMessageError,
    MissingIDError,
    MissingImageNameError,
    MissingJobNameError,
    MissingStatusError,
    MissingWorkerIDError,
    NegativeCarbonError,
    SchedulerUpdateData,
    StatusLike,
    WorkerDaemonUpdateData,
    _status_text,
)

_PLACEHOLDER_USER_ID = "some-user-id"


def is_simple_valid_version(version: str) -> bool:
    """Tell whether an image version holds only letters, digits, '.', '-' and '_'."""
    return all(
        char.isalpha() or unicodedata.category(char) == "Nd" or char in ".-_"
        for char in version
    )


def is_valid_status(status: StatusLike) -> bool:
    """Tell whether ``status`` names a known job status."""
    try:
        JobStatus(status)
    except ValueError:
        return False
    return True


def _validate_id(job_id: str) -> None:
    if not job_id.strip():
        raise MissingIDError()
    try:
        uuid.UUID(job_id)
    except ValueError:
        raise InvalidIDFormatError() from None


def _now() -> datetime:
    return datetime.now(timezone.utc)


class JobService:
    """Creates, looks up and updates jobs held in a storage."""

    def __init__(self, storage: JobStorage) -> None:
        if storage is None:
            raise ValueError("storage cannot be None")
        self._storage = storage

    def get_jobs(self, statuses: list[StatusLike] | None = None) -> list[Job]:
        """Return jobs, optionally limited to the given statuses.

        Unknown statuses are ignored; if none of them is known, no job is returned.
        """
        if not statuses:
            return self._storage.get_jobs(None)
        valid = [status for status in statuses if is_valid_status(status)]
        if not valid:
            return []
        return self._storage.get_jobs(valid)

    def create_job(self, job_create: JobCreate) -> Job:
        if not job_create.job_name.strip():
            raise MissingJobNameError()
        if not job_create.image.name.strip():
            raise MissingImageNameError()
        if not is_simple_valid_version(job_create.image.version):
            raise InvalidImageVersionError()
        if any(
            not key.strip() or not value.strip()
            for key, value in job_create.parameters.items()
        ):
            raise EmptyParameterError()

        now = _now()
        job = Job(
            id=str(uuid.uuid4()),
            user_id=_PLACEHOLDER_USER_ID,
            created_at=now,
            updated_at=now,
            job_name=job_create.job_name,
            image=replace(job_create.image),
            adjustment_parameters=dict(job_create.parameters),
            creation_zone=job_create.creation_zone,
            status=JobStatus.QUEUED,
        )
        self._storage.create_job(job)
        return job

    def get_job(self, job_id: str) -> Job:
        _validate_id(job_id)
        try:
            return self._storage.get_job(job_id)
        except JobError:
            raise JobNotFoundError() from None

    def get_job_outcome(self, job_id: str) -> JobOutcome:
        job = self.get_job(job_id)
        return JobOutcome(
            job_name=job.job_name,
            status=job.status,
            result=job.result,
            error_message=job.error_message,
            compute_zone=job.compute_zone,
            carbon_intensity=job.carbon_intensity,
            carbon_savings=job.carbon_saving,
        )

    def update_job_scheduler(self, job_id: str, data: SchedulerUpdateData) -> Job:
        _validate_id(job_id)
        if not _status_text(data.status).strip():
            raise MissingStatusError()
        if not data.worker_id.strip():
            raise MissingWorkerIDError()
        if data.carbon_intensity < 0:
            raise NegativeCarbonError()

        job = self.get_job(job_id)
        job.worker_id = data.worker_id
        job.compute_zone = data.compute_zone
        job.carbon_intensity = data.carbon_intensity
        job.carbon_saving = data.carbon_saving
        job.status = data.status
        job.updated_at = _now()
        return self._storage.update_job(job_id, job)

    def update_job_worker_daemon(self, job_id: str, data: WorkerDaemonUpdateData) -> Job:
        _validate_id(job_id)
        if not _status_text(data.status).strip():
            raise MissingStatusError()
        if data.status == JobStatus.FAILED and not data.error_message.strip():
            raise MissingErrorMessageError()

        job = self.get_job(job_id)
        job.status = data.status
        job.result = data.result
        job.error_message = data.error_message
        job.updated_at = _now()
        return self._storage.update_job(job_id, job)