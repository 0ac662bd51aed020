"""Data model, errors and storage protocol of the job service."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Mapping, Protocol, Union


class JobStatus(str, enum.Enum):
    """Lifecycle states of a job."""

    QUEUED = "queued"
    SCHEDULED = "scheduled"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"


StatusLike = Union[JobStatus, str]


class JobError(Exception):
    """Base class of all errors raised by the job service."""

    default_message = "job error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class MissingIDError(JobError):
    default_message = "job ID must be provided"


class InvalidIDFormatError(JobError):
    default_message = "job ID must be a valid UUID"


class JobNotFoundError(JobError):
    default_message = "job not found"


class MissingJobNameError(JobError):
    default_message = "job name must be provided"


class MissingStatusError(JobError):
    default_message = "job status must be provided"


class MissingImageNameError(JobError):
    default_message = "image name must be provided"


class MissingWorkerIDError(JobError):
    default_message = "worker ID must be provided"


class InvalidImageVersionError(JobError):
    default_message = "image version format is invalid"


class EmptyParameterError(JobError):
    default_message = "parameters cannot have empty keys or values"


class MissingErrorMessageError(JobError):
    default_message = "error message must be provided for failed jobs"


class NegativeCarbonError(JobError):
    default_message = "carbon intensity must be non-negative"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _status_text(status: StatusLike) -> str:
    return status.value if isinstance(status, JobStatus) else str(status)


def _coerce_status(value: str) -> StatusLike:
    try:
        return JobStatus(value)
    except ValueError:
        return value


def _format_time(moment: datetime) -> str:
    return moment.isoformat().replace("+00:00", "Z")


def _field(data: Mapping[str, Any], name: str) -> Any:
    """Look a JSON key up, exact match first, then ignoring case."""
    if name in data:
        return data[name]
    lowered = name.lower()
    for key, value in data.items():
        if isinstance(key, str) and key.lower() == lowered:
            return value
    return None


def _require_mapping(data: Any, what: str) -> Mapping[str, Any]:
    if not isinstance(data, Mapping):
        raise ValueError(f"{what} must be a JSON object")
    return data


def _str_field(data: Mapping[str, Any], name: str) -> str:
    value = _field(data, name)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValueError(f"field {name!r} must be a string")
    return value


def _int_field(data: Mapping[str, Any], name: str) -> int:
    value = _field(data, name)
    if value is None:
        return 0
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"field {name!r} must be an integer")
    if isinstance(value, float):
        if not value.is_integer():
            raise ValueError(f"field {name!r} must be an integer")
        value = int(value)
    return value


@dataclass
class ContainerImage:
    """A container image reference."""

    name: str = ""
    version: str = ""

    def to_dict(self) -> dict[str, str]:
        return {"name": self.name, "version": self.version}

    @classmethod
    def from_dict(cls, data: Any) -> "ContainerImage":
        if data is None:
            return cls()
        data = _require_mapping(data, "image")
        return cls(name=_str_field(data, "name"), version=_str_field(data, "version"))


@dataclass
class Job:
    """A compute job and everything known about it."""

    id: str = ""
    user_id: str = ""
    created_at: datetime = field(default_factory=_utcnow)
    updated_at: datetime = field(default_factory=_utcnow)
    job_name: str = ""
    image: ContainerImage = field(default_factory=ContainerImage)
    adjustment_parameters: dict[str, str] = field(default_factory=dict)
    creation_zone: str = ""
    worker_id: str = ""
    compute_zone: str = ""
    carbon_intensity: int = 0
    carbon_saving: int = 0
    result: str = ""
    error_message: str = ""
    status: StatusLike = JobStatus.QUEUED

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "userId": self.user_id,
            "createdAt": _format_time(self.created_at),
            "updatedAt": _format_time(self.updated_at),
            "jobName": self.job_name,
            "image": self.image.to_dict(),
            "parameters": dict(self.adjustment_parameters),
            "creationZone": self.creation_zone,
            "workerId": self.worker_id,
            "computeZone": self.compute_zone,
            "carbonIntensity": self.carbon_intensity,
            "carbonSavings": self.carbon_saving,
            "result": self.result,
            "errorMessage": self.error_message,
            "status": _status_text(self.status),
        }


@dataclass
class JobCreate:
    """The fields a client supplies to create a job."""

    job_name: str = ""
    creation_zone: str = ""
    image: ContainerImage = field(default_factory=ContainerImage)
    parameters: dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Any) -> "JobCreate":
        data = _require_mapping(data, "job")
        raw_params = _field(data, "parameters")
        parameters: dict[str, str] = {}
        if raw_params is not None:
            raw_params = _require_mapping(raw_params, "parameters")
            for key, value in raw_params.items():
                if not isinstance(value, str):
                    raise ValueError(f"parameter {key!r} must be a string")
                parameters[key] = value
        return cls(
            job_name=_str_field(data, "jobName"),
            creation_zone=_str_field(data, "creationZone"),
            image=ContainerImage.from_dict(_field(data, "image")),
            parameters=parameters,
        )


@dataclass
class SchedulerUpdateData:
    """Job update sent by the scheduler."""

    worker_id: str = ""
    compute_zone: str = ""
    carbon_intensity: int = 0
    carbon_saving: int = 0
    status: StatusLike = ""

    @classmethod
    def from_dict(cls, data: Any) -> "SchedulerUpdateData":
        data = _require_mapping(data, "scheduler update")
        return cls(
            worker_id=_str_field(data, "workerId"),
            compute_zone=_str_field(data, "computeZone"),
            carbon_intensity=_int_field(data, "carbonIntensity"),
            carbon_saving=_int_field(data, "carbonSavings"),
            status=_coerce_status(_str_field(data, "status")),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "workerId": self.worker_id,
            "computeZone": self.compute_zone,
            "carbonIntensity": self.carbon_intensity,
            "carbonSavings": self.carbon_saving,
            "status": _status_text(self.status),
        }


@dataclass
class WorkerDaemonUpdateData:
    """Job update sent by a worker daemon."""

    status: StatusLike = ""
    result: str = ""
    error_message: str = ""

    @classmethod
    def from_dict(cls, data: Any) -> "WorkerDaemonUpdateData":
        data = _require_mapping(data, "worker daemon update")
        return cls(
            status=_coerce_status(_str_field(data, "status")),
            result=_str_field(data, "result"),
            error_message=_str_field(data, "errorMessage"),
        )

    def to_dict(self) -> dict[str, str]:
        return {
            "status": _status_text(self.status),
            "result": self.result,
            "errorMessage": self.error_message,
        }


@dataclass
class JobOutcome:
    """Result and metadata of a job's execution."""

    job_name: str = ""
    status: StatusLike = ""
    result: str = ""
    error_message: str = ""
    compute_zone: str = ""
    carbon_intensity: int = 0
    carbon_savings: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "jobName": self.job_name,
            "status": _status_text(self.status),
            "result": self.result,
            "errorMessage": self.error_message,
            "computeZone": self.compute_zone,
            "carbonIntensity": self.carbon_intensity,
            "carbonSavings": self.carbon_savings,
        }


class JobStorage(Protocol):
    """Persistence used by the job service."""

    def get_jobs(self, statuses: list[StatusLike] | None) -> list[Job]: ...

    def create_job(self, job: Job) -> None: ...

    def get_job(self, job_id: str) -> Job: ...

    def update_job(self, job_id: str, job: Job) -> Job: ...