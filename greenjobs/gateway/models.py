"""Messages exchanged by the worker gateway with workers and backend services."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Protocol


def _lookup(data: Mapping[str, Any], name: str) -> Any:
    """Look a JSON key up, exact match first, then ignoring case."""
    if name in data:
        return data[name]
    lowered = name.lower()
    for key, value in data.items():
        if isinstance(key, str) and key.lower() == lowered:
            return value
    return None


def _mapping(data: Any, what: str) -> Mapping[str, Any]:
    if data is None:
        return {}
    if not isinstance(data, Mapping):
        raise ValueError(f"{what} must be a JSON object")
    return data


def _string(data: Mapping[str, Any], name: str) -> str:
    value = _lookup(data, name)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValueError(f"field {name!r} must be a string")
    return value


@dataclass
class HeartbeatRequest:
    """Heartbeat of a worker; ``status`` is AVAILABLE or RUNNING."""

    worker_id: str = ""
    status: str = ""

    @classmethod
    def from_dict(cls, data: Any) -> "HeartbeatRequest":
        data = _mapping(data, "heartbeat")
        return cls(worker_id=_string(data, "workerId"), status=_string(data, "status"))


@dataclass
class RegisterRequest:
    """Registration of a new worker."""

    key: str = ""
    zone: str = ""

    @classmethod
    def from_dict(cls, data: Any) -> "RegisterRequest":
        data = _mapping(data, "registration")
        return cls(key=_string(data, "key"), zone=_string(data, "zone"))


@dataclass
class ResultRequest:
    """Result of a finished job."""

    job_id: str = ""
    status: str = ""
    result: str = ""
    error_message: str = ""

    @classmethod
    def from_dict(cls, data: Any) -> "ResultRequest":
        data = _mapping(data, "result")
        return cls(
            job_id=_string(data, "jobId"),
            status=_string(data, "status"),
            result=_string(data, "result"),
            error_message=_string(data, "errorMessage"),
        )

    def to_dict(self) -> dict[str, str]:
        payload = {"jobId": self.job_id, "status": self.status, "result": self.result}
        if self.error_message:
            payload["errorMessage"] = self.error_message
        return payload


@dataclass
class RegisterResponse:
    """The registry's answer to a worker registration."""

    id: str = ""
    status: str = ""
    zone: str = ""

    @classmethod
    def from_dict(cls, data: Any) -> "RegisterResponse":
        data = _mapping(data, "registration response")
        return cls(
            id=_string(data, "id"),
            status=_string(data, "status"),
            zone=_string(data, "zone"),
        )

    def to_dict(self) -> dict[str, str]:
        return {"id": self.id, "status": self.status, "zone": self.zone}


@dataclass
class Job:
    """A compute job as seen by the gateway."""

    id: str = ""
    worker_id: str = ""
    status: str = ""
    result: str = ""
    error_msg: str = ""

    @classmethod
    def from_dict(cls, data: Any) -> "Job":
        data = _mapping(data, "job")
        return cls(
            id=_string(data, "ID"),
            worker_id=_string(data, "WorkerID"),
            status=_string(data, "Status"),
            result=_string(data, "Result"),
            error_msg=_string(data, "ErrorMsg"),
        )

    def to_dict(self) -> dict[str, str]:
        return {
            "ID": self.id,
            "WorkerID": self.worker_id,
            "Status": self.status,
            "Result": self.result,
            "ErrorMsg": self.error_msg,
        }


class JobBackend(Protocol):
    """Job service as used by the gateway."""

    def update_job(self, request: ResultRequest) -> None: ...

    def fetch_scheduled_jobs(self) -> list[Job]: ...


class RegistryBackend(Protocol):
    """Worker registry as used by the gateway."""

    def register_worker(self, request: RegisterRequest) -> RegisterResponse: ...

    def update_worker_status(self, request: HeartbeatRequest) -> None: ...