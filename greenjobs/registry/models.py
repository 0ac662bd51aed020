"""Data model and errors of the worker registry."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any, Mapping, Union


class WorkerStatus(str, enum.Enum):
    """States a worker can be in."""

    AVAILABLE = "AVAILABLE"
    RUNNING = "RUNNING"


StatusLike = Union[WorkerStatus, str]


def status_text(status: StatusLike) -> str:
    """Return the wire form of a worker status."""
    return status.value if isinstance(status, WorkerStatus) else str(status)


class WorkerRegistryError(Exception):
    """Base class of all errors raised by the worker registry."""


class WorkerNotFoundError(WorkerRegistryError):
    """No worker with the given ID is known."""

    def __init__(self, worker_id: str) -> None:
        super().__init__(f"Worker with ID {worker_id} not found")
        self.worker_id = worker_id


class InvalidWorkerStatusError(WorkerRegistryError):
    """A status other than AVAILABLE or RUNNING was requested."""

    def __init__(self, worker_id: str) -> None:
        super().__init__(
            f"invalid status ('AVAILABLE' or 'RUNNING') for worker with ID {worker_id}"
        )
        self.worker_id = worker_id


class MissingZoneError(WorkerRegistryError):
    """A worker was to be stored without a zone or status."""

    def __init__(self) -> None:
        super().__init__("creating worker failed due to missing parameter 'zone'")


class InvalidZoneError(WorkerRegistryError):
    """A worker was to be created in a zone that is not known."""

    def __init__(self, zone: str) -> None:
        super().__init__(f"creating worker failed due to invalid 'zone' {zone}")
        self.zone = zone


@dataclass
class Worker:
    """A registered worker."""

    id: str = ""
    status: StatusLike = WorkerStatus.AVAILABLE
    zone: str = ""

    def to_dict(self) -> dict[str, str]:
        return {"id": self.id, "status": status_text(self.status), "zone": self.zone}


def _string(data: Mapping[str, Any], name: str) -> str:
    value = data.get(name)
    if value is None:
        for key, candidate in data.items():
            if isinstance(key, str) and key.lower() == name:
                value = candidate
                break
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValueError(f"field {name!r} must be a string")
    return value


@dataclass(frozen=True)
class Zone:
    """A compute zone, such as ``DE`` for Germany."""

    code: str = ""
    name: str = ""

    @classmethod
    def from_dict(cls, data: Any) -> "Zone":
        if not isinstance(data, Mapping):
            raise ValueError("zone must be a JSON object")
        return cls(code=_string(data, "code"), name=_string(data, "name"))