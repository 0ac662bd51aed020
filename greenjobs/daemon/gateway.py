"""Client through which the worker daemon talks to the worker gateway."""

from __future__ import annotations

import json
from dataclasses import dataclass
from http import HTTPStatus
from typing import Any, Mapping

import requests


def _lookup(data: Mapping[str, Any], name: str) -> Any:
    """Look a JSON key up, exact match first, then ignoring case."""
    if name in data:
        return data[name]
    lowered = name.lower()
    for key, value in data.items():
        if isinstance(key, str) and key.lower() == lowered:
            return value
    return None


def _string(data: Mapping[str, Any], name: str) -> str:
    value = _lookup(data, name)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValueError(f"field {name!r} must be a string")
    return value


def _mapping(data: Any, what: str) -> Mapping[str, Any]:
    if not isinstance(data, Mapping):
        raise ValueError(f"{what} must be a JSON object")
    return data


@dataclass
class DaemonJob:
    """A job as handed to and reported by the worker daemon."""

    id: str = ""
    status: str = ""
    result: str = ""
    error_message: str = ""

    @classmethod
    def from_dict(cls, data: Any) -> "DaemonJob":
        data = _mapping(data, "job")
        return cls(
            id=_string(data, "id"),
            status=_string(data, "status"),
            result=_string(data, "result"),
            error_message=_string(data, "errorMessage"),
        )


@dataclass
class RegisterResponse:
    """The gateway's answer to a registration."""

    id: str = ""
    status: str = ""
    zone: str = ""
    token: str = ""

    @classmethod
    def from_dict(cls, data: Any) -> "RegisterResponse":
        data = _mapping(data, "registration response")
        return cls(
            id=_string(data, "id"),
            status=_string(data, "status"),
            zone=_string(data, "zone"),
            token=_string(data, "token"),
        )


class GatewayHTTPError(Exception):
    """The gateway answered with a status other than 200 OK."""

    def __init__(self, status_code: int) -> None:
        try:
            phrase = HTTPStatus(status_code).phrase
        except ValueError:
            phrase = ""
        super().__init__(f"http error: status code {phrase}")
        self.status_code = status_code


class GatewayClient:
    """Registers the worker, sends heartbeats and reports job results."""

    def __init__(self, base_url: str, session: requests.Session | None = None) -> None:
        self.base_url = base_url
        self._session = session if session is not None else requests.Session()

    def _post(self, path: str, payload: dict[str, str]) -> requests.Response:
        response = self._session.post(
            self.base_url + path,
            data=json.dumps(payload),
            headers={"Content-Type": "application/json"},
        )
        if response.status_code != 200:
            raise GatewayHTTPError(response.status_code)
        return response

    def register(self, key: str, zone: str) -> RegisterResponse:
        """Register this worker in ``zone``."""
        response = self._post("/register", {"key": key, "zone": zone})
        data = response.json()
        if data is None:
            raise ValueError("empty registration response")
        return RegisterResponse.from_dict(data)

    def send_heartbeat(self, worker_id: str, status: str) -> list[DaemonJob]:
        """Report the worker's status and return the jobs offered to it."""
        response = self._post("/worker/heartbeat", {"workerId": worker_id, "status": status})
        data = response.json()
        if data is None:
            return []
        if not isinstance(data, list):
            raise ValueError("heartbeat response must be a JSON array of jobs")
        return [DaemonJob.from_dict(item) for item in data]

    def send_result(self, job: DaemonJob) -> None:
        """Report the outcome of a processed job."""
        self._post(
            "/result",
            {
                "jobId": job.id,
                "status": job.status,
                "result": job.result,
                "errorMessage": job.error_message,
            },
        )