"""HTTP clients for the job service and the worker registry."""

from __future__ import annotations

import json
import logging
from typing import Any
from urllib.parse import quote_plus

import requests

from greenjobs.gateway.models import (
    HeartbeatRequest,
    Job,
    RegisterRequest,
    RegisterResponse,
    ResultRequest,
)

logger = logging.getLogger(__name__)

_JSON_HEADERS = {"Content-Type": "application/json"}


class GatewayClientError(Exception):
    """A backend service could not be reached or answered unexpectedly."""


class _HTTPClient:
    def __init__(self, base_url: str, session: requests.Session | None = None) -> None:
        self.base_url = base_url
        self._session = session if session is not None else requests.Session()

    def _send(self, method: str, url: str, **kwargs: Any) -> requests.Response:
        try:
            return self._session.request(method, url, headers=_JSON_HEADERS, **kwargs)
        except requests.RequestException as exc:
            logger.error("HTTP request %s %s failed: %s", method, url, exc)
            raise GatewayClientError(f"request to {url} failed: {exc}") from exc


class JobClient(_HTTPClient):
    """Talks to the job service."""

    def __init__(self, base_url: str, session: requests.Session | None = None) -> None:
        super().__init__(base_url, session)

    def update_job(self, request: ResultRequest) -> None:
        """Report a job result to the job service."""
        url = f"{self.base_url}/jobs/{request.job_id}/update-workerdaemon"
        payload = {
            "status": request.status,
            "result": request.result,
            "errorMessage": request.error_message,
        }
        logger.debug("Sending job update jobID=%s status=%s", request.job_id, request.status)
        response = self._send("PATCH", url, data=json.dumps(payload))
        if response.status_code not in (200, 204):
            logger.warning(
                "Unexpected response during job update jobID=%s status=%s response=%s",
                request.job_id,
                response.status_code,
                response.text,
            )
            raise GatewayClientError(f"update job failed: {response.text}")
        logger.debug("Job updated successfully jobID=%s", request.job_id)

    def fetch_scheduled_jobs(self) -> list[Job]:
        """Return all jobs in status ``scheduled``."""
        url = f"{self.base_url}/jobs"
        logger.debug("Fetching scheduled jobs url=%s", url)
        response = self._send("GET", url, params={"status": "scheduled"})
        if response.status_code == 204:
            logger.debug("No scheduled jobs available")
            return []
        if response.status_code != 200:
            logger.warning(
                "Unexpected response when fetching jobs status=%s response=%s",
                response.status_code,
                response.text,
            )
            raise GatewayClientError(f"fetch scheduled jobs failed: {response.text}")
        try:
            data = response.json()
            if data is None:
                return []
            if not isinstance(data, list):
                raise ValueError("expected a JSON array of jobs")
            jobs = [Job.from_dict(item) for item in data]
        except ValueError as exc:
            logger.error("Failed to decode scheduled jobs response: %s", exc)
            raise GatewayClientError(f"invalid scheduled jobs response: {exc}") from exc
        logger.debug("Scheduled jobs fetched count=%d", len(jobs))
        return jobs


class RegistryClient(_HTTPClient):
    """Talks to the worker registry."""

    def __init__(self, base_url: str, session: requests.Session | None = None) -> None:
        super().__init__(base_url, session)

    def register_worker(self, request: RegisterRequest) -> RegisterResponse:
        """Create a worker in the requested zone."""
        url = f"{self.base_url}/workers?zone={quote_plus(request.zone)}"
        logger.debug("Sending worker registration zone=%s url=%s", request.zone, url)
        response = self._send("POST", url)
        if response.status_code != 201:
            logger.warning(
                "Unexpected response during registration status=%s response=%s",
                response.status_code,
                response.text,
            )
            raise GatewayClientError(f"register worker failed: {response.text}")
        try:
            result = RegisterResponse.from_dict(response.json())
        except ValueError as exc:
            logger.error("Failed to decode registration response: %s", exc)
            raise GatewayClientError(f"invalid registration response: {exc}") from exc
        logger.debug(
            "Worker registered workerID=%s zone=%s status=%s",
            result.id,
            result.zone,
            result.status,
        )
        return result

    def update_worker_status(self, request: HeartbeatRequest) -> None:
        """Set the status of a worker in the registry."""
        url = f"{self.base_url}/workers/{request.worker_id}/status"
        payload = {"workerStatus": request.status}
        logger.debug(
            "Updating worker status workerID=%s status=%s", request.worker_id, request.status
        )
        response = self._send("PUT", url, data=json.dumps(payload))
        if response.status_code != 200:
            logger.warning(
                "Unexpected response during status update workerID=%s status=%s response=%s",
                request.worker_id,
                response.status_code,
                response.text,
            )
            raise GatewayClientError(f"update worker status failed: {response.text}")
        logger.debug("Worker status updated workerID=%s", request.worker_id)