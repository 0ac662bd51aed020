"""HTTP interface of the job service."""

from __future__ import annotations

import argparse
import json
import logging
import os
import signal
import threading
from typing import Any, Callable, Iterable

from werkzeug.exceptions import HTTPException
from werkzeug.routing import Map, Rule
from werkzeug.serving import make_server
from werkzeug.wrappers import Request, Response

from greenjobs.job.models import (
    EmptyParameterError,
    InvalidIDFormatError,
    InvalidImageVersionError,
    JobCreate,
    JobError,
    JobNotFoundError,
    JobStatus,
    MissingIDError,
    MissingImageNameError,
    MissingJobNameError,
    MissingStatusError,
    SchedulerUpdateData,
    WorkerDaemonUpdateData,
)
from greenjobs.job.repository import InMemoryJobStorage
from greenjobs.job.service import JobService

logger = logging.getLogger(__name__)

HTTP_ERR_MISSING_ID = '{"error": "Bad Request","message": "The job ID must be provided"}'
HTTP_ERR_INVALID_ID = (
    '{"error": "Bad Request","message": "The job ID format is invalid. Expected a UUID format."}'
)
HTTP_ERR_JOB_NOT_FOUND = (
    '{"error": "Not Found","message": "A job with the specified ID does not exist. '
    'Please verify the ID."}'
)
HTTP_ERR_FIELD_EMPTY = (
    '{"error": "Bad Request","message": "jobname and imagename must not be empty"}'
)
HTTP_ERR_STATUS_EMPTY = '{"error": "Bad Request","message": "job status must not be empty"}'
HTTP_ERR_INVALID_INPUT = '{"error": "Bad Request","message": "Invalid input data"}'
HTTP_ERR_INTERNAL = (
    '{"error": "Internal Server Error","message": "The server encountered an unexpected condition"}'
)

_ERROR_TABLE: tuple[tuple[tuple[type[JobError], ...], str, int], ...] = (
    ((MissingIDError,), HTTP_ERR_MISSING_ID, 400),
    ((InvalidIDFormatError,), HTTP_ERR_INVALID_ID, 400),
    ((JobNotFoundError,), HTTP_ERR_JOB_NOT_FOUND, 404),
    ((MissingJobNameError, MissingImageNameError), HTTP_ERR_FIELD_EMPTY, 400),
    ((InvalidImageVersionError, EmptyParameterError), HTTP_ERR_INVALID_INPUT, 400),
    ((MissingStatusError,), HTTP_ERR_STATUS_EMPTY, 400),
)


def _plain_error(body: str, status: int) -> Response:
    return Response(body + "\n", status=status, mimetype="text/plain")


def _json_response(payload: Any, status: int = 200) -> Response:
    return Response(json.dumps(payload) + "\n", status=status, mimetype="application/json")


def error_response(error: BaseException) -> Response:
    """Map a service error to the HTTP response the API documents."""
    for kinds, body, status in _ERROR_TABLE:
        if isinstance(error, kinds):
            return _plain_error(body, status)
    return _plain_error(HTTP_ERR_INTERNAL, 500)


def _read_json_object(request: Request) -> dict[str, Any]:
    data = json.loads(request.get_data(as_text=True))
    return {} if data is None else data


class JobHandler:
    """WSGI application serving the job API."""

    def __init__(self, service: Any) -> None:
        self.service = service
        self._url_map = Map(
            [
                Rule("/jobs", methods=["GET"], endpoint=self.get_jobs),
                Rule("/jobs", methods=["POST"], endpoint=self.create_job),
                Rule("/jobs/<job_id>", methods=["GET"], endpoint=self.get_job),
                Rule("/jobs/<job_id>/outcome", methods=["GET"], endpoint=self.get_job_outcome),
                Rule(
                    "/jobs/<job_id>/update-scheduler",
                    methods=["PATCH"],
                    endpoint=self.update_job_scheduler,
                ),
                Rule(
                    "/jobs/<job_id>/update-workerdaemon",
                    methods=["PATCH"],
                    endpoint=self.update_job_worker_daemon,
                ),
            ]
        )

    def __call__(self, environ: dict[str, Any], start_response: Callable) -> Iterable[bytes]:
        request = Request(environ)
        adapter = self._url_map.bind_to_environ(environ)
        try:
            endpoint, values = adapter.match()
        except HTTPException as exc:
            return exc(environ, start_response)
        response = endpoint(request, **values)
        return response(environ, start_response)

    def _call_service(self, action: Callable[[], Any]) -> Any:
        try:
            return action()
        except JobError as exc:
            return error_response(exc)
        except Exception as exc:  # any other failure is reported as a server error
            logger.exception("unexpected error in job service")
            return error_response(exc)

    def get_jobs(self, request: Request) -> Response:
        statuses: list[JobStatus] = []
        for raw in request.args.getlist("status"):
            for part in raw.split(","):
                part = part.strip()
                try:
                    statuses.append(JobStatus(part))
                except ValueError:
                    body = (
                        '{"error": "Bad Request", '
                        f'"message": "Invalid status value: {part}"}}'
                    )
                    return _plain_error(body, 400)

        try:
            jobs = self.service.get_jobs(statuses or None)
        except Exception:
            logger.exception("listing jobs failed")
            return _plain_error(HTTP_ERR_INTERNAL, 500)

        if not jobs:
            return Response(status=204)
        return _json_response([job.to_dict() for job in jobs])

    def create_job(self, request: Request) -> Response:
        try:
            job_create = JobCreate.from_dict(_read_json_object(request))
        except ValueError:
            return _plain_error(HTTP_ERR_INVALID_INPUT, 400)

        result = self._call_service(lambda: self.service.create_job(job_create))
        if isinstance(result, Response):
            return result
        return _json_response(result.to_dict(), status=201)

    def get_job(self, request: Request, job_id: str) -> Response:
        result = self._call_service(lambda: self.service.get_job(job_id))
        if isinstance(result, Response):
            return result
        return _json_response(result.to_dict())

    def get_job_outcome(self, request: Request, job_id: str) -> Response:
        result = self._call_service(lambda: self.service.get_job_outcome(job_id))
        if isinstance(result, Response):
            return result
        return _json_response(result.to_dict())

    def update_job_scheduler(self, request: Request, job_id: str) -> Response:
        try:
            data = SchedulerUpdateData.from_dict(_read_json_object(request))
        except ValueError:
            return _plain_error(HTTP_ERR_INVALID_INPUT, 400)

        result = self._call_service(lambda: self.service.update_job_scheduler(job_id, data))
        if isinstance(result, Response):
            return result
        return _json_response(result.to_dict())

    def update_job_worker_daemon(self, request: Request, job_id: str) -> Response:
        try:
            data = WorkerDaemonUpdateData.from_dict(_read_json_object(request))
        except ValueError:
            return _plain_error(HTTP_ERR_INVALID_INPUT, 400)

        result = self._call_service(
            lambda: self.service.update_job_worker_daemon(job_id, data)
        )
        if isinstance(result, Response):
            return result
        return _json_response(result.to_dict())


def main(argv: list[str] | None = None) -> int:
    """Run the job service over HTTP until SIGINT or SIGTERM."""
    parser = argparse.ArgumentParser(prog="greenjobs-job", description="Job service.")
    parser.add_argument("--port", type=int, default=int(os.environ.get("PORT") or 8080))
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO)
    handler = JobHandler(JobService(InMemoryJobStorage()))

    try:
        server = make_server("0.0.0.0", args.port, handler)
    except OSError as exc:
        logger.error("could not listen on :%s: %s", args.port, exc)
        return 1

    def _shutdown(signum: int, frame: Any) -> None:
        logger.info("The service is shutting down...")
        threading.Thread(target=server.shutdown, daemon=True).start()

    signal.signal(signal.SIGINT, _shutdown)
    signal.signal(signal.SIGTERM, _shutdown)

    logger.info("listening...")
    server.serve_forever()
    server.server_close()
    logger.info("Done")
    return 0