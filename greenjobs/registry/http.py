"""HTTP interface of the worker registry."""

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

from greenjobs.registry.repository import InMemoryWorkerRepo
from greenjobs.registry.service import LogNotifier, WorkerRegistryService
from greenjobs.registry.zones import ZoneClient

logger = logging.getLogger(__name__)


def _text_error(message: str, status: int) -> Response:
    return Response(message + "\n", status=status, mimetype="text/plain")


def _json_response(payload: Any, status: int = 200) -> Response:
    return Response(json.dumps(payload) + "\n", status=status, mimetype="application/json")


def _status_from_body(request: Request) -> str | None:
    """Read the ``status`` field of the body; None if the body is malformed."""
    try:
        data = json.loads(request.get_data(as_text=True))
    except ValueError:
        return None
    if data is None:
        return ""
    if not isinstance(data, dict):
        return None
    value = data.get("status")
    if value is None:
        value = next(
            (v for k, v in data.items() if isinstance(k, str) and k.lower() == "status"),
            None,
        )
    if value is None:
        return ""
    return value if isinstance(value, str) else None


class RegistryHandler:
    """WSGI application serving the worker registry API."""

    def __init__(self, service: Any) -> None:
        self.service = service
        self._url_map = Map(
            [
                Rule("/workers", methods=["GET"], endpoint=self.list_workers),
                Rule("/workers", methods=["POST"], endpoint=self.create_worker),
                Rule("/workers/<worker_id>", methods=["GET"], endpoint=self.get_worker),
                Rule("/workers/<worker_id>/status", methods=["PUT"], endpoint=self.update_status),
            ]
        )

    def __call__(self, environ: dict[str, Any], start_response: Callable) -> Iterable[bytes]:
        request = Request(environ)
        adapter = self._url_map.bind_to_environ(environ)
        try:
            endpoint, values = adapter.match()
        except HTTPException as exc:
            return exc(environ, start_response)
        return endpoint(request, **values)(environ, start_response)

    def list_workers(self, request: Request) -> Response:
        status = request.args.get("status", "")
        zone = request.args.get("zone", "")
        try:
            workers = self.service.get_workers(status, zone)
        except Exception as exc:
            return _text_error(str(exc), 500)
        return _json_response([worker.to_dict() for worker in workers])

    def create_worker(self, request: Request) -> Response:
        zone = request.args.get("zone", "")
        if not zone:
            return _text_error("zone is required to create Workers", 400)
        try:
            worker = self.service.create_worker(zone)
        except Exception as exc:
            return _text_error(str(exc), 500)
        return _json_response(worker.to_dict(), status=201)

    def get_worker(self, request: Request, worker_id: str) -> Response:
        try:
            worker = self.service.get_worker_by_id(worker_id)
        except Exception as exc:
            return _text_error(str(exc), 404)
        return _json_response(worker.to_dict())

    def update_status(self, request: Request, worker_id: str) -> Response:
        status = _status_from_body(request)
        if status is None:
            return _text_error("Invalid request body", 400)
        try:
            worker = self.service.update_worker_status(worker_id, status)
        except Exception as exc:
            return _text_error(str(exc), 404)
        return _json_response(worker.to_dict())


def main(argv: list[str] | None = None) -> int:
    """Run the worker registry over HTTP until SIGINT or SIGTERM."""
    parser = argparse.ArgumentParser(prog="greenjobs-registry", description="Worker registry.")
    parser.add_argument("--port", type=int, default=int(os.environ.get("PORT") or 8080))
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO)
    zone_client = ZoneClient(os.environ.get("CARBON_INTENSITY_PROVIDER", ""))
    service = WorkerRegistryService(InMemoryWorkerRepo(), LogNotifier(), zone_client)
    handler = RegistryHandler(service)

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