"""HTTP interface of the worker gateway."""

from __future__ import annotations

import argparse
import json
import logging
import os
import signal
import threading
from typing import Any, Callable, Iterable, Optional, TypeVar

from werkzeug.exceptions import HTTPException
from werkzeug.routing import Map, Rule
from werkzeug.serving import make_server
from werkzeug.wrappers import Request, Response

from greenjobs.gateway.clients import JobClient, RegistryClient
from greenjobs.gateway.models import HeartbeatRequest, RegisterRequest, ResultRequest
from greenjobs.gateway.service import WorkerGatewayService

logger = logging.getLogger(__name__)

_Model = TypeVar("_Model")


def _text_error(message: str, status: int) -> Response:
    return Response(message + "\n", status=status, mimetype="text/plain")


def _json_response(payload: Any) -> Response:
    return Response(json.dumps(payload) + "\n", status=200, mimetype="application/json")


def _decode(request: Request, model: Any) -> Optional[Any]:
    """Decode the JSON body into ``model``; None if the body is malformed."""
    try:
        return model.from_dict(json.loads(request.get_data(as_text=True)))
    except ValueError:
        return None


class GatewayHandler:
    """WSGI application serving the worker-facing API."""

    def __init__(self, api: Any) -> None:
        self.api = api
        self._url_map = Map(
            [
                Rule("/worker/heartbeat", endpoint=self.heartbeat),
                Rule("/result", endpoint=self.submit_result),
                Rule("/register", endpoint=self.register_worker),
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

    def heartbeat(self, request: Request) -> Response:
        heartbeat = _decode(request, HeartbeatRequest)
        if heartbeat is None:
            return _text_error("invalid request", 400)
        try:
            jobs = self.api.heartbeat(heartbeat)
        except Exception:
            logger.exception("heartbeat failed")
            return _text_error("internal server error", 500)
        # No jobs travel as JSON null, as the workers expect.
        return _json_response([job.to_dict() for job in jobs] or None)

    def submit_result(self, request: Request) -> Response:
        result = _decode(request, ResultRequest)
        if result is None:
            return _text_error("invalid request", 400)
        try:
            self.api.result(result)
        except Exception:
            logger.exception("submitting result failed")
            return _text_error("internal server error", 500)
        return Response(status=200)

    def register_worker(self, request: Request) -> Response:
        registration = _decode(request, RegisterRequest)
        if registration is None:
            return _text_error("invalid request", 400)
        try:
            response = self.api.register(registration)
        except Exception:
            logger.exception("registration failed")
            return _text_error("internal server error", 500)
        return _json_response(response.to_dict() if response is not None else None)


def main(argv: list[str] | None = None) -> int:
    """Run the worker gateway over HTTP until SIGINT or SIGTERM."""
    parser = argparse.ArgumentParser(prog="greenjobs-gateway", description="Worker gateway.")
    parser.add_argument("--port", type=int, default=int(os.environ.get("PORT") or 8080))
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.DEBUG)
    logger.debug("Service started")

    registry = RegistryClient(os.environ.get("WORKER_REGISTRY", ""))
    jobs = JobClient(os.environ.get("JOB_SERVICE", ""))
    handler = GatewayHandler(WorkerGatewayService(registry, jobs))

    try:
        server = make_server("0.0.0.0", args.port, handler)
    except OSError as exc:
        logger.error("Server error: %s", exc)
        return 1

    def _shutdown(signum: int, frame: Any) -> None:
        logger.debug("The service is shutting down...")
        threading.Thread(target=server.shutdown, daemon=True).start()

    signal.signal(signal.SIGINT, _shutdown)
    signal.signal(signal.SIGTERM, _shutdown)

    logger.debug("Worker Gateway listening port=%s", args.port)
    server.serve_forever()
    server.server_close()
    return 0