"""HTTP interface of the user management service."""

from __future__ import annotations

import json
import uuid
from typing import Any, Callable, Iterable, Mapping

from werkzeug.exceptions import HTTPException
from werkzeug.routing import Map, Rule
from werkzeug.wrappers import Request, Response

from greenjobs.users.service import AuthenticationError, AuthService, Notifier, Role

_SEPARATOR = "."


def _text_error(message: str, status: int) -> Response:
    return Response(message + "\n", status=status, mimetype="text/plain")


def _json_response(payload: Any, status: int = 200) -> Response:
    return Response(json.dumps(payload) + "\n", status=status, mimetype="application/json")


def _lookup(data: Mapping[str, Any], name: str) -> Any:
    if name in data:
        return data[name]
    for key, value in data.items():
        if isinstance(key, str) and key.lower() == name.lower():
            return value
    return None


def _string_field(request: Request, name: str) -> str | None:
    """Read a string field of a JSON object body; None if the body is malformed."""
    try:
        data = json.loads(request.get_data(as_text=True))
    except ValueError:
        return None
    if data is None:
        return ""
    if not isinstance(data, dict):
        return None
    value = _lookup(data, name)
    if value is None:
        return ""
    return value if isinstance(value, str) else None


class UserHandler:
    """WSGI application serving registration and login."""

    def __init__(
        self,
        auth: AuthService,
        use_live: bool,
        is_admin: Callable[[str], bool],
        notifier_factory: Callable[[], Notifier],
    ) -> None:
        self.auth = auth
        self.use_live = use_live
        self.is_admin = is_admin
        self.notifier_factory = notifier_factory
        self._url_map = Map(
            [
                Rule("/auth/register", methods=["POST"], endpoint=self.register),
                Rule("/auth/login", methods=["POST"], endpoint=self.login),
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

    def register(self, request: Request) -> Response:
        notifier = self.notifier_factory()
        admin = self.is_admin(request.headers.get("X-Admin-Secret", ""))

        raw_role = _string_field(request, "role")
        try:
            role = Role(raw_role) if raw_role is not None else None
        except ValueError:
            role = None
        if role is None:
            notifier.event("Invalid register request payload")
            return _text_error("invalid request", 400)

        if role is Role.JOB_SCHEDULER and not admin:
            notifier.event("Unauthorized attempt to create Job Scheduler")
            return _text_error("unauthorized to create Job Scheduler", 403)

        if not admin:
            notifier.event("Unauthorized register attempt")
            return _text_error("unauthorized", 401)

        client_id = str(uuid.uuid4())
        notifier.user_registered(client_id, role.value)
        notifier.event(f"Registration successful for role: {role.value}")

        client_secret = str(uuid.uuid4())
        notifier.event(f"Client ID: {client_id} and Secret: {client_secret}")

        combined = _SEPARATOR.join((client_id, client_secret))
        return _json_response({"secret": combined}, status=201)

    def login(self, request: Request) -> Response:
        notifier = self.notifier_factory()

        secret = _string_field(request, "secret")
        if not secret:
            notifier.event("Invalid login request format")
            return _text_error("invalid request", 400)

        try:
            client_id, token = self.auth.authenticate(secret)
        except AuthenticationError as exc:
            notifier.event(f"Login failed for client: {exc.client_id}")
            return _text_error("invalid credentials", 401)

        notifier.user_logged_in(client_id)
        notifier.event(f"Login successful for client: {client_id}")
        return _json_response({"token": token})