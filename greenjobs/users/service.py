"""Authentication core of the user management service."""

from __future__ import annotations

import enum
import hashlib
import hmac
from typing import Protocol

_SEPARATOR = "."


class Role(str, enum.Enum):
    """Roles a client can be registered with."""

    CONSUMER = "consumer"
    PROVIDER = "provider"
    JOB_SCHEDULER = "job scheduler"


class Notifier(Protocol):
    """Receives notable events of the user management service."""

    def user_registered(self, user_id: str, role: str) -> None: ...

    def user_logged_in(self, user_id: str) -> None: ...

    def event(self, message: str) -> None: ...


class TokenProvider(Protocol):
    """Exchanges client credentials for an access token."""

    def request_token_from_client_secret(self, client_id: str, client_secret: str) -> str: ...


class AuthenticationError(Exception):
    """Authentication failed; ``client_id`` holds the client that tried, if known."""

    def __init__(self, message: str, client_id: str = "") -> None:
        super().__init__(message)
        self.client_id = client_id


class InvalidCredentialsError(AuthenticationError):
    """The credentials are not of the form ``clientID.clientSecret``."""

    def __init__(self, message: str = "invalid credentials format") -> None:
        super().__init__(message, client_id="")


def split_credentials(secret: str) -> tuple[str, str]:
    """Split ``clientID.clientSecret`` at the first dot."""
    client_id, dot, client_secret = secret.partition(_SEPARATOR)
    if not dot:
        raise InvalidCredentialsError()
    return client_id, client_secret


def is_admin_secret(secret: str, expected_hash: str) -> bool:
    """Tell whether the SHA-256 hex digest of ``secret`` equals ``expected_hash``."""
    actual = hashlib.sha256(secret.encode("utf-8")).hexdigest()
    return hmac.compare_digest(actual.encode("utf-8"), expected_hash.encode("utf-8"))


class AuthService:
    """Authenticates clients against a token provider."""

    def __init__(self, token_provider: TokenProvider, notifier: Notifier) -> None:
        self.token_provider = token_provider
        self.notifier = notifier

    def authenticate(self, credentials: str) -> tuple[str, str]:
        """Return ``(client_id, token)`` for ``clientID.clientSecret`` credentials."""
        self.notifier.event("Starting authentication")
        try:
            client_id, client_secret = split_credentials(credentials)
        except InvalidCredentialsError:
            self.notifier.event("Invalid credentials format")
            raise

        try:
            token = self.token_provider.request_token_from_client_secret(
                client_id, client_secret
            )
        except Exception as exc:
            self.notifier.event(f"Authentication failed: {exc}")
            raise AuthenticationError(str(exc), client_id=client_id) from exc

        self.notifier.event("Authentication successful")
        return client_id, token