"""Notifier that writes user management events to the log."""

from __future__ import annotations

import logging
from typing import Any

logger = logging.getLogger(__name__)


def _text(value: Any) -> str:
    return str(getattr(value, "value", value))


class LogNotifier:
    """Reports user management events through the logging module."""

    def user_registered(self, user_id: str, role: Any) -> None:
        logger.info("[Notifier] New user registered: ID=%s, Role=%s", user_id, _text(role))

    def user_logged_in(self, user_id: str) -> None:
        logger.info("[Notifier] User logged in: ID=%s", user_id)

    def event(self, message: str) -> None:
        logger.info("[Notifier] %s", message)