"""Worker registry service and its log notifier."""

from __future__ import annotations

import logging
import uuid
from typing import Any

from greenjobs.registry.models import (
    InvalidZoneError,
    StatusLike,
    Worker,
    WorkerStatus,
    status_text,
)

logger = logging.getLogger(__name__)


class LogNotifier:
    """Reports worker registry events through the logging module."""

    def worker_created(self, worker: Worker) -> None:
        logger.info(
            "[Notifier] New worker created: ID=%s, STATUS=%s, ZONE=%s ",
            worker.id,
            status_text(worker.status),
            worker.zone,
        )

    def worker_status_changed(self, worker: Worker) -> None:
        logger.info(
            "[Notifier] Changed status from Worker with ID '%s' to status '%s'.",
            worker.id,
            status_text(worker.status),
        )


class WorkerRegistryService:
    """Registers workers and tracks their status."""

    def __init__(self, repo: Any, notifier: Any, zone_client: Any) -> None:
        self.repo = repo
        self.notifier = notifier
        self.zone_client = zone_client

    def get_workers(self, status: StatusLike | None = "", zone: str | None = "") -> list[Worker]:
        return self.repo.get_workers(status, zone)

    def get_worker_by_id(self, worker_id: str) -> Worker:
        return self.repo.get_worker_by_id(worker_id)

    def create_worker(self, zone: str) -> Worker:
        if not self.zone_client.is_valid_zone(zone):
            raise InvalidZoneError(zone)
        worker = Worker(id=str(uuid.uuid4()), status=WorkerStatus.AVAILABLE, zone=zone)
        self.repo.create_worker(worker)
        self.notifier.worker_created(worker)
        return worker

    def update_worker_status(self, worker_id: str, status: StatusLike) -> Worker:
        worker = self.repo.update_worker_status(worker_id, status)
        self.notifier.worker_status_changed(worker)
        return worker