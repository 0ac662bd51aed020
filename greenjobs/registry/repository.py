"""In-memory worker repository."""

from __future__ import annotations

from dataclasses import replace

from greenjobs.registry.models import (
    InvalidWorkerStatusError,
    MissingZoneError,
    StatusLike,
    Worker,
    WorkerNotFoundError,
    WorkerStatus,
)


def _is_valid_status(status: StatusLike) -> bool:
    return status in (WorkerStatus.AVAILABLE, WorkerStatus.RUNNING)


class InMemoryWorkerRepo:
    """Workers kept in a dictionary; workers are stored and returned as copies."""

    def __init__(self) -> None:
        self._workers: dict[str, Worker] = {}

    def get_workers(self, status: StatusLike | None = "", zone: str | None = "") -> list[Worker]:
        """Return workers matching ``status`` and ``zone``; empty values match all."""
        return [
            replace(worker)
            for worker in self._workers.values()
            if (not status or worker.status == status) and (not zone or worker.zone == zone)
        ]

    def get_worker_by_id(self, worker_id: str) -> Worker:
        try:
            return replace(self._workers[worker_id])
        except KeyError:
            raise WorkerNotFoundError(worker_id) from None

    def create_worker(self, worker: Worker) -> None:
        if not worker.status or not worker.zone:
            raise MissingZoneError()
        self._workers[worker.id] = replace(worker)

    def update_worker_status(self, worker_id: str, status: StatusLike) -> Worker:
        worker = self._workers.get(worker_id)
        if worker is None:
            raise WorkerNotFoundError(worker_id)
        if not _is_valid_status(status):
            raise InvalidWorkerStatusError(worker_id)
        worker.status = WorkerStatus(status)
        return replace(worker)