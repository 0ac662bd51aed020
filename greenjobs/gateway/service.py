"""Worker gateway core: relays worker traffic to the registry and job service."""

from __future__ import annotations

import logging

from greenjobs.gateway.models import (
    HeartbeatRequest,
    Job,
    JobBackend,
    RegisterRequest,
    RegisterResponse,
    RegistryBackend,
    ResultRequest,
)

logger = logging.getLogger(__name__)


class WorkerGatewayService:
    """Handles heartbeats, results and registrations of workers."""

    def __init__(self, registry: RegistryBackend, jobs: JobBackend) -> None:
        self.registry = registry
        self.jobs = jobs

    def heartbeat(self, request: HeartbeatRequest) -> list[Job]:
        """Record the worker's status; an available worker gets the jobs scheduled for it."""
        logger.debug("Heartbeat received workerID=%s status=%s", request.worker_id, request.status)
        try:
            self.registry.update_worker_status(request)
        except Exception as exc:
            logger.error("UpdateWorkerStatus failed: %s", exc)
            raise

        if request.status != "AVAILABLE":
            return []

        try:
            jobs = self.jobs.fetch_scheduled_jobs()
        except Exception as exc:
            logger.error("Error fetching jobs: %s", exc)
            raise
        logger.debug("Provided jobs: %s", jobs)

        filtered = [job for job in jobs if job.worker_id == request.worker_id]
        logger.debug("Filtered jobs: %s", filtered)
        return filtered

    def result(self, request: ResultRequest) -> None:
        logger.debug("Result received jobID=%s", request.job_id)
        self.jobs.update_job(request)

    def register(self, request: RegisterRequest) -> RegisterResponse:
        logger.debug("Registering worker zone=%s", request.zone)
        try:
            response = self.registry.register_worker(request)
        except Exception as exc:
            logger.error("Worker registration failed: %s", exc)
            raise
        logger.debug("Worker registered workerID=%s zone=%s", response.id, response.zone)
        return response