"""Worker daemon: registers with the gateway, sends heartbeats and runs jobs."""

from __future__ import annotations

import argparse
import dataclasses
import logging
import signal
import threading
import time
from typing import Any

from greenjobs.daemon.config import Config, load_config
from greenjobs.daemon.gateway import DaemonJob, GatewayClient

logger = logging.getLogger(__name__)


def compute_job(job: DaemonJob, delay: float = 10.0) -> DaemonJob:
    """Process ``job`` and return it with its outcome filled in."""
    logger.info("Processing job %s...", job.id)
    time.sleep(delay)
    done = dataclasses.replace(
        job, status="DONE", result="Result of job " + job.id, error_message=""
    )
    logger.info("Job %s done.", job.id)
    return done


class Daemon:
    """Keeps a worker registered and busy with at most one job at a time."""

    def __init__(self, config: Config, api: Any, compute_delay: float = 10.0) -> None:
        self.config = config
        self.api = api
        self.compute_delay = compute_delay
        self.worker_id = ""
        self.token = ""
        self.current_job_id = ""
        self._busy = threading.Lock()

    @property
    def processing(self) -> bool:
        """True while a job is being processed or its result is undelivered."""
        return self._busy.locked()

    def run_heartbeat_loop(self, stop_event: threading.Event) -> None:
        """Register, then send heartbeats until ``stop_event`` is set.

        Returns at once if registration fails.
        """
        try:
            registration = self.api.register(self.config.key, self.config.zone)
        except Exception as exc:
            logger.error("Registration failed: %s", exc)
            return
        self.worker_id = registration.id
        self.token = registration.token
        logger.info("Worker registered successfully. %s", registration)

        interval = self.config.heartbeat_interval_seconds
        if interval <= 0:
            raise ValueError("heartbeat interval must be positive")

        while not stop_event.wait(interval):
            self._beat()
        logger.info("Heartbeat loop stopped.")

    def _beat(self) -> None:
        status = "RUNNING" if self._busy.locked() else "AVAILABLE"
        try:
            jobs = self.api.send_heartbeat(self.worker_id, status)
        except Exception as exc:
            logger.warning("Heartbeat failed: %s", exc)
            return
        logger.info("Heartbeat jobs: %s", jobs)

        if jobs and self._busy.acquire(blocking=False):
            threading.Thread(
                target=self._process, args=(jobs[0],), daemon=True, name="job-runner"
            ).start()
        elif not jobs:
            logger.info("No Jobs scheduled. %s %s", status, self.current_job_id)

    def _process(self, job: DaemonJob) -> None:
        self.current_job_id = job.id
        processed = compute_job(job, self.compute_delay)
        try:
            self.api.send_result(processed)
        except Exception as exc:
            # The worker stays busy: the result was not delivered.
            logger.error("SendResult failed: %s", exc)
            return
        self.current_job_id = ""
        self._busy.release()


def main(argv: list[str] | None = None) -> int:
    """Run the worker daemon until SIGINT or SIGTERM."""
    parser = argparse.ArgumentParser(prog="greenjobs-worker", description="Worker daemon.")
    parser.add_argument("--config", default="config.json", help="path of the JSON config")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO)
    try:
        config = load_config(args.config)
    except (OSError, ValueError) as exc:
        logger.error("Failed to load config: %s", exc)
        return 1

    daemon = Daemon(config, GatewayClient(config.gateway_url))
    stop = threading.Event()
    shutdown = threading.Event()

    def _on_signal(signum: int, frame: Any) -> None:
        shutdown.set()

    signal.signal(signal.SIGINT, _on_signal)
    signal.signal(signal.SIGTERM, _on_signal)

    threading.Thread(
        target=daemon.run_heartbeat_loop, args=(stop,), daemon=True, name="heartbeat"
    ).start()

    while not shutdown.wait(0.5):
        pass
    logger.info("Shutting down daemon...")
    stop.set()
    logger.info("Shutdown complete")
    return 0