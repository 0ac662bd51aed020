import threading
import time

import pytest

from greenjobs.daemon.config import Config
from greenjobs.daemon.gateway import DaemonJob, RegisterResponse
from greenjobs.daemon.worker import Daemon, compute_job, main


class FakeGateway:
    def __init__(self, batches=None, fail_register=False, heartbeat_errors=0, fail_result=False):
        self.batches = list(batches or [])
        self.fail_register = fail_register
        self.heartbeat_errors = heartbeat_errors
        self.fail_result = fail_result
        self.registrations = []
        self.statuses = []
        self.results = []
        self._lock = threading.Lock()

    def register(self, key, zone):
        self.registrations.append((key, zone))
        if self.fail_register:
            raise ConnectionError("unreachable")
        return RegisterResponse(id="worker-1", status="AVAILABLE", zone=zone, token="token")

    def send_heartbeat(self, worker_id, status):
        with self._lock:
            self.statuses.append((worker_id, status))
            if self.heartbeat_errors > 0:
                self.heartbeat_errors -= 1
                raise ConnectionError("unreachable")
            if self.batches:
                return self.batches.pop(0)
            return []

    def send_result(self, job):
        with self._lock:
            self.results.append(job)
        if self.fail_result:
            raise ConnectionError("unreachable")


def _config():
    return Config(gateway_url="http://localhost", key="placeholder", zone="DE",
                  heartbeat_interval_seconds=0.01)


def _wait_until(predicate, timeout=5.0):
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.005)
    return predicate()


def _start(daemon):
    stop = threading.Event()
    thread = threading.Thread(target=daemon.run_heartbeat_loop, args=(stop,))
    thread.start()
    return stop, thread


def _finish(stop, thread):
    stop.set()
    thread.join(5)
    assert not thread.is_alive()


def test_compute_job_fills_in_outcome():
    job = DaemonJob(id="job123", status="scheduled", error_message="old")
    done = compute_job(job, delay=0)
    assert done == DaemonJob(id="job123", status="DONE", result="Result of job job123",
                             error_message="")
    assert job.status == "scheduled"


def test_registration_failure_stops_loop():
    gateway = FakeGateway(fail_register=True)
    daemon = Daemon(_config(), gateway, compute_delay=0)
    stop, thread = _start(daemon)
    thread.join(2)
    assert not thread.is_alive()
    assert gateway.registrations == [("placeholder", "DE")]
    assert gateway.statuses == []
    assert daemon.worker_id == ""


def test_non_positive_interval_raises_after_registration():
    config = _config()
    config.heartbeat_interval_seconds = 0
    gateway = FakeGateway()
    daemon = Daemon(config, gateway, compute_delay=0)
    with pytest.raises(ValueError):
        daemon.run_heartbeat_loop(threading.Event())
    assert daemon.worker_id == "worker-1"


def test_stop_before_first_tick_sends_no_heartbeat():
    gateway = FakeGateway()
    daemon = Daemon(_config(), gateway, compute_delay=0)
    stop = threading.Event()
    stop.set()
    daemon.run_heartbeat_loop(stop)
    assert daemon.token == "token"
    assert gateway.statuses == []


def test_job_is_processed_and_result_sent():
    job = DaemonJob(id="job123", status="scheduled")
    gateway = FakeGateway(batches=[[job]])
    daemon = Daemon(_config(), gateway, compute_delay=0)
    stop, thread = _start(daemon)
    try:
        assert _wait_until(lambda: gateway.results)
        assert _wait_until(lambda: not daemon.processing)
    finally:
        _finish(stop, thread)
    assert gateway.statuses[0] == ("worker-1", "AVAILABLE")
    assert gateway.results == [
        DaemonJob(id="job123", status="DONE", result="Result of job job123", error_message="")
    ]
    assert daemon.current_job_id == ""


def test_busy_worker_reports_running():
    job = DaemonJob(id="job123", status="scheduled")
    gateway = FakeGateway(batches=[[job]])
    daemon = Daemon(_config(), gateway, compute_delay=0.3)
    stop, thread = _start(daemon)
    try:
        assert _wait_until(lambda: ("worker-1", "RUNNING") in gateway.statuses)
        assert daemon.current_job_id == "job123"
        assert _wait_until(lambda: gateway.results)
        assert _wait_until(lambda: not daemon.processing)
        count = len(gateway.statuses)
        assert _wait_until(lambda: len(gateway.statuses) > count + 1)
    finally:
        _finish(stop, thread)
    assert gateway.statuses[-1][1] == "AVAILABLE"


def test_only_first_offered_job_is_taken():
    jobs = [DaemonJob(id="a"), DaemonJob(id="b")]
    gateway = FakeGateway(batches=[jobs])
    daemon = Daemon(_config(), gateway, compute_delay=0)
    stop, thread = _start(daemon)
    try:
        assert _wait_until(lambda: gateway.results and len(gateway.statuses) >= 5)
    finally:
        _finish(stop, thread)
    assert [job.id for job in gateway.results] == ["a"]


def test_heartbeat_errors_do_not_stop_loop():
    job = DaemonJob(id="job123")
    gateway = FakeGateway(batches=[[job]], heartbeat_errors=2)
    daemon = Daemon(_config(), gateway, compute_delay=0)
    stop, thread = _start(daemon)
    try:
        assert _wait_until(lambda: gateway.results)
    finally:
        _finish(stop, thread)
    assert len(gateway.statuses) >= 3
    assert gateway.results[0].id == "job123"


def test_undelivered_result_keeps_worker_busy():
    job = DaemonJob(id="job123")
    gateway = FakeGateway(batches=[[job], [DaemonJob(id="other")]], fail_result=True)
    daemon = Daemon(_config(), gateway, compute_delay=0)
    stop, thread = _start(daemon)
    try:
        assert _wait_until(lambda: gateway.results)
        count = len(gateway.statuses)
        assert _wait_until(lambda: len(gateway.statuses) > count + 2)
    finally:
        _finish(stop, thread)
    assert daemon.processing is True
    assert gateway.statuses[-1][1] == "RUNNING"
    assert [result.id for result in gateway.results] == ["job123"]


def test_main_with_missing_config_fails(tmp_path):
    assert main(["--config", str(tmp_path / "missing.json")]) == 1