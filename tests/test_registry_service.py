import logging

import pytest

from greenjobs.registry.models import (
    InvalidWorkerStatusError,
    InvalidZoneError,
    WorkerNotFoundError,
    WorkerStatus,
)
from greenjobs.registry.repository import InMemoryWorkerRepo
from greenjobs.registry.service import LogNotifier, WorkerRegistryService
from greenjobs.registry.zones import ZoneClient


class RecordingNotifier:
    def __init__(self):
        self.created = []
        self.changed = []

    def worker_created(self, worker):
        self.created.append(worker)

    def worker_status_changed(self, worker):
        self.changed.append(worker)


@pytest.fixture
def service():
    return WorkerRegistryService(InMemoryWorkerRepo(), LogNotifier(), ZoneClient("", background=False))


def test_create_worker_with_valid_zone(service):
    worker = service.create_worker("EN")
    assert worker.zone == "EN"
    assert worker.status == WorkerStatus.AVAILABLE
    assert worker.id


def test_create_worker_with_invalid_zone(service):
    with pytest.raises(InvalidZoneError) as info:
        service.create_worker("CMG")
    assert str(info.value) == "creating worker failed due to invalid 'zone' CMG"


@pytest.mark.parametrize(
    "status, zone, expected",
    [
        ("", "", 2),
        (WorkerStatus.AVAILABLE, "", 2),
        (WorkerStatus.RUNNING, "", 0),
        (WorkerStatus.AVAILABLE, "DE", 1),
        (WorkerStatus.AVAILABLE, "EN", 1),
    ],
)
def test_get_workers(service, status, zone, expected):
    service.create_worker("DE")
    service.create_worker("EN")
    assert len(service.get_workers(status, zone)) == expected


def test_get_worker_by_id_existing(service):
    worker = service.create_worker("DE")
    assert service.get_worker_by_id(worker.id).id == worker.id


def test_get_worker_by_id_missing(service):
    with pytest.raises(WorkerNotFoundError) as info:
        service.get_worker_by_id("9999")
    assert str(info.value) == "Worker with ID 9999 not found"


def test_update_worker_status_valid(service):
    worker = service.create_worker("DE")
    assert service.update_worker_status(worker.id, "RUNNING").status == "RUNNING"


def test_update_worker_status_invalid(service):
    worker = service.create_worker("DE")
    with pytest.raises(InvalidWorkerStatusError) as info:
        service.update_worker_status(worker.id, "INVALID_STATUS")
    assert str(info.value) == (
        f"invalid status ('AVAILABLE' or 'RUNNING') for worker with ID {worker.id}"
    )


def test_update_worker_status_missing(service):
    with pytest.raises(WorkerNotFoundError) as info:
        service.update_worker_status("9999", "AVAILABLE")
    assert str(info.value) == "Worker with ID 9999 not found"


def test_notifier_is_told_about_changes():
    notifier = RecordingNotifier()
    service = WorkerRegistryService(InMemoryWorkerRepo(), notifier, ZoneClient("", background=False))
    worker = service.create_worker("FR")
    service.update_worker_status(worker.id, "RUNNING")
    assert [w.id for w in notifier.created] == [worker.id]
    assert [w.status for w in notifier.changed] == [WorkerStatus.RUNNING]


def test_invalid_zone_does_not_notify():
    notifier = RecordingNotifier()
    service = WorkerRegistryService(InMemoryWorkerRepo(), notifier, ZoneClient("", background=False))
    with pytest.raises(InvalidZoneError):
        service.create_worker("CMG")
    assert notifier.created == []


def test_log_notifier_logs_creation(service, caplog):
    with caplog.at_level(logging.INFO, logger="greenjobs.registry.service"):
        worker = service.create_worker("DE")
    assert f"New worker created: ID={worker.id}, STATUS=AVAILABLE, ZONE=DE" in caplog.text