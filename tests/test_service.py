import uuid

import pytest

from greenjobs.job.models import (
    ContainerImage,
    InvalidIDFormatError,
    InvalidImageVersionError,
    JobCreate,
    JobNotFoundError,
    JobStatus,
    MissingErrorMessageError,
    MissingIDError,
    MissingJobNameError,
    MissingWorkerIDError,
    NegativeCarbonError,
    SchedulerUpdateData,
    WorkerDaemonUpdateData,
    EmptyParameterError,
)
from greenjobs.job.repository import InMemoryJobStorage
from greenjobs.job.service import JobService, is_simple_valid_version, is_valid_status

PARAMS = {
    "volumes": "/host/path:/container/path",
    "ports": "80:8080",
    "env": "NODE_ENV=development",
}


def generate_large_parameters(n):
    return {f"param{i}": f"value{i}" for i in range(n)}


@pytest.fixture
def service():
    return JobService(InMemoryJobStorage())


def test_service_requires_storage():
    with pytest.raises(ValueError):
        JobService(None)


@pytest.mark.parametrize(
    "args",
    [
        JobCreate("Test Job", "DE", ContainerImage("alpine", "1.15"), dict(PARAMS)),
        JobCreate("Job with latest version", "DE", ContainerImage("alpine", ""), dict(PARAMS)),
        JobCreate("Test @Job!", "DE", ContainerImage("Python", "3.8"), dict(PARAMS)),
        JobCreate("Large Parameter Job", "DE", ContainerImage("node", "14"),
                  generate_large_parameters(1000)),
    ],
)
def test_create_job_valid(service, args):
    job = service.create_job(args)
    assert job.id != ""
    assert job.job_name == args.job_name
    assert job.image == args.image
    assert job.status is JobStatus.QUEUED
    assert service.get_job(job.id).job_name == args.job_name


@pytest.mark.parametrize(
    "args, error",
    [
        (JobCreate("", "DE", ContainerImage("alpine", "1.15"), dict(PARAMS)), MissingJobNameError),
        (JobCreate("Test Job", "DE", ContainerImage("alpine", "!!15"), dict(PARAMS)),
         InvalidImageVersionError),
        (JobCreate("Test Job", "DE", ContainerImage("alpine", "1.15"), {"ports": " "}),
         EmptyParameterError),
    ],
)
def test_create_job_invalid(service, args, error):
    with pytest.raises(error):
        service.create_job(args)


def test_get_job(service):
    created = service.create_job(
        JobCreate("Retrieve Test Job", "US", ContainerImage("node", "14"), dict(PARAMS))
    )
    got = service.get_job(created.id)
    assert got.id == created.id
    assert got.job_name == created.job_name
    assert got.image == created.image


@pytest.mark.parametrize(
    "job_id, error",
    [
        (str(uuid.uuid4()), JobNotFoundError),
        ("invalid-uuid", InvalidIDFormatError),
        ("", MissingIDError),
        ("    ", MissingIDError),
    ],
)
def test_get_job_errors(service, job_id, error):
    with pytest.raises(error):
        service.get_job(job_id)


@pytest.fixture
def populated(service):
    for status in (JobStatus.QUEUED, JobStatus.RUNNING, JobStatus.COMPLETED):
        created = service.create_job(
            JobCreate(f"Test Job {status.value}", "DE", ContainerImage("alpine", "1.15"),
                      dict(PARAMS))
        )
        service.update_job_scheduler(
            created.id,
            SchedulerUpdateData(str(uuid.uuid4()), "DE", 50, 10, status),
        )
    return service


@pytest.mark.parametrize(
    "statuses, want_len",
    [
        ([JobStatus.QUEUED], 1),
        (None, 3),
        (["non-existing-status"], 0),
        ([JobStatus.QUEUED, JobStatus.RUNNING], 2),
        ([""], 0),
    ],
)
def test_get_jobs(populated, statuses, want_len):
    assert len(populated.get_jobs(statuses)) == want_len


def test_get_jobs_from_empty_storage():
    service = JobService(InMemoryJobStorage())
    assert service.get_jobs([JobStatus.COMPLETED]) == []


def test_get_job_outcome(service):
    created = service.create_job(
        JobCreate("Outcome Test Job", "EU", ContainerImage("python", "3.9"), dict(PARAMS))
    )
    service.update_job_scheduler(
        created.id,
        SchedulerUpdateData(str(uuid.uuid4()), "DE", 100, 30, JobStatus.SCHEDULED),
    )
    result = "Analysis complete. Results stored in /data/analysis/output.txt."
    service.update_job_worker_daemon(
        created.id, WorkerDaemonUpdateData(JobStatus.COMPLETED, result, "")
    )
    outcome = service.get_job_outcome(created.id)
    assert outcome.job_name == "Outcome Test Job"
    assert outcome.status is JobStatus.COMPLETED
    assert outcome.result == result
    assert outcome.error_message == ""
    assert outcome.compute_zone == "DE"
    assert outcome.carbon_intensity == 100
    assert outcome.carbon_savings == 30


def test_get_job_outcome_non_existing(service):
    with pytest.raises(JobNotFoundError):
        service.get_job_outcome(str(uuid.uuid4()))


@pytest.fixture
def scheduler_job(service):
    return service.create_job(
        JobCreate("Update Scheduler Test", "FR", ContainerImage("python", "3.8"), dict(PARAMS))
    )


def test_update_job_scheduler_existing(service, scheduler_job):
    worker_id = str(uuid.uuid4())
    updated = service.update_job_scheduler(
        scheduler_job.id,
        SchedulerUpdateData(worker_id, "FR", 75, 30, JobStatus.SCHEDULED),
    )
    assert updated.worker_id == worker_id
    assert updated.status is JobStatus.SCHEDULED
    assert service.get_job(scheduler_job.id).carbon_intensity == 75


@pytest.mark.parametrize(
    "use_created, job_id, data, error",
    [
        (False, str(uuid.uuid4()),
         SchedulerUpdateData("w", "FR", 75, 30, JobStatus.SCHEDULED), JobNotFoundError),
        (True, None, SchedulerUpdateData("", "FR", 75, 30, JobStatus.SCHEDULED),
         MissingWorkerIDError),
        (True, None, SchedulerUpdateData("w", "FR", -1, 30, JobStatus.SCHEDULED),
         NegativeCarbonError),
        (False, "", SchedulerUpdateData("w", "FR", 75, 30, JobStatus.SCHEDULED), MissingIDError),
        (False, "not-a-uuid", SchedulerUpdateData("w", "FR", 75, 30, JobStatus.SCHEDULED),
         InvalidIDFormatError),
    ],
)
def test_update_job_scheduler_errors(service, scheduler_job, use_created, job_id, data, error):
    target = scheduler_job.id if use_created else job_id
    with pytest.raises(error):
        service.update_job_scheduler(target, data)


@pytest.fixture
def daemon_job(service):
    return service.create_job(
        JobCreate("Update Worker Daemon Test", "GB", ContainerImage("java", "8"), dict(PARAMS))
    )


@pytest.mark.parametrize(
    "data",
    [
        WorkerDaemonUpdateData(JobStatus.COMPLETED, "Job completed successfully.", ""),
        WorkerDaemonUpdateData(JobStatus.COMPLETED, "", ""),
        WorkerDaemonUpdateData(JobStatus.FAILED, "", "Execution error occurred."),
    ],
)
def test_update_job_worker_daemon_valid(service, daemon_job, data):
    updated = service.update_job_worker_daemon(daemon_job.id, data)
    assert updated.status == data.status
    assert service.get_job(daemon_job.id).error_message == data.error_message


@pytest.mark.parametrize(
    "use_created, job_id, data, error",
    [
        (False, str(uuid.uuid4()),
         WorkerDaemonUpdateData(JobStatus.COMPLETED, "Job completed successfully.", ""),
         JobNotFoundError),
        (False, "not-a-uuid",
         WorkerDaemonUpdateData(JobStatus.COMPLETED, "Job completed successfully.", ""),
         InvalidIDFormatError),
        (False, "",
         WorkerDaemonUpdateData(JobStatus.COMPLETED, "Job completed successfully.", ""),
         MissingIDError),
        (True, None, WorkerDaemonUpdateData(JobStatus.FAILED, "", ""), MissingErrorMessageError),
    ],
)
def test_update_job_worker_daemon_errors(service, daemon_job, use_created, job_id, data, error):
    target = daemon_job.id if use_created else job_id
    with pytest.raises(error):
        service.update_job_worker_daemon(target, data)


@pytest.mark.parametrize(
    "version, valid",
    [("1.15", True), ("", True), ("3.8-slim_x", True), ("!!15", False), ("1 0", False)],
)
def test_is_simple_valid_version(version, valid):
    assert is_simple_valid_version(version) is valid


@pytest.mark.parametrize(
    "status, valid",
    [(JobStatus.CANCELLED, True), ("queued", True), ("", False), ("non-existing-status", False)],
)
def test_is_valid_status(status, valid):
    assert is_valid_status(status) is valid