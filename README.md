# greenjobs

A small set of cooperating services for running container jobs on workers
in the zone with the lowest carbon intensity:

- **job** – stores jobs and their state (`queued`, `scheduled`, `running`,
  `completed`, `failed`, `cancelled`) and serves them over HTTP.
- **registry** – keeps track of workers, their zone and their status
  (`AVAILABLE` or `RUNNING`).
- **gateway** – the single entry point for workers: registration,
  heartbeats and result submission, forwarded to the registry and the job
  service.
- **daemon** – runs on a worker machine, registers with the gateway, sends
  heartbeats and processes the jobs it is given.
- **users** – authentication and registration helpers for clients.

All HTTP services are plain WSGI applications built on Werkzeug; the stores
are in memory, so their contents are lost when a service stops.

## Installation

```
pip install .
```

For running the tests:

```
pip install ".[test]"
pytest
```

## Running the services

Each HTTP service listens on the number given by `--port`, which defaults
to the `PORT` environment variable, or 8080 if that is not set. They stop
cleanly on SIGINT or SIGTERM.

### Job service

```
greenjobs-job
```

| Method | Path                              | Purpose                                  |
|--------|-----------------------------------|------------------------------------------|
| GET    | `/jobs?status=queued,running`     | list jobs, optionally filtered by status |
| POST   | `/jobs`                           | create a job                             |
| GET    | `/jobs/{id}`                      | fetch one job                            |
| GET    | `/jobs/{id}/outcome`              | result, zone and carbon figures          |
| PATCH  | `/jobs/{id}/update-scheduler`     | assign worker, zone and carbon data      |
| PATCH  | `/jobs/{id}/update-workerdaemon`  | report status, result or error           |

A listing with no matching jobs answers `204 No Content`; an unknown status
in the filter answers `400`. Job IDs must be UUIDs.

### Worker registry

```
greenjobs-registry
```

The set of valid zones is fetched from the service named in
`CARBON_INTENSITY_PROVIDER` (`GET /carbon-intensity/zones`), retried every
`CARBON_INTENSITY_PROVIDER_INTERVAL` seconds (default 60) until it succeeds.
Until then `DE`, `EN` and `FR` are accepted.

| Method | Path                     | Purpose                                   |
|--------|--------------------------|-------------------------------------------|
| GET    | `/workers?status=&zone=` | list workers, optionally filtered         |
| POST   | `/workers?zone=DE`       | register a new worker in a zone           |
| GET    | `/workers/{id}`          | fetch one worker                          |
| PUT    | `/workers/{id}/status`   | set status, body `{"status": "RUNNING"}`  |

### Worker gateway

```
WORKER_REGISTRY=http://localhost:8081 JOB_SERVICE=http://localhost:8082 greenjobs-gateway
```

| Path                | Body                                             | Answer               |
|---------------------|--------------------------------------------------|----------------------|
| `/register`         | `{"key": ..., "zone": ...}`                      | the new worker       |
| `/worker/heartbeat` | `{"workerId": ..., "status": ...}`               | jobs for the worker  |
| `/result`           | `{"jobId", "status", "result", "errorMessage"}`  | `200` with no body   |

A heartbeat with status `AVAILABLE` returns the scheduled jobs assigned to
that worker; any other status returns `null`.

### Worker daemon

The daemon reads `config.json` from the current directory, or the file given
with `--config`:

```json
{
  "gateway_url": "http://localhost:8080",
  "key": "placeholder",
  "zone": "DE",
  "heartbeat_interval_seconds": 5
}
```

```
greenjobs-daemon --config config.json
```

It registers with the gateway, then sends a heartbeat every interval,
reporting `RUNNING` while it is busy with a job and `AVAILABLE` otherwise.
It takes the first job offered when idle, processes it (`compute_job` waits
for a while and marks the job `DONE` with the result `Result of job <id>`)
and submits it back through `/result`. The heartbeat interval must be
positive.

## Using the library

The services can also be composed directly in Python:

```python
from greenjobs.job.models import JobCreate, JobError
from greenjobs.job.repository import InMemoryJobStorage
from greenjobs.job.service import JobService

service = JobService(InMemoryJobStorage())
job = service.create_job(JobCreate.from_dict({
    "jobName": "render",
    "creationZone": "DE",
    "image": {"name": "python", "version": "3.12"},
    "parameters": {"env": "MODE=batch"},
}))
print(job.to_dict()["status"])  # "queued"

try:
    service.get_job("not-a-uuid")
except JobError as exc:
    print(exc)  # job ID must be a valid UUID
```

Validation failures and missing records are raised as exceptions derived from
`JobError` in the job service and `WorkerRegistryError` in the registry.

## User management

`greenjobs.users` offers `AuthService`, which splits `clientID.clientSecret`
credentials and asks a `TokenProvider` for a token, `is_admin_secret`, which
compares the SHA-256 hex digest of a secret with an expected one, `LogNotifier`,
and `UserHandler`, a WSGI application with `POST /auth/register` (admin
secret in the `X-Admin-Secret` header) and `POST /auth/login`.

## What is not included

- There is no command that starts the user management service, and no
  `TokenProvider` implementation: to serve logins you supply an object with a
  `request_token_from_client_secret(client_id, client_secret)` method and
  mount `UserHandler` in a WSGI server yourself.
- No service keeps its data on disk.
- The worker daemon does not run container images; its job processing is a
  stand-in that produces a fixed result.