[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "greenjobs"
version = "0.1.0"
description = "Carbon-aware job scheduling services: job store, worker registry, worker gateway, worker daemon and user management"
requires-python = ">=3.10"
keywords = ["jobs", "scheduling", "workers", "carbon-intensity", "wsgi", "distributed"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: System Administrators",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Internet :: WWW/HTTP :: WSGI :: Application",
    "Topic :: System :: Distributed Computing",
]
dependencies = [
    "werkzeug>=3.0",
    "requests>=2.31",
]

[project.optional-dependencies]
test = [
    "pytest>=7.4",
    "responses>=0.24",
]

[project.scripts]
greenjobs-job = "greenjobs.job.http:main"
greenjobs-registry = "greenjobs.registry.http:main"
greenjobs-gateway = "greenjobs.gateway.http:main"
greenjobs-daemon = "greenjobs.daemon.worker:main"

[tool.hatch.build.targets.wheel]
packages = ["greenjobs"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
warn_redundant_casts = true
