[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "commonkit"
version = "0.1.0"
description = "Shared building blocks for services: structured logging, SQL and search-request log adapters, a command tree for scheduled jobs and a Redis client facade."
requires-python = ">=3.10"
dependencies = [
    "redis",
]
keywords = ["logging", "redis", "cron", "scheduled tasks", "utilities"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Libraries",
    "Topic :: System :: Logging",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["commonkit"]

[tool.hatch.build.targets.sdist]
include = [
    "commonkit",
    "tests",
    "README.md",
]

[tool.pytest.ini_options]
addopts = "-ra"
testpaths = ["tests"]

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
warn_redundant_casts = true
