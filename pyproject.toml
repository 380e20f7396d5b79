[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "queryhooks"
version = "0.1.0"
description = "Hooks that observe SQL queries (debug printing, logging, JSON logging, tracing, datastore segments), with big-number and time-of-day column types and a small SQLite handle."
requires-python = ">=3.10"
dependencies = []
keywords = [
    "sql",
    "database",
    "query",
    "hooks",
    "logging",
    "tracing",
    "sqlite",
    "bignum",
    "pagination",
]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Database",
    "Topic :: Software Development :: Libraries :: Python Modules",
    "Topic :: System :: Logging",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
queryhooks-where-fields = "queryhooks.wherefields:main"
queryhooks-demo = "queryhooks.sqlitedb:main"
queryhooks-pagination = "queryhooks.pagination:main"

[tool.hatch.build.targets.wheel]
packages = ["queryhooks"]

[tool.pytest.ini_options]
addopts = "-ra"
testpaths = ["tests"]

[tool.ruff]
target-version = "py310"
line-length = 100

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
