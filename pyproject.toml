[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "netutils"
version = "0.1.0"
description = "Utilities for network programs: byte buffers, dates, task queues, object pools and asynchronous file logging"
requires-python = ">=3.10"
dependencies = []
keywords = ["buffer", "logging", "task queue", "thread pool", "date", "tls"]
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
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["netutils"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 88
target-version = "py310"
