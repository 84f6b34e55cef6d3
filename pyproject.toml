[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "influxwriter"
version = "2.4.0"
description = "Line protocol encoding and synchronous, retrying writes to InfluxDB 2 servers"
requires-python = ">=3.10"
dependencies = []
keywords = ["influxdb", "line-protocol", "time-series", "metrics", "write", "retry"]
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
    "Topic :: Database",
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["influxwriter"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
