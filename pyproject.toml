[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "onoscli"
version = "0.1.0"
description = "Command trees, formatters and gNMI query parsing for ONOS micro-service command line clients"
requires-python = ">=3.10"
dependencies = []
keywords = ["onos", "sdn", "ric", "gnmi", "cli", "networking"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Intended Audience :: Telecommunications Industry",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Networking",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["onoscli"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"
