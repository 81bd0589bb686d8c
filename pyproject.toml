[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "multistore"
version = "0.1.0"
description = "Building blocks for a versioned multi-store: an ordered in-memory database, memory and prefix stores, pruning strategies, commit metadata and store registration."
requires-python = ">=3.10"
dependencies = []
keywords = ["key-value", "store", "pruning", "multistore", "versioning"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Database :: Database Engines/Servers",
    "Typing :: Typed",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["multistore"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
