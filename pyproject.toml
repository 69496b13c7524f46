[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "argonkit"
version = "0.1.0"
description = "Semantic version checks, Link header parsing, JSON pretty printing, typed dataclass field access, file event debouncing and release archive helpers"
requires-python = ">=3.10"
dependencies = [
    "semver",
]
keywords = ["debounce", "file-events", "self-update", "archive", "json", "semver", "link-header"]
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
    "Topic :: Software Development :: Libraries :: Python Modules",
    "Topic :: System :: Filesystems",
    "Topic :: System :: Archiving",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["argonkit"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
