[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "todolab"
version = "0.1.0"
description = "A small todo HTTP API with pluggable storage backends, background notifications and concurrent batch processing"
requires-python = ">=3.10"
keywords = ["todo", "rest", "api", "flask", "concurrency", "threads", "repository-pattern"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Web Environment",
    "Environment :: Console",
    "Framework :: Flask",
    "Intended Audience :: Developers",
    "Intended Audience :: Education",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Internet :: WWW/HTTP :: HTTP Servers",
]
dependencies = [
    "flask",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
todolab-server = "todolab.server:main"
todolab-demo = "todolab.demo.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["todolab"]

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
