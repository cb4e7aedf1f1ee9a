[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "todocqrs"
version = "0.1.0"
description = "A todo HTTP service with separate command and query handlers, a Redis read cache, request metrics and tracing spans."
requires-python = ">=3.10"
keywords = ["todo", "cqrs", "redis", "sqlite", "http", "service", "metrics"]
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
    "Topic :: Internet :: WWW/HTTP :: HTTP Servers",
]
dependencies = [
    "redis",
    "python-dotenv",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
todocqrs = "todocqrs.application:main"

[tool.hatch.build.targets.wheel]
packages = ["todocqrs"]

[tool.pytest.ini_options]
testpaths = ["tests"]
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
