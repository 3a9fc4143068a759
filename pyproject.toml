[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "compiletools"
version = "0.1.0"
description = "Building blocks for compiler test harnesses: output checks, normalization, diffing and process running"
requires-python = ">=3.10"
dependencies = []
keywords = ["testing", "compiler", "test-harness", "ui-tests", "diff", "mir", "debugger"]
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
    "Topic :: Software Development :: Testing",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["compiletools"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"
