[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "waylite"
version = "0.1.0"
description = "Pure-Python Wayland building blocks: wire codec, protocol XML model, socket connection with fd passing, and a CPU-side asset, scene and primitive toolkit"
requires-python = ">=3.10"
dependencies = []
keywords = ["wayland", "wire-protocol", "protocol-xml", "unix-socket", "scene", "assets", "png"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: POSIX :: Linux",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Desktop Environment",
    "Topic :: Software Development :: Libraries :: Python Modules",
    "Typing :: Typed",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["waylite"]

[tool.hatch.build.targets.sdist]
include = ["waylite", "tests", "pyproject.toml", "README.md"]

[tool.pytest.ini_options]
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
