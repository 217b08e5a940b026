[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "stuntcore"
version = "0.1.0"
description = "Core routines of a 3D racing game engine: fixed-point math, resource archives, 2D shapes, memory management, keyboard buffering and track tables"
requires-python = ">=3.10"
dependencies = []
keywords = ["game", "fixed-point", "racing", "resources", "sprites", "memory-manager"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: Games/Entertainment",
    "Typing :: Typed",
]

[project.optional-dependencies]
test = ["pytest", "hypothesis"]

[tool.hatch.build.targets.wheel]
packages = ["stuntcore"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
strict = true
