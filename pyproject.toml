[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "tanksim"
version = "0.1.0"
description = "Tank battle tournament runner with map parsing, factory registries, competition and comparative modes, and a toroidal grid world model for tank algorithms."
requires-python = ">=3.10"
dependencies = []
keywords = ["tanks", "simulation", "game", "tournament", "grid", "toroidal"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: Education",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Games/Entertainment :: Simulation",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
tanksim = "tanksim.runner:main"

[tool.hatch.build.targets.wheel]
packages = ["tanksim"]

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
