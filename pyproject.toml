[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "rocketsim"
version = "0.1.0"
description = "Rocket flight logic, uplink command handling and a software-in-the-loop flight and hybrid propulsion simulation"
requires-python = ">=3.10"
dependencies = [
    "numpy",
]
keywords = ["rocket", "simulation", "flight computer", "hybrid propulsion", "sitl"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Science/Research",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: Physics",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["rocketsim"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
