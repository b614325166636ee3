[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "mcndsolve"
version = "0.1.0"
description = "Exact branch-and-bound solver for the multicommodity capacitated fixed-charge network design problem, with pluggable branching rules"
requires-python = ">=3.10"
dependencies = [
    "numpy",
    "scipy",
]
keywords = [
    "network design",
    "multicommodity flow",
    "mixed integer programming",
    "branch and bound",
    "strong branching",
    "pseudocosts",
    "operations research",
]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: Science/Research",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: Mathematics",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
mcnd-solve = "mcndsolve.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["mcndsolve"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
