[build-system]
requires = ["setuptools>=64"]
build-backend = "setuptools.build_meta"

[project]
name = "envbounds"
version = "0.1.0"
description = "Computer-assisted lower bounds for higher-order environment derivatives of passage times"
requires-python = ">=3.10"
dependencies = []
keywords = ["first-passage percolation", "environment derivatives", "proof search", "latex"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Science/Research",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: Scientific/Engineering :: Mathematics",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
envbounds = "envbounds.cli:main"

[tool.setuptools.packages.find]
include = ["envbounds*"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
