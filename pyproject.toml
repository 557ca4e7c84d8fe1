[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "hpcbench"
version = "0.1.0"
description = "Dense matrix-multiply benchmarks and a short-range particle simulation with scaling autograder"
requires-python = ">=3.10"
dependencies = [
    "numpy",
]
keywords = [
    "benchmark",
    "dgemm",
    "matrix multiplication",
    "particle simulation",
    "scaling",
    "parallel",
]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: Education",
    "Intended Audience :: Science/Research",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Benchmark",
    "Topic :: Scientific/Engineering :: Physics",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
hpcbench-dgemm = "hpcbench.benchmark:main"
hpcbench-serial = "hpcbench.serial:main"
hpcbench-threads = "hpcbench.threaded:main"
hpcbench-pool = "hpcbench.pool:main"
hpcbench-autograder = "hpcbench.autograder:main"

[tool.hatch.build.targets.wheel]
packages = ["hpcbench"]

[tool.hatch.build.targets.sdist]
include = ["hpcbench", "tests", "README.md"]

[tool.pytest.ini_options]
addopts = "-ra"
