[build-system]
requires = ["hatchling>=1.18"]
build-backend = "hatchling.build"

[project]
name = "minidnn"
version = "0.1.0"
description = "A small NumPy neural-network library with convolution, pooling and dense layers, and an inference runner for IDX image data."
requires-python = ">=3.10"
dependencies = [
    "numpy>=1.23",
]
keywords = [
    "neural-network",
    "deep-learning",
    "cnn",
    "convolution",
    "mnist",
    "fashion-mnist",
    "numpy",
]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Intended Audience :: Education",
    "Intended Audience :: Science/Research",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: Artificial Intelligence",
]

[project.optional-dependencies]
test = [
    "pytest>=7.0",
]

[project.scripts]
minidnn-infer = "minidnn.model:main"

[tool.hatch.build.targets.wheel]
packages = ["minidnn"]

[tool.hatch.build.targets.sdist]
include = [
    "minidnn",
    "tests",
    "pyproject.toml",
]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP", "SIM"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
warn_redundant_casts = true
