[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "sophiread"
version = "0.1.0"
description = "Timepix3 neutron imaging tools: clustering configuration, GDC CSV output, TOF image binning and TIFF/spectra output"
requires-python = ">=3.10"
dependencies = [
    "numpy",
]
keywords = [
    "timepix3",
    "tpx3",
    "neutron imaging",
    "time of flight",
    "tof",
    "tiff",
    "spectra",
]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Science/Research",
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
packages = ["sophiread"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 88
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
warn_redundant_casts = true
