[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "ubxgnss"
version = "0.1.0"
description = "UBX protocol frames, payload decoders and configuration helpers for u-blox GNSS receivers, plus an NTRIP correction client"
requires-python = ">=3.10"
dependencies = []
keywords = ["gnss", "gps", "ubx", "u-blox", "rtk", "ntrip", "rtcm"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: Science/Research",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: GIS",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
ubxgnss-ntrip = "ubxgnss.ntrip:main"

[tool.hatch.build.targets.wheel]
packages = ["ubxgnss"]

[tool.pytest.ini_options]
addopts = "-ra"
testpaths = ["tests"]

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
