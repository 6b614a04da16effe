[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "lidarproto"
version = "0.1.0"
description = "Wire formats, state-info parsing, data dispatch and debug point cloud recording for Livox lidars"
requires-python = ">=3.10"
dependencies = []
keywords = ["lidar", "livox", "point cloud", "protocol", "imu"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Intended Audience :: Science/Research",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: Interface Engine/Protocol Translator",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["lidarproto"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
