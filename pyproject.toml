[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "halkit"
version = "0.1.0"
description = "Device service logic for fastboot, charging control and display colour tuning, with modified UTF-8/UTF-16 and binary128 comparison helpers"
requires-python = ">=3.10"
dependencies = []
keywords = ["hal", "fastboot", "charging", "livedisplay", "display", "utf-16", "modified-utf-8", "binary128"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Operating System :: POSIX :: Linux",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Hardware",
    "Typing :: Typed",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["halkit"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
