[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "trojango"
version = "0.1.0"
description = "Proxy core: configuration loading, connection and packet relaying, logging, geodata decoding and a command-line entry point"
requires-python = ">=3.10"
dependencies = [
    "pyyaml",
]
keywords = ["proxy", "trojan", "tunnel", "relay", "geoip", "geosite"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: System Administrators",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Internet :: Proxy Servers",
    "Topic :: System :: Networking",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
trojango = "trojango.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["trojango"]

[tool.pytest.ini_options]
addopts = "-ra"
testpaths = ["tests"]

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
