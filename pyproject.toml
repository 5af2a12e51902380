[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "gping"
version = "1.19.0"
description = "Ping, but with a graph."
requires-python = ">=3.10"
dependencies = [
    "idna",
    "blessed",
]
keywords = ["ping", "graph", "latency", "network", "monitoring", "terminal"]
classifiers = [
    "Development Status :: 5 - Production/Stable",
    "Environment :: Console",
    "Intended Audience :: System Administrators",
    "Intended Audience :: Developers",
    "Operating System :: POSIX :: Linux",
    "Operating System :: MacOS",
    "Operating System :: POSIX :: BSD",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Networking :: Monitoring",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
gping = "gping.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["gping"]

[tool.pytest.ini_options]
addopts = "-ra"
