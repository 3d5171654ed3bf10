[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "syslabs"
version = "0.1.0"
description = "Small systems tools: a command-line calculator, a memory-mapped file stream, and CSV line search over Unix domain sockets and worker threads"
requires-python = ">=3.10"
dependencies = []
keywords = ["ipc", "unix-socket", "mmap", "calculator", "csv", "search"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Intended Audience :: Education",
    "Operating System :: POSIX :: Linux",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Networking",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
syslabs-calculate = "syslabs.calculator:main"
syslabs-text-client = "syslabs.socket_client:main"
syslabs-text-server = "syslabs.socket_server:main"
syslabs-csv-search = "syslabs.shm_search:main"

[tool.hatch.build.targets.wheel]
packages = ["syslabs"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
