[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "carla"
version = "0.1.0"
description = "A small single-threaded async runtime with a readiness reactor and non-blocking TCP primitives"
requires-python = ">=3.10"
dependencies = []
keywords = ["async", "executor", "reactor", "runtime", "tcp", "networking"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Libraries :: Application Frameworks",
    "Topic :: System :: Networking",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
carla-simple-http = "carla.simple_http:main"

[tool.hatch.build.targets.wheel]
packages = ["carla"]

[tool.pytest.ini_options]
addopts = "-ra"
