[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "capi_core"
version = "0.1.0"
description = "Core runtime, value types and serialization helpers for interface-based proxy/stub middleware"
requires-python = ">=3.10"
dependencies = []
keywords = ["ipc", "middleware", "proxy", "stub", "serialization", "variant", "runtime"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Libraries :: Application Frameworks",
    "Typing :: Typed",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["capi_core"]

[tool.pytest.ini_options]
addopts = "-ra"
