[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "sbstream"
version = "0.1.0"
description = "Typed token streams with a compact binary encoding, JSON decoding, total ordering and structural hashing."
requires-python = ">=3.10"
dependencies = []
keywords = ["serialization", "binary", "stream", "tokens", "hashing", "comparison"]
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
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["sbstream"]

[tool.pytest.ini_options]
addopts = "-ra"
