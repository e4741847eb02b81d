[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "kotlinbridge"
version = "0.1.0"
description = "Build tooling for bridging Kotlin libraries: version ranges, type mapping, bridge source synthesis, library packaging and Maven Central publishing"
requires-python = ">=3.10"
dependencies = []
keywords = ["kotlin", "maven", "jni", "graalvm", "bridge", "build", "publishing"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: Software Development :: Build Tools",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["kotlinbridge"]

[tool.pytest.ini_options]
addopts = "-ra"
