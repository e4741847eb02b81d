"""Build tooling for bridging Kotlin libraries to native code and publishing them to Maven Central."""

__version__ = "0.1.0"