"""Compilation of generated Kotlin sources into a library JAR with a POM."""

from __future__ import annotations

import os
import shutil
import subprocess
from dataclasses import dataclass, field
from pathlib import Path
from string import Template

_KOTLINC_CANDIDATES = (
    "/usr/local/bin/kotlinc",
    "/opt/homebrew/bin/kotlinc",
)

_POM = Template(
    """<?xml version="1.0" encoding="UTF-8"?>
<project xmlns="http://maven.apache.org/POM/4.0.0"
         xmlns:xsi="http://www.w3.org/2001/XMLSchema-instance"
         xsi:schemaLocation="http://maven.apache.org/POM/4.0.0 https://maven.apache.org/xsd/maven-4.0.0.xsd">
  <modelVersion>4.0.0</modelVersion>
  <groupId>$group</groupId>
  <artifactId>$artifact</artifactId>
  <version>$version</version>
  <packaging>jar</packaging>
</project>
"""
)


class KotlincNotFoundError(FileNotFoundError):
    """Raised when no kotlinc binary can be located."""

    def __init__(self) -> None:
        super().__init__("kotlinc not found; install Kotlin or set KOTLINC_PATH")


@dataclass
class LibrarySpec:
    """The Kotlin library to produce."""

    group: str = ""
    artifact: str = ""
    version: str = ""
    kotlin_sources: dict[str, str] = field(default_factory=dict)
    dependencies: list[str] = field(default_factory=list)
    include_sources: bool = False


@dataclass(frozen=True)
class LibraryResult:
    """Paths of the produced artifacts."""

    jar_path: Path
    pom_path: Path
    sources_jar_path: Path | None = None


def validate_spec(spec: LibrarySpec) -> None:
    """Raise ValueError if a required field of spec is missing."""
    if not spec.group:
        raise ValueError("group is required")
    if not spec.artifact:
        raise ValueError("artifact is required")
    if not spec.version:
        raise ValueError("version is required")
    if not spec.kotlin_sources:
        raise ValueError("kotlin_sources is empty")


def render_pom(spec: LibrarySpec) -> str:
    """Return the minimal POM document for spec."""
    return _POM.substitute(group=spec.group, artifact=spec.artifact, version=spec.version)


def write_pom(spec: LibrarySpec, path: str | Path) -> Path:
    """Write the POM for spec to path and return the path."""
    target = Path(path)
    target.write_bytes(render_pom(spec).encode("utf-8"))
    return target


def resolve_kotlinc() -> str:
    """Locate kotlinc: KOTLINC_PATH, then well-known locations, then PATH."""
    from_env = os.environ.get("KOTLINC_PATH", "")
    if from_env and os.path.exists(from_env):
        return from_env
    for candidate in _KOTLINC_CANDIDATES:
        if os.path.exists(candidate):
            return candidate
    found = shutil.which("kotlinc")
    if found is None:
        raise KotlincNotFoundError()
    return found


def _compile_jar(kotlinc: str, src_dir: Path, jar_path: Path, deps: list[str]) -> None:
    args = [kotlinc, str(src_dir), "-include-runtime", "-d", str(jar_path)]
    if deps:
        args += ["-cp", os.pathsep.join(deps)]
    try:
        proc = subprocess.run(
            args, stdout=subprocess.PIPE, stderr=subprocess.STDOUT, check=False
        )
    except OSError as err:
        raise RuntimeError(f"kotlinc: {err}") from err
    if proc.returncode != 0:
        output = proc.stdout.decode("utf-8", errors="replace")
        raise RuntimeError(f"kotlinc: exit status {proc.returncode}\n{output}")


def _build_sources_jar(src_dir: Path, out_path: Path) -> None:
    # The sources JAR is informational: a missing tool or a failed run is not an error.
    jar_bin = shutil.which("jar")
    if jar_bin is None:
        return
    files = sorted(str(p) for p in src_dir.iterdir() if p.name.endswith(".kt"))
    if not files:
        return
    try:
        subprocess.run(
            [jar_bin, "cf", str(out_path), *files],
            cwd=src_dir,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
            check=False,
        )
    except OSError:
        pass


def build_library(spec: LibrarySpec, out_dir: str | Path) -> LibraryResult:
    """Compile spec's sources into <artifact>-<version>.jar plus a POM in out_dir.

    Raises ValueError for an incomplete spec and KotlincNotFoundError when
    kotlinc cannot be found.
    """
    validate_spec(spec)
    kotlinc = resolve_kotlinc()

    out = Path(out_dir)
    out.mkdir(parents=True, exist_ok=True)
    src_dir = out / "src"
    src_dir.mkdir(parents=True, exist_ok=True)
    for name, content in spec.kotlin_sources.items():
        (src_dir / name).write_text(content, encoding="utf-8")

    base = f"{spec.artifact}-{spec.version}"
    jar_path = out / f"{base}.jar"
    _compile_jar(kotlinc, src_dir, jar_path, spec.dependencies)

    pom_path = write_pom(spec, out / f"{base}.pom")

    sources_jar: Path | None = None
    if spec.include_sources:
        sources_jar = out / f"{base}-sources.jar"
        _build_sources_jar(src_dir, sources_jar)

    return LibraryResult(jar_path=jar_path, pom_path=pom_path, sources_jar_path=sources_jar)