"""Build orchestration: verify cached JARs, synthesise bridges, compile and collect link flags."""

from __future__ import annotations

import hashlib
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Iterable, Optional, Sequence

from kotlinbridge.model import APIObject
from kotlinbridge.synth import synthesize

DEFAULT_COMPILE_TIMEOUT = 300.0
_HASH_CHUNK = 1 << 16

# compiler(*, graalvm_path, output_dir, library_name, dependency_jars, no_fallback, timeout)
#   -> (shared_library_path, header_path)
Compiler = Callable[..., "tuple[str | Path, str | Path]"]
# ingester(jar_bytes) -> classes described by the JAR's metadata
Ingester = Callable[[bytes], Iterable[APIObject]]


class OrchestrationError(Exception):
    """Raised when a build step fails."""


class ArtifactNotFoundError(OrchestrationError):
    """Raised when an artifact's JAR is not present in the cache."""

    def __init__(self, group_id: str, artifact_id: str, version: str, path: str = "") -> None:
        self.group_id = group_id
        self.artifact_id = artifact_id
        self.version = version
        self.path = path
        where = f" (JAR not in cache: {path})" if path else ""
        super().__init__(f"artifact not found: {group_id}:{artifact_id}:{version}{where}")


class LockMismatchError(OrchestrationError):
    """Raised when a file on disk does not match what the lock file recorded."""

    def __init__(self, artifact_id: str, field_name: str, expected: str, got: str) -> None:
        self.artifact_id = artifact_id
        self.field = field_name
        self.expected = expected
        self.got = got
        super().__init__(
            f"lock mismatch for {artifact_id}: {field_name} expected {expected}, got {got}"
        )


class GraalVMNotFoundError(OrchestrationError):
    """Raised when no native-image compiler is available."""

    def __init__(self, detail: str = "") -> None:
        message = "GraalVM native-image not found"
        if detail:
            message += f": {detail}"
        super().__init__(message)


@dataclass
class LockEntry:
    """The lock-file record for one Kotlin artifact."""

    group: str = ""
    artifact: str = ""
    version: str = ""
    jar_path: str = ""
    jar_sha256: str = ""
    wrapper_sha256: str = ""
    transitive_deps: list[str] = field(default_factory=list)


@dataclass
class Config:
    """Settings for one orchestration run."""

    work_dir: str | Path
    entries: list[LockEntry] = field(default_factory=list)
    lock_check: bool = False
    graalvm_path: str = ""
    compile_timeout: Optional[float] = None


@dataclass
class ArtifactResult:
    """Build output for one artifact."""

    artifact: str
    lib_path: str = ""
    header: str = ""
    l_flags: list[str] = field(default_factory=list)


@dataclass
class BuildResult:
    """Output of a successful build: per-artifact results and unique link flags."""

    artifacts: list[ArtifactResult] = field(default_factory=list)
    link_dirs: list[str] = field(default_factory=list)
    link_libs: list[str] = field(default_factory=list)


def safe_slug(s: str) -> str:
    """Turn an artifact ID into a filesystem-safe identifier (hyphens and dots become underscores)."""
    return s.replace("-", "_").replace(".", "_")


def shared_lib_ext() -> str:
    """Return the shared-library file extension of the running platform."""
    if sys.platform == "darwin":
        return ".dylib"
    if sys.platform.startswith(("win32", "cygwin")):
        return ".dll"
    return ".so"


def link_name(lib_path: str | Path) -> str:
    """Return the -l name of a shared library path ("/x/libwrap_a.so" -> "wrap_a")."""
    base = Path(lib_path).name.removesuffix(shared_lib_ext())
    return base.removeprefix("lib")


def verify_jar(entry: LockEntry) -> None:
    """Check that the entry's JAR exists and, when a hash is recorded, that it matches."""
    if not entry.jar_path:
        return
    path = Path(entry.jar_path)
    if not path.exists():
        raise ArtifactNotFoundError(entry.group, entry.artifact, entry.version, entry.jar_path)
    if path.is_dir():
        raise OrchestrationError(f"expected JAR file, got directory: {entry.jar_path}")
    if not entry.jar_sha256:
        return
    digest = hashlib.sha256()
    try:
        with path.open("rb") as handle:
            for chunk in iter(lambda: handle.read(_HASH_CHUNK), b""):
                digest.update(chunk)
    except OSError as err:
        raise OrchestrationError(f"hash JAR: {err}") from err
    got = digest.hexdigest()
    if got != entry.jar_sha256:
        raise LockMismatchError(
            f"{entry.group}:{entry.artifact}", "jar_sha256", entry.jar_sha256, got
        )


class Driver:
    """Runs the build pipeline for the artifacts of a lock file.

    ``compiler`` turns bridge sources and JARs into a shared library; without
    one, full builds raise GraalVMNotFoundError. ``ingester`` reads the class
    metadata out of a JAR's bytes; without one, the JAR exposes no classes and
    an empty bridge is generated.
    """

    def __init__(
        self, compiler: Optional[Compiler] = None, ingester: Optional[Ingester] = None
    ) -> None:
        self.compiler = compiler
        self.ingester = ingester

    def build(self, config: Config) -> BuildResult:
        """Build every entry of config and return the libraries and link flags."""
        work_dir = Path(config.work_dir)
        try:
            work_dir.mkdir(parents=True, exist_ok=True)
        except OSError as err:
            raise OrchestrationError(f"orchestrate: mkdir workdir: {err}") from err

        timeout = config.compile_timeout or DEFAULT_COMPILE_TIMEOUT
        result = BuildResult()
        for entry in config.entries:
            try:
                artifact = self._build_one(entry, config, work_dir, timeout)
            except OrchestrationError:
                raise
            except Exception as err:
                raise OrchestrationError(
                    f"orchestrate {entry.group}:{entry.artifact}: {err}"
                ) from err
            result.artifacts.append(artifact)
            if artifact.lib_path:
                lib_dir = str(Path(artifact.lib_path).parent)
                if lib_dir not in result.link_dirs:
                    result.link_dirs.append(lib_dir)
            for flag in artifact.l_flags:
                if flag not in result.link_libs:
                    result.link_libs.append(flag)
        return result

    def _build_one(
        self, entry: LockEntry, config: Config, work_dir: Path, timeout: float
    ) -> ArtifactResult:
        verify_jar(entry)
        if config.lock_check:
            return ArtifactResult(artifact=entry.artifact)

        slug = safe_slug(entry.artifact)
        wrap_dir = work_dir / "wrap" / slug
        self._synthesize_wrapper(entry, slug, wrap_dir)

        lib_dir = wrap_dir / "lib"
        lib_dir.mkdir(parents=True, exist_ok=True)

        deps: Sequence[str] = list(entry.transitive_deps)
        if entry.jar_path:
            deps = [entry.jar_path, *deps]

        if self.compiler is None:
            raise GraalVMNotFoundError("no native-image compiler configured")
        try:
            so_path, header_path = self.compiler(
                graalvm_path=config.graalvm_path,
                output_dir=str(lib_dir),
                library_name=f"libwrap_{slug}",
                dependency_jars=list(deps),
                no_fallback=True,
                timeout=timeout,
            )
        except GraalVMNotFoundError:
            raise
        except Exception as err:
            raise OrchestrationError(f"native-image: {err}") from err

        return ArtifactResult(
            artifact=entry.artifact,
            lib_path=str(so_path),
            header=str(header_path),
            l_flags=[link_name(so_path)],
        )

    def _synthesize_wrapper(self, entry: LockEntry, slug: str, wrap_dir: Path) -> None:
        wrap_dir.mkdir(parents=True, exist_ok=True)
        if not entry.jar_path:
            return
        try:
            jar_bytes = Path(entry.jar_path).read_bytes()
        except OSError as err:
            raise OrchestrationError(f"read JAR: {err}") from err
        classes: list[APIObject] = []
        if self.ingester is not None:
            try:
                classes = list(self.ingester(jar_bytes))
            except Exception as err:
                raise OrchestrationError(f"ingest metadata: {err}") from err
        synthesize(slug, classes, wrap_dir)