"""Bundling and uploading release artifacts to the Maven Central publishing portal."""

from __future__ import annotations

import hashlib
import json
import subprocess
import time
import urllib.error
import urllib.parse
import urllib.request
import uuid
import zipfile
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

DEFAULT_BASE_URL = "https://central.sonatype.com"
DRY_RUN_DEPLOYMENT_ID = "dry-run-deployment-id"


class PublishError(Exception):
    """Raised when bundling, validating, uploading or polling fails."""


class DeploymentState(str, Enum):
    """Deployment status reported by the portal."""

    PENDING = "PENDING"
    VALIDATED = "VALIDATED"
    PUBLISHED = "PUBLISHED"
    FAILED = "FAILED"


@dataclass(frozen=True)
class BundleSpec:
    """The artifact files to bundle for upload."""

    group_id: str = ""
    artifact_id: str = ""
    version: str = ""
    jar_path: str | Path = ""
    pom_path: str | Path = ""
    sources_jar_path: str | Path = ""
    gpg_key_id: str = ""


def validate_bundle_spec(spec: BundleSpec) -> None:
    """Raise ValueError if a required field of spec is missing."""
    required = (
        ("group_id", spec.group_id),
        ("artifact_id", spec.artifact_id),
        ("version", spec.version),
        ("jar_path", spec.jar_path),
        ("pom_path", spec.pom_path),
    )
    for name, value in required:
        if not value:
            raise ValueError(f"bundle: {name} is required")


def sha1_hex(data: bytes) -> str:
    """Return the hex SHA-1 digest of data."""
    return hashlib.sha1(data).hexdigest()


def md5_hex(data: bytes) -> str:
    """Return the hex MD5 digest of data."""
    return hashlib.md5(data).hexdigest()


def gpg_sign(data: bytes, key_id: str) -> bytes:
    """Return an ASCII-armoured detached signature of data made by gpg with key_id."""
    args = [
        "gpg", "--batch", "--yes", "--armor", "--detach-sign",
        "--local-user", key_id,
        "--output", "-",
        "-",
    ]
    try:
        proc = subprocess.run(args, input=data, capture_output=True, check=False)
    except OSError as err:
        raise PublishError(f"gpg sign: {err}") from err
    if proc.returncode != 0:
        detail = proc.stderr.decode("utf-8", errors="replace").strip()
        raise PublishError(f"gpg sign: exit status {proc.returncode}: {detail}")
    return proc.stdout


def _layout(group_id: str, artifact_id: str, version: str) -> tuple[str, str]:
    prefix = f"{group_id.replace('.', '/')}/{artifact_id}/{version}"
    return prefix, f"{artifact_id}-{version}"


def build_bundle(spec: BundleSpec, out_dir: str | Path) -> Path:
    """Write <artifact>-<version>-bundle.zip into out_dir and return its path.

    The archive holds the JAR, the POM and the optional sources JAR, each with
    .sha1 and .md5 checksums and, when a GPG key is given, a .asc signature.
    """
    validate_bundle_spec(spec)
    out = Path(out_dir)
    out.mkdir(parents=True, exist_ok=True)
    bundle_path = out / f"{spec.artifact_id}-{spec.version}-bundle.zip"

    prefix, base = _layout(spec.group_id, spec.artifact_id, spec.version)
    entries = [(Path(spec.jar_path), f"{base}.jar"), (Path(spec.pom_path), f"{base}.pom")]
    if spec.sources_jar_path and Path(spec.sources_jar_path).exists():
        entries.append((Path(spec.sources_jar_path), f"{base}-sources.jar"))

    with zipfile.ZipFile(bundle_path, "w", compression=zipfile.ZIP_DEFLATED) as archive:
        for source, name in entries:
            try:
                data = source.read_bytes()
            except OSError as err:
                raise PublishError(f"bundle: read {source}: {err}") from err
            entry = f"{prefix}/{name}"
            archive.writestr(entry, data)
            archive.writestr(f"{entry}.sha1", sha1_hex(data))
            archive.writestr(f"{entry}.md5", md5_hex(data))
            if spec.gpg_key_id:
                try:
                    signature = gpg_sign(data, spec.gpg_key_id)
                except PublishError as err:
                    raise PublishError(f"bundle: gpg sign {name}: {err}") from err
                archive.writestr(f"{entry}.asc", signature)
    return bundle_path


def dry_run(bundle_path: str | Path, group_id: str, artifact_id: str, version: str) -> None:
    """Check a bundle without uploading it; raise PublishError if it is unusable.

    The archive must open, hold the JAR, the POM and their SHA-1 files, and
    the stored SHA-1 checksums must match.
    """
    prefix, base = _layout(group_id, artifact_id, version)
    try:
        archive = zipfile.ZipFile(bundle_path)
    except (OSError, zipfile.BadZipFile) as err:
        raise PublishError(f"dry-run: open zip: {err}") from err
    with archive:
        names = set(archive.namelist())
        required = [
            f"{prefix}/{base}.jar",
            f"{prefix}/{base}.pom",
            f"{prefix}/{base}.jar.sha1",
            f"{prefix}/{base}.pom.sha1",
        ]
        for name in required:
            if name not in names:
                raise PublishError(f"dry-run: missing required entry {name!r}")
        for suffix in (".jar", ".pom"):
            data_name = f"{prefix}/{base}{suffix}"
            try:
                data = archive.read(data_name)
                stored = archive.read(f"{data_name}.sha1")
            except (OSError, zipfile.BadZipFile) as err:
                raise PublishError(f"dry-run: read {data_name}: {err}") from err
            if sha1_hex(data) != stored.decode("utf-8", errors="replace").strip():
                raise PublishError(f"dry-run: SHA-1 mismatch for {base}{suffix}")


def _as_state(value: str) -> DeploymentState | str:
    try:
        return DeploymentState(value)
    except ValueError:
        return value


@dataclass
class CentralClient:
    """Uploads bundles to the publishing portal and polls their deployment status."""

    base_url: str = DEFAULT_BASE_URL
    token: str = ""
    opener: urllib.request.OpenerDirector | None = None
    poll_interval: float = 5.0
    poll_timeout: float = 600.0
    request_timeout: float = 60.0

    def _base(self) -> str:
        return self.base_url.rstrip("/") if self.base_url else DEFAULT_BASE_URL

    def _open(self, request: urllib.request.Request, context: str) -> tuple[int, bytes]:
        opener = self.opener or urllib.request.build_opener()
        try:
            with opener.open(request, timeout=self.request_timeout) as response:
                return response.status, response.read()
        except urllib.error.HTTPError as err:
            body = err.read().decode("utf-8", errors="replace")
            raise PublishError(f"{context}: HTTP {err.code}: {body}") from err
        except (urllib.error.URLError, OSError) as err:
            raise PublishError(f"{context}: {err}") from err

    def upload(self, bundle_path: str | Path, dry_run: bool = False, bundle_name: str = "") -> str:
        """Send the bundle and return the deployment ID; with dry_run nothing is sent."""
        if dry_run:
            return DRY_RUN_DEPLOYMENT_ID
        path = Path(bundle_path)
        try:
            payload = path.read_bytes()
        except OSError as err:
            raise PublishError(f"upload: open bundle: {err}") from err

        boundary = uuid.uuid4().hex
        body = b"".join(
            [
                f"--{boundary}\r\n".encode(),
                f'Content-Disposition: form-data; name="bundle"; filename="{path.name}"\r\n'.encode(),
                b"Content-Type: application/octet-stream\r\n\r\n",
                payload,
                f"\r\n--{boundary}--\r\n".encode(),
            ]
        )
        url = f"{self._base()}/api/v1/publisher/upload"
        if bundle_name:
            url += "?name=" + urllib.parse.quote(bundle_name, safe="")
        request = urllib.request.Request(url, data=body, method="POST")
        request.add_header("Authorization", f"Bearer {self.token}")
        request.add_header("Content-Type", f"multipart/form-data; boundary={boundary}")

        status, content = self._open(request, "upload")
        if status not in (200, 201):
            text = content.decode("utf-8", errors="replace")
            raise PublishError(f"upload: HTTP {status}: {text}")
        deployment_id = content.decode("utf-8", errors="replace").strip()
        if not deployment_id:
            raise PublishError("upload: empty deployment ID in response")
        return deployment_id

    def check_status(self, deployment_id: str) -> DeploymentState | str:
        """Return the current state of a deployment."""
        url = f"{self._base()}/api/v1/publisher/status?id=" + urllib.parse.quote(
            deployment_id, safe=""
        )
        request = urllib.request.Request(url, method="GET")
        request.add_header("Authorization", f"Bearer {self.token}")
        status, content = self._open(request, "status poll")
        if status != 200:
            text = content.decode("utf-8", errors="replace")
            raise PublishError(f"status poll: HTTP {status}: {text}")
        try:
            decoded = json.loads(content)
        except ValueError as err:
            raise PublishError(f"status poll: decode: {err}") from err
        if not isinstance(decoded, dict):
            raise PublishError("status poll: decode: expected a JSON object")
        return _as_state(str(decoded.get("deploymentState", "")))

    def poll_until_published(self, deployment_id: str) -> DeploymentState:
        """Poll until the deployment is published; raise PublishError on failure or timeout."""
        deadline = time.monotonic() + self.poll_timeout
        while time.monotonic() < deadline:
            state = self.check_status(deployment_id)
            if state == DeploymentState.PUBLISHED:
                return DeploymentState.PUBLISHED
            if state == DeploymentState.FAILED:
                raise PublishError(f"deployment {deployment_id} failed")
            time.sleep(self.poll_interval)
        raise PublishError(f"deployment {deployment_id} timed out after {self.poll_timeout}s")