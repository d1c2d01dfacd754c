"""Data models for remote model storage."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path

GCS_URL_PREFIX = "gs://"


class StatusCode(Enum):
    """Outcome of a storage operation."""

    OK = "ok"
    INVALID_PATH = "invalid_path"
    BUCKET_NOT_FOUND = "bucket_not_found"
    FILE_NOT_FOUND = "file_not_found"
    FILE_INVALID = "file_invalid"
    INVALID_ACCESS = "invalid_access"
    LOCAL_FILE_ERROR = "local_file_error"
    MAX_DEPTH_EXCEEDED = "max_depth_exceeded"
    CREDENTIALS_ERROR = "credentials_error"


@dataclass(frozen=True)
class RemotePath:
    """
    Bucket and object key resolved from a gs:// URI.

    An empty key is the root of the bucket.
    """

    bucket: str
    key: str = ""

    @property
    def uri(self) -> str:
        """Rebuild the gs:// URI."""
        if self.key:
            return f"{GCS_URL_PREFIX}{self.bucket}/{self.key}"
        return f"{GCS_URL_PREFIX}{self.bucket}"


@dataclass(frozen=True)
class ObjectMetadata:
    """Object attributes returned by metadata probes and listings."""

    name: str
    size: int | None = None
    updated: datetime | None = None


@dataclass
class VersionDownloadResult:
    """
    Outcome of mirroring one model version.

    Used by the orchestrator to report per-version results.
    """

    version: int
    remote_path: str
    local_path: Path
    status: StatusCode = StatusCode.OK
    error: Exception | None = None

    @property
    def success(self) -> bool:
        return self.status is StatusCode.OK

    @property
    def error_message(self) -> str | None:
        """Get error message if failed."""
        if self.error:
            return f"{type(self.error).__name__}: {self.error}"
        return None


@dataclass
class ModelVersionsDownload:
    """
    Outcome of fetching a set of model versions into a staging path.

    `status` is the last non-OK status seen across versions, or OK.
    """

    local_path: Path
    status: StatusCode = StatusCode.OK
    results: list[VersionDownloadResult] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return self.status is StatusCode.OK

    @property
    def failed_versions(self) -> list[int]:
        return [r.version for r in self.results if not r.success]
