"""gs:// URI parsing and key helpers."""

from __future__ import annotations

from collections.abc import Iterable

from .errors import BucketNotFoundError, InvalidPathError
from .models import GCS_URL_PREFIX, RemotePath


def parse_path(uri: str) -> RemotePath:
    """
    Split a gs:// URI into bucket and object key.

    Examples:
        gs://bucket/models/resnet -> ("bucket", "models/resnet")
        gs://bucket               -> ("bucket", "")
        gs://bucket/              -> ("bucket", "")

    Raises:
        InvalidPathError: If the URI does not start with gs://
        BucketNotFoundError: If the bucket segment is empty
    """
    if not uri.startswith(GCS_URL_PREFIX):
        raise InvalidPathError(f"Not a {GCS_URL_PREFIX} path: {uri!r}")

    bucket, _, key = uri[len(GCS_URL_PREFIX) :].partition("/")
    if not bucket:
        raise BucketNotFoundError(f"No bucket in path: {uri!r}")
    return RemotePath(bucket=bucket, key=key)


def append_slash(key: str) -> str:
    """Turn a key into a listing prefix. The bucket root stays empty."""
    if not key or key.endswith("/"):
        return key
    return key + "/"


def join_path(*parts: str) -> str:
    """Join URI or key segments with a single separator, skipping empty ones."""
    head, *rest = [p for p in parts if p] or [""]
    for part in rest:
        head = f"{head.rstrip('/')}/{part.lstrip('/')}"
    return head


def is_accepted_file(name: str, accepted_files: Iterable[str]) -> bool:
    """Check a file name against accepted suffixes."""
    return bool(name) and any(name.endswith(suffix) for suffix in accepted_files)
