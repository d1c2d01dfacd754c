"""Shared fixtures for unit tests."""

from __future__ import annotations

import io
from collections.abc import Iterator
from pathlib import Path

import pytest

from remote_models.storage import (
    GCSFileSystem,
    MirrorConfig,
    ObjectMetadata,
    ObjectStoreError,
)

BUCKET = "models"


class _BrokenStream(io.BytesIO):
    """Stream that fails after the first read."""

    def __init__(self, data: bytes):
        super().__init__(data)
        self._reads = 0

    def read(self, size: int | None = -1) -> bytes:
        self._reads += 1
        if self._reads > 1:
            raise ObjectStoreError("connection reset")
        return super().read(1)


class FakeObjectStore:
    """
    In-memory ObjectStoreClient with a flat key namespace.

    Failures are injected per key or per listing prefix.
    """

    def __init__(self) -> None:
        self.objects: dict[tuple[str, str], bytes] = {}
        self.metadata_errors: set[tuple[str, str]] = set()
        self.list_errors: dict[tuple[str, str], int] = {}
        self.open_errors: set[tuple[str, str]] = set()
        self.read_errors: set[tuple[str, str]] = set()
        self.calls: list[tuple[str, str, str]] = []

    def put(self, key: str, data: bytes = b"", bucket: str = BUCKET) -> None:
        self.objects[(bucket, key)] = data

    def fail_listing(self, prefix: str, after: int = 0, bucket: str = BUCKET) -> None:
        """Make listings of prefix raise after yielding `after` objects."""
        self.list_errors[(bucket, prefix)] = after

    def get_object_metadata(self, bucket: str, key: str) -> ObjectMetadata | None:
        self.calls.append(("metadata", bucket, key))
        if (bucket, key) in self.metadata_errors:
            raise ObjectStoreError(f"metadata failed for {key}")
        data = self.objects.get((bucket, key))
        if data is None:
            return None
        return ObjectMetadata(name=key, size=len(data))

    def list_objects(self, bucket: str, prefix: str) -> Iterator[ObjectMetadata]:
        self.calls.append(("list", bucket, prefix))
        fail_after = self.list_errors.get((bucket, prefix))
        keys = sorted(k for b, k in self.objects if b == bucket and k.startswith(prefix))
        for i, key in enumerate(keys):
            if fail_after is not None and i >= fail_after:
                raise ObjectStoreError(f"listing failed for {prefix}")
            yield ObjectMetadata(name=key, size=len(self.objects[(bucket, key)]))
        if fail_after is not None and fail_after >= len(keys):
            raise ObjectStoreError(f"listing failed for {prefix}")

    def open_read(self, bucket: str, key: str) -> io.BytesIO:
        self.calls.append(("open", bucket, key))
        if (bucket, key) in self.open_errors:
            raise ObjectStoreError(f"open failed for {key}")
        data = self.objects.get((bucket, key), b"")
        if (bucket, key) in self.read_errors:
            return _BrokenStream(data)
        return io.BytesIO(data)

    def opened_keys(self) -> list[str]:
        return [key for op, _, key in self.calls if op == "open"]


@pytest.fixture
def store() -> FakeObjectStore:
    """Empty in-memory object store."""
    return FakeObjectStore()


@pytest.fixture
def mirror_config() -> MirrorConfig:
    """Mirror config accepting .bin and .xml files."""
    return MirrorConfig(accepted_files=(".bin", ".xml"), max_depth=8)


@pytest.fixture
def staging_dir(tmp_path: Path) -> Path:
    """Parent directory for staging paths."""
    staging = tmp_path / "staging"
    staging.mkdir()
    return staging


@pytest.fixture
def fs(
    store: FakeObjectStore, mirror_config: MirrorConfig, staging_dir: Path
) -> GCSFileSystem:
    """GCSFileSystem over the fake store with a predictable staging path."""
    staging = staging_dir / "run"

    def temp_path_factory() -> Path:
        staging.mkdir()
        return staging

    return GCSFileSystem(store, config=mirror_config, temp_path_factory=temp_path_factory)


@pytest.fixture
def local_dir(tmp_path: Path) -> Path:
    """Empty local target directory for mirrors."""
    target = tmp_path / "local"
    target.mkdir()
    return target
