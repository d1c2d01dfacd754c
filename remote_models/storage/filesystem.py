"""Directory semantics and recursive download over a flat GCS namespace."""

from __future__ import annotations

import contextlib
import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from pathlib import Path

from .client import ObjectStoreClient
from .errors import (
    InvalidAccessError,
    LocalFileError,
    MaxDepthExceededError,
    ObjectStoreError,
    RemoteFileInvalidError,
    RemoteFileNotFoundError,
    StorageError,
)
from .local import create_local_dir, create_temp_path, delete_file_folder
from .models import ModelVersionsDownload, StatusCode, VersionDownloadResult
from .paths import append_slash, is_accepted_file, join_path, parse_path

logger = logging.getLogger(__name__)

# Model artifacts mirrored to local disk; everything else is skipped.
ACCEPTED_FILES: tuple[str, ...] = (
    ".bin",
    ".onnx",
    ".xml",
    "mapping_config.json",
    ".pb",
    ".tflite",
    ".pdiparams",
    ".pdmodel",
)

READ_CHUNK_SIZE = 1024 * 1024


@dataclass(frozen=True)
class MirrorConfig:
    """Configuration for recursive directory downloads."""

    accepted_files: tuple[str, ...] = ACCEPTED_FILES
    max_depth: int = 32  # nested directories below the mirrored root


class GCSFileSystem:
    """
    Treat a GCS bucket as a read-only directory tree.

    GCS has no directories, only keys. A "directory" is any key prefix ending
    in "/" with at least one object under it, so every hierarchy question is
    answered by a fresh prefix listing. Nothing is cached.

    Layout mirrored for a model:
        gs://bucket/models/resnet/
        ├── 1/
        │   ├── model.xml
        │   └── model.bin
        └── 2/
            └── ...
    """

    def __init__(
        self,
        client: ObjectStoreClient,
        config: MirrorConfig | None = None,
        temp_path_factory: Callable[[], Path] = create_temp_path,
    ):
        """
        Initialize filesystem.

        Args:
            client: Object store access capability
            config: Mirror configuration (defaults if None)
            temp_path_factory: Allocates staging directories for version fetches
        """
        self._client = client
        self._config = config or MirrorConfig()
        self._temp_path_factory = temp_path_factory

    @property
    def config(self) -> MirrorConfig:
        return self._config

    # --- Existence / directory probes ---

    def file_exists(self, path: str) -> bool:
        """
        Check whether an object or a directory exists at path.

        The metadata probe only matches real objects; directories have no
        object of their own, so a miss falls back to is_directory().

        Raises:
            InvalidPathError, BucketNotFoundError: If path cannot be parsed
            InvalidAccessError: If the directory listing fails
        """
        remote = parse_path(path)
        try:
            if self._client.get_object_metadata(remote.bucket, remote.key) is not None:
                return True
        except ObjectStoreError as e:
            logger.debug(f"Metadata probe failed for {path}, trying directory: {e}")

        exists = self.is_directory(path)
        logger.debug(f"file_exists {path} -> {exists}")
        return exists

    def is_directory(self, path: str) -> bool:
        """
        Check whether path is a directory, i.e. a non-empty key prefix.

        The bucket root is always a directory.

        Raises:
            InvalidPathError, BucketNotFoundError: If path cannot be parsed
            InvalidAccessError: If the listing fails
        """
        remote = parse_path(path)
        if not remote.key:
            return True

        prefix = append_slash(remote.key)
        try:
            for _ in self._client.list_objects(remote.bucket, prefix):
                return True
        except ObjectStoreError as e:
            raise InvalidAccessError(f"Unable to list {path}: {e}") from e
        return False

    # --- Listing ---

    def get_directory_contents(self, path: str) -> set[str]:
        """
        List names of immediate children of a directory.

        Nested keys collapse to their first segment, so
        "dir/sub/model.bin" is reported as "sub" when listing "dir".

        Raises:
            InvalidPathError, BucketNotFoundError: If path cannot be parsed
            InvalidAccessError: If any part of the listing fails
        """
        remote = parse_path(path)
        prefix = append_slash(remote.key)
        logger.debug(f"Getting directory contents of {path}")

        contents: set[str] = set()
        try:
            for meta in self._client.list_objects(remote.bucket, prefix):
                # Placeholder object for the directory itself
                if meta.name == prefix:
                    continue
                name = meta.name[len(prefix) :].split("/", 1)[0]
                if name:
                    contents.add(name)
        except ObjectStoreError as e:
            logger.warning(f"Unable to get directory contents of {path}: {e}")
            raise InvalidAccessError(
                f"Unable to get directory contents of {path}: {e}"
            ) from e

        logger.debug(f"Directory contents fetched for {path}, items: {len(contents)}")
        return contents

    def get_directory_subdirs(self, path: str) -> set[str]:
        """List names of immediate subdirectories."""
        return {
            name
            for name in self.get_directory_contents(path)
            if self.is_directory(join_path(path, name))
        }

    def get_directory_files(self, path: str) -> set[str]:
        """List names of immediate files."""
        return {
            name
            for name in self.get_directory_contents(path)
            if not self.is_directory(join_path(path, name))
        }

    # --- Single files ---

    def read_text_file(self, path: str) -> bytes:
        """
        Download an object into memory.

        Raises:
            RemoteFileNotFoundError: If nothing exists at path
            RemoteFileInvalidError: If the object cannot be read
        """
        logger.debug(f"Downloading file {path}")
        if not self.file_exists(path):
            logger.warning(f"File does not exist at {path}")
            raise RemoteFileNotFoundError(f"File does not exist at {path}")

        remote = parse_path(path)
        try:
            stream = self._client.open_read(remote.bucket, remote.key)
        except ObjectStoreError as e:
            logger.warning(f"Opening {path} has failed: {e}")
            raise RemoteFileInvalidError(f"Unable to open {path}: {e}") from e

        data = bytearray()
        try:
            with contextlib.closing(stream):
                while chunk := stream.read(READ_CHUNK_SIZE):
                    data += chunk
        except ObjectStoreError as e:
            logger.warning(f"Downloading {path} has failed: {e}")
            raise RemoteFileInvalidError(f"Unable to read {path}: {e}") from e

        logger.debug(f"File {path} has been downloaded (bytes={len(data)})")
        return bytes(data)

    def download_file(self, remote_path: str, local_path: Path) -> None:
        """
        Download an object and write it to local_path, replacing any existing file.

        Raises:
            RemoteFileNotFoundError, RemoteFileInvalidError: If reading fails
            LocalFileError: If writing fails
        """
        logger.debug(f"Saving file {remote_path} to {local_path}")
        try:
            contents = self.read_text_file(remote_path)
        except StorageError:
            logger.error(f"Failed to get object at {remote_path}")
            raise

        try:
            local_path.write_bytes(contents)
        except OSError as e:
            raise LocalFileError(f"Failed to write {local_path}: {e}") from e

    # --- Trees ---

    def download_file_folder(
        self, path: str, local_path: Path, _depth: int = 0
    ) -> None:
        """
        Mirror a remote directory tree into an existing local directory.

        Subdirectories are processed first, then files, both in name order.
        Only files matching accepted_files are downloaded. The first failure
        aborts the whole mirror; anything already written stays on disk.

        Raises:
            RemoteFileNotFoundError: If path is not a directory
            MaxDepthExceededError: If the tree is deeper than max_depth
            StorageError: First failure from listing or downloading
        """
        logger.debug(f"Downloading dir {path} and saving to {local_path}")
        if _depth > self._config.max_depth:
            raise MaxDepthExceededError(
                f"{path} is nested deeper than {self._config.max_depth} levels"
            )

        try:
            is_dir = self.is_directory(path)
        except StorageError as e:
            logger.error(f"File/folder does not exist at {path}")
            raise RemoteFileNotFoundError(f"Unable to probe {path}: {e}") from e
        if not is_dir:
            logger.error(f"Path is not a directory: {path}")
            raise RemoteFileNotFoundError(f"Path is not a directory: {path}")

        dirs = self.get_directory_subdirs(path)
        files = self.get_directory_files(path)

        for name in sorted(dirs):
            remote_dir = join_path(path, name)
            local_dir = local_path / name
            logger.debug(f"Processing directory {name} from {remote_dir} -> {local_dir}")
            create_local_dir(local_dir)
            try:
                self.download_file_folder(remote_dir, local_dir, _depth + 1)
            except StorageError:
                logger.error(f"Unable to download directory from {remote_dir} to {local_dir}")
                raise

        for name in sorted(files):
            if not is_accepted_file(name, self._config.accepted_files):
                continue
            remote_file = join_path(path, name)
            local_file = local_path / name
            logger.debug(f"Processing file {name} from {remote_file} -> {local_file}")
            try:
                self.download_file(remote_file, local_file)
            except StorageError:
                logger.error(f"Unable to save file from {remote_file} to {local_file}")
                raise

    def download_model_versions(
        self, path: str, versions: Iterable[int]
    ) -> ModelVersionsDownload:
        """
        Mirror each model version into a fresh staging directory.

        Every version is attempted even if an earlier one fails; the overall
        status is the last failure seen.

        Args:
            path: Model root, e.g. gs://bucket/models/resnet
            versions: Version numbers to fetch (subdirectories of path)

        Returns:
            ModelVersionsDownload with staging path, status and per-version results

        Raises:
            LocalFileError: If the staging directory cannot be created
        """
        try:
            local_root = self._temp_path_factory()
        except LocalFileError as e:
            logger.error(f"Failed to create a temporary path: {e}")
            raise

        download = ModelVersionsDownload(local_path=local_root)
        for version in versions:
            version_path = join_path(path, str(version))
            version_local = local_root / str(version)
            result = VersionDownloadResult(
                version=version, remote_path=version_path, local_path=version_local
            )
            try:
                create_local_dir(version_local)
                self.download_file_folder(version_path, version_local)
            except StorageError as e:
                logger.error(f"Failed to download model version {version_path}: {e}")
                result.status = e.status
                result.error = e
                download.status = e.status
            else:
                logger.info(f"Downloaded model version {version_path} to {version_local}")
            download.results.append(result)

        return download

    def delete_file_folder(self, path: Path) -> None:
        """Remove a local file or empty directory (see local.delete_file_folder)."""
        delete_file_folder(path)
