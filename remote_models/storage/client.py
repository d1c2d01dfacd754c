"""Object store access: client protocol, GCS adapter and credential resolution."""

from __future__ import annotations

import logging
import os
from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import BinaryIO, Protocol

import google.auth
from google.api_core.exceptions import GoogleAPIError, NotFound
from google.auth.exceptions import GoogleAuthError
from google.cloud import storage
from google.oauth2 import service_account

from .errors import CredentialsError, ObjectStoreError
from .models import ObjectMetadata

logger = logging.getLogger(__name__)

CREDENTIALS_ENV_VAR = "GOOGLE_APPLICATION_CREDENTIALS"


class ObjectStoreClient(Protocol):
    """
    Minimal object store capability used by the filesystem.

    Implementations raise ObjectStoreError on transport failures.
    """

    def get_object_metadata(self, bucket: str, key: str) -> ObjectMetadata | None:
        """Return object metadata, or None if no object has this exact key."""
        ...

    def list_objects(self, bucket: str, prefix: str) -> Iterator[ObjectMetadata]:
        """Lazily yield every object whose key starts with prefix."""
        ...

    def open_read(self, bucket: str, key: str) -> BinaryIO:
        """Open a binary read stream for an object."""
        ...


class CredentialSource(Enum):
    """Where GCS credentials come from."""

    AUTO = "auto"  # DEFAULT if GOOGLE_APPLICATION_CREDENTIALS is set, else ANONYMOUS
    DEFAULT = "default"  # google.auth application default credentials
    ANONYMOUS = "anonymous"  # public buckets only
    SERVICE_ACCOUNT = "service_account"  # explicit key file


@dataclass(frozen=True)
class StoreConfig:
    """Configuration for the GCS client."""

    credential_source: CredentialSource = CredentialSource.AUTO
    credentials_path: Path | None = None  # key file for SERVICE_ACCOUNT
    project: str | None = None
    timeout_seconds: float = 60.0  # per request


def resolve_credential_source(
    config: StoreConfig, environ: Mapping[str, str]
) -> CredentialSource:
    """
    Pick a concrete credential source for a config.

    Only `environ` is consulted, never the process environment.

    Raises:
        CredentialsError: If SERVICE_ACCOUNT is selected without a key file
    """
    source = config.credential_source
    if source is CredentialSource.AUTO:
        if environ.get(CREDENTIALS_ENV_VAR):
            return CredentialSource.DEFAULT
        return CredentialSource.ANONYMOUS
    if source is CredentialSource.SERVICE_ACCOUNT and config.credentials_path is None:
        raise CredentialsError("Service account credentials require a key file path")
    return source


def create_gcs_client(
    config: StoreConfig, environ: Mapping[str, str] | None = None
) -> storage.Client:
    """
    Build a google-cloud-storage client from explicit configuration.

    Args:
        config: Store configuration
        environ: Environment used to resolve CredentialSource.AUTO
            (defaults to os.environ)

    Raises:
        CredentialsError: If credentials cannot be created
    """
    source = resolve_credential_source(
        config, os.environ if environ is None else environ
    )
    logger.debug(f"Creating GCS client with {source.value} credentials")

    try:
        if source is CredentialSource.ANONYMOUS:
            return storage.Client.create_anonymous_client()

        if source is CredentialSource.SERVICE_ACCOUNT:
            credentials = service_account.Credentials.from_service_account_file(
                str(config.credentials_path)
            )
            project = config.project or credentials.project_id
            return storage.Client(project=project, credentials=credentials)

        credentials, default_project = google.auth.default()
        return storage.Client(
            project=config.project or default_project, credentials=credentials
        )
    except (GoogleAuthError, OSError, ValueError) as e:
        logger.error(f"Unable to create {source.value} GCS credentials: {e}")
        raise CredentialsError(
            f"Unable to create {source.value} GCS credentials: {e}"
        ) from e


class _GCSReadStream:
    """Blob reader that reports SDK failures as ObjectStoreError."""

    def __init__(self, reader: BinaryIO, uri: str):
        self._reader = reader
        self._uri = uri

    def read(self, size: int = -1) -> bytes:
        try:
            return self._reader.read(size)
        except GoogleAPIError as e:
            raise ObjectStoreError(f"Failed to read {self._uri}: {e}") from e

    def close(self) -> None:
        self._reader.close()

    def __enter__(self) -> _GCSReadStream:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


class GCSStoreClient:
    """
    ObjectStoreClient backed by google-cloud-storage.

    Holds a single storage.Client for its lifetime. The SDK client may be
    shared across threads; this wrapper adds no state of its own.
    """

    def __init__(self, client: storage.Client, timeout_seconds: float = 60.0):
        """
        Initialize the adapter.

        Args:
            client: google-cloud-storage client
            timeout_seconds: Timeout applied to every request
        """
        self._client = client
        self._timeout = timeout_seconds

    def get_object_metadata(self, bucket: str, key: str) -> ObjectMetadata | None:
        if not key:
            return None
        try:
            blob = self._client.bucket(bucket).get_blob(key, timeout=self._timeout)
        except NotFound:
            return None
        except GoogleAPIError as e:
            raise ObjectStoreError(
                f"Failed to get metadata for gs://{bucket}/{key}: {e}"
            ) from e
        if blob is None:
            return None
        return ObjectMetadata(name=blob.name, size=blob.size, updated=blob.updated)

    def list_objects(self, bucket: str, prefix: str) -> Iterator[ObjectMetadata]:
        try:
            for blob in self._client.list_blobs(
                bucket, prefix=prefix or None, timeout=self._timeout
            ):
                yield ObjectMetadata(
                    name=blob.name, size=blob.size, updated=blob.updated
                )
        except GoogleAPIError as e:
            raise ObjectStoreError(
                f"Failed to list gs://{bucket}/{prefix}: {e}"
            ) from e

    def open_read(self, bucket: str, key: str) -> BinaryIO:
        uri = f"gs://{bucket}/{key}"
        try:
            reader = self._client.bucket(bucket).blob(key).open(
                "rb", timeout=self._timeout
            )
        except GoogleAPIError as e:
            raise ObjectStoreError(f"Failed to open {uri}: {e}") from e
        return _GCSReadStream(reader, uri)  # type: ignore[return-value]
