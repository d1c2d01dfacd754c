"""Remote model storage: browse and download gs:// model trees as local directories."""

from .client import (
    CredentialSource,
    GCSStoreClient,
    ObjectStoreClient,
    StoreConfig,
    create_gcs_client,
    resolve_credential_source,
)
from .errors import (
    BucketNotFoundError,
    CredentialsError,
    InvalidAccessError,
    InvalidPathError,
    LocalFileError,
    MaxDepthExceededError,
    ObjectStoreError,
    RemoteFileInvalidError,
    RemoteFileNotFoundError,
    StorageError,
)
from .factory import create_filesystem
from .filesystem import ACCEPTED_FILES, GCSFileSystem, MirrorConfig
from .models import (
    GCS_URL_PREFIX,
    ModelVersionsDownload,
    ObjectMetadata,
    RemotePath,
    StatusCode,
    VersionDownloadResult,
)
from .paths import join_path, parse_path

__all__ = [
    # Factory (main entry point)
    "create_filesystem",
    # Errors
    "StorageError",
    "InvalidPathError",
    "BucketNotFoundError",
    "RemoteFileNotFoundError",
    "RemoteFileInvalidError",
    "InvalidAccessError",
    "ObjectStoreError",
    "MaxDepthExceededError",
    "LocalFileError",
    "CredentialsError",
    # Models
    "StatusCode",
    "RemotePath",
    "ObjectMetadata",
    "VersionDownloadResult",
    "ModelVersionsDownload",
    "GCS_URL_PREFIX",
    "ACCEPTED_FILES",
    # Config
    "StoreConfig",
    "CredentialSource",
    "MirrorConfig",
    # Components (for advanced usage/testing)
    "GCSFileSystem",
    "GCSStoreClient",
    "ObjectStoreClient",
    "create_gcs_client",
    "resolve_credential_source",
    "parse_path",
    "join_path",
]
