"""Custom exceptions for remote model storage."""

from .models import StatusCode


class StorageError(Exception):
    """Base exception for storage-related errors."""

    status: StatusCode = StatusCode.INVALID_ACCESS


# --- Path errors ---


class InvalidPathError(StorageError):
    """
    Raised when a path is not a gs:// URI.

    This can happen when:
    - A local path is passed to the remote filesystem
    - The scheme prefix is misspelled (e.g. "gcs://")
    """

    status = StatusCode.INVALID_PATH


class BucketNotFoundError(StorageError):
    """
    Raised when a URI has an empty bucket segment.

    This can happen when:
    - URI is just "gs://"
    - URI starts with "gs:///"
    """

    status = StatusCode.BUCKET_NOT_FOUND


# --- Remote errors ---


class RemoteFileNotFoundError(StorageError):
    """
    Raised when a remote object or directory does not exist.

    This can happen when:
    - Model version was never uploaded
    - Path points to a file where a directory is expected
    """

    status = StatusCode.FILE_NOT_FOUND


class RemoteFileInvalidError(StorageError):
    """
    Raised when a remote object cannot be read.

    This can happen when:
    - Read stream could not be opened
    - Connection dropped mid-download
    """

    status = StatusCode.FILE_INVALID


class InvalidAccessError(StorageError):
    """
    Raised when listing a remote prefix fails.

    This can happen when:
    - Credentials lack storage.objects.list permission
    - Transient network error while paging through results
    """

    status = StatusCode.INVALID_ACCESS


class ObjectStoreError(StorageError):
    """
    Raised by store clients when a request to the object store fails.

    Filesystem operations translate it into InvalidAccessError or
    RemoteFileInvalidError depending on where it happened.
    """

    status = StatusCode.INVALID_ACCESS


class MaxDepthExceededError(StorageError):
    """
    Raised when a directory tree is nested deeper than the mirror allows.

    This can happen when:
    - Remote prefix is unexpectedly deep
    - Keys with repeated separators produce runaway nesting
    """

    status = StatusCode.MAX_DEPTH_EXCEEDED


# --- Local errors ---


class LocalFileError(StorageError):
    """
    Raised when a local filesystem operation fails.

    This can happen when:
    - Staging directory cannot be created
    - Disk is full or read-only
    - Removing a local path fails
    """

    status = StatusCode.LOCAL_FILE_ERROR


# --- Construction errors ---


class CredentialsError(StorageError):
    """
    Raised when store credentials cannot be created.

    This can happen when:
    - GOOGLE_APPLICATION_CREDENTIALS points to a missing or invalid file
    - Service account source selected without a key file
    - No default credentials are available on this host
    """

    status = StatusCode.CREDENTIALS_ERROR
