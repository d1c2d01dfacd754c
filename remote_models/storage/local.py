"""Local filesystem primitives used while mirroring remote trees."""

from __future__ import annotations

import logging
import tempfile
from pathlib import Path

from .errors import LocalFileError

logger = logging.getLogger(__name__)

TEMP_PATH_PREFIX = "model_download_"


def create_local_dir(path: Path) -> None:
    """
    Create a single local directory. Existing directories are left alone.

    Raises:
        LocalFileError: If the directory cannot be created
    """
    try:
        path.mkdir(exist_ok=True)
    except OSError as e:
        raise LocalFileError(f"Failed to create directory {path}: {e}") from e


def create_temp_path(root: Path | None = None) -> Path:
    """
    Allocate a fresh, unique staging directory.

    Args:
        root: Parent directory (system temp dir if None)

    Raises:
        LocalFileError: If the directory cannot be created
    """
    try:
        path = Path(tempfile.mkdtemp(prefix=TEMP_PATH_PREFIX, dir=root))
    except OSError as e:
        raise LocalFileError(f"Failed to create a temporary path: {e}") from e
    logger.debug(f"Created staging path {path}")
    return path


def delete_file_folder(path: Path) -> None:
    """
    Remove a local file or empty directory.

    Raises:
        LocalFileError: If nothing was removed
    """
    logger.debug(f"Deleting local path {path}")
    try:
        if path.is_dir() and not path.is_symlink():
            path.rmdir()
        else:
            path.unlink()
    except OSError as e:
        logger.info(f"Unable to remove local path {path}: {e}")
        raise LocalFileError(f"Unable to remove local path {path}: {e}") from e
