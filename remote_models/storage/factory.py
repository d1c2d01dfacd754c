"""Factory for creating a GCS filesystem with all dependencies."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from functools import partial
from pathlib import Path

from .client import GCSStoreClient, StoreConfig, create_gcs_client
from .filesystem import GCSFileSystem, MirrorConfig
from .local import create_temp_path

logger = logging.getLogger(__name__)


def create_filesystem(
    store_config: StoreConfig | None = None,
    mirror_config: MirrorConfig | None = None,
    staging_root: Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> GCSFileSystem:
    """
    Create a fully configured GCSFileSystem.

    This is the main entry point for the storage module.

    Args:
        store_config: Credentials and request settings (defaults if None)
        mirror_config: Accepted files and depth limit (defaults if None)
        staging_root: Parent directory for version staging paths
            (system temp dir if None)
        environ: Environment used to resolve CredentialSource.AUTO
            (defaults to os.environ)

    Returns:
        GCSFileSystem ready to use

    Raises:
        CredentialsError: If the GCS client cannot be created

    Example:
        fs = create_filesystem(StoreConfig(credential_source=CredentialSource.ANONYMOUS))
        download = fs.download_model_versions("gs://bucket/models/resnet", [1, 2])
    """
    store_config = store_config or StoreConfig()
    client = create_gcs_client(store_config, environ)

    temp_path_factory = partial(create_temp_path, staging_root)

    logger.info("GCS filesystem created")
    return GCSFileSystem(
        client=GCSStoreClient(client, timeout_seconds=store_config.timeout_seconds),
        config=mirror_config,
        temp_path_factory=temp_path_factory,
    )
