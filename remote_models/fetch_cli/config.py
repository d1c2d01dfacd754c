"""
Fetch CLI configuration management.
"""

from __future__ import annotations

import argparse
import logging
import os
from pathlib import Path
from typing import Any

from remote_models.storage import CredentialSource, MirrorConfig, StoreConfig


def add_args(parser: argparse.ArgumentParser) -> None:
    """
    Add storage arguments to the parser.

    Arguments can be overridden by environment variables.
    """

    parser.add_argument(
        "--gcs.credentials",
        dest="credential_source",
        type=str,
        choices=[source.value for source in CredentialSource],
        help="Credential source for GCS.",
        default=os.environ.get("GCS_CREDENTIAL_SOURCE", "auto"),
    )

    parser.add_argument(
        "--gcs.key_file",
        dest="credentials_path",
        type=str,
        help="Service account key file (for --gcs.credentials service_account).",
        default=os.environ.get("GOOGLE_APPLICATION_CREDENTIALS", ""),
    )

    parser.add_argument(
        "--gcs.project",
        dest="project",
        type=str,
        help="GCP project to bill requests to.",
        default=os.environ.get("GCS_PROJECT", ""),
    )

    parser.add_argument(
        "--gcs.timeout",
        dest="timeout",
        type=float,
        help="Per-request timeout in seconds.",
        default=float(os.environ.get("GCS_TIMEOUT", "60")),
    )

    parser.add_argument(
        "--mirror.max_depth",
        dest="max_depth",
        type=int,
        help="Maximum directory nesting below a model version.",
        default=int(os.environ.get("MIRROR_MAX_DEPTH", "32")),
    )

    parser.add_argument(
        "--log_level",
        type=str,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level.",
        default=os.environ.get("LOG_LEVEL", "INFO"),
    )


def add_fetch_args(parser: argparse.ArgumentParser) -> None:
    """Add arguments specific to the fetch command."""

    parser.add_argument(
        "--staging_root",
        type=str,
        help="Directory in which staging paths are created.",
        default=os.environ.get("MODEL_STAGING_ROOT", ""),
    )

    parser.add_argument(
        "--retries",
        type=int,
        help="Attempts for the whole fetch before giving up.",
        default=int(os.environ.get("FETCH_RETRIES", "1")),
    )


def store_config(config: argparse.Namespace) -> StoreConfig:
    """Build StoreConfig from parsed arguments."""
    return StoreConfig(
        credential_source=CredentialSource(config.credential_source),
        credentials_path=(
            Path(config.credentials_path) if config.credentials_path else None
        ),
        project=config.project or None,
        timeout_seconds=config.timeout,
    )


def mirror_config(config: argparse.Namespace) -> MirrorConfig:
    """Build MirrorConfig from parsed arguments."""
    return MirrorConfig(max_depth=config.max_depth)


def check_config(config: argparse.Namespace) -> None:
    """
    Validate configuration.

    Raises:
        ValueError: If configuration is invalid.
    """
    if config.timeout <= 0:
        raise ValueError("--gcs.timeout must be positive (or set GCS_TIMEOUT env var)")

    if config.max_depth < 0:
        raise ValueError(
            "--mirror.max_depth must not be negative (or set MIRROR_MAX_DEPTH env var)"
        )

    if getattr(config, "retries", 1) < 1:
        raise ValueError("--retries must be at least 1 (or set FETCH_RETRIES env var)")

    if config.credential_source == "service_account" and not config.credentials_path:
        raise ValueError(
            "--gcs.key_file is required for service_account credentials "
            "(or set GOOGLE_APPLICATION_CREDENTIALS env var)"
        )


def config_to_dict(config: argparse.Namespace) -> dict[str, Any]:
    """Convert config to dictionary for logging."""
    return {
        "command": config.command,
        "credential_source": config.credential_source,
        "credentials_path": config.credentials_path,
        "project": config.project,
        "timeout": config.timeout,
        "max_depth": config.max_depth,
        "log_level": config.log_level,
    }


def setup_logging(level: str) -> None:
    """Configure logging."""
    logging.basicConfig(
        level=getattr(logging, level),
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )
