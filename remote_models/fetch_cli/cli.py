"""
Remote models CLI - browse gs:// model repositories and fetch model versions.

Usage:
    remote-models ls gs://bucket/models/resnet
    remote-models exists gs://bucket/models/resnet/1/model.bin
    remote-models --gcs.credentials default \\
        fetch gs://bucket/models/resnet --versions 1 2 --retries 3
"""

from __future__ import annotations

import argparse
import logging
import shutil
import sys
from pathlib import Path

from dotenv import load_dotenv
from tenacity import (
    RetryCallState,
    Retrying,
    retry_if_result,
    stop_after_attempt,
    wait_exponential_jitter,
)

from remote_models.storage import (
    GCSFileSystem,
    ModelVersionsDownload,
    StorageError,
    create_filesystem,
)

from .config import (
    add_args,
    add_fetch_args,
    check_config,
    config_to_dict,
    mirror_config,
    setup_logging,
    store_config,
)

logger = logging.getLogger(__name__)

# Backoff between whole-fetch attempts
RETRY_WAIT = wait_exponential_jitter(initial=1, max=30)


def _discard_staging(retry_state: RetryCallState) -> None:
    """Remove the staging tree of a failed attempt before retrying."""
    if retry_state.outcome is None or retry_state.outcome.failed:
        return
    download: ModelVersionsDownload = retry_state.outcome.result()
    print(
        f"Attempt {retry_state.attempt_number} failed "
        f"(versions {download.failed_versions}), retrying...",
        file=sys.stderr,
    )
    shutil.rmtree(download.local_path, ignore_errors=True)


def fetch_with_retry(
    fs: GCSFileSystem, path: str, versions: list[int], attempts: int
) -> ModelVersionsDownload:
    """
    Fetch model versions, retrying the whole fetch while any version fails.

    Only the staging path of the last attempt is kept.
    """
    retrying = Retrying(
        stop=stop_after_attempt(attempts),
        wait=RETRY_WAIT,
        retry=retry_if_result(lambda download: not download.success),
        before_sleep=_discard_staging,
        retry_error_callback=lambda state: state.outcome.result(),
        reraise=True,
    )
    return retrying(fs.download_model_versions, path, versions)


def cmd_fetch(args: argparse.Namespace, fs: GCSFileSystem) -> int:
    """Execute the fetch command."""
    print(f"Fetching versions {args.versions} of {args.path}")
    print()

    download = fetch_with_retry(fs, args.path, args.versions, args.retries)

    for result in download.results:
        if result.success:
            print(f"  ✓ {result.version}: {result.local_path}")
        else:
            print(f"  ✗ {result.version}: {result.error_message}", file=sys.stderr)
    print()
    print(f"Staging path: {download.local_path}")

    if not download.success:
        print(
            f"ERROR: Fetch finished with status {download.status.value}",
            file=sys.stderr,
        )
        return 1
    return 0


def cmd_ls(args: argparse.Namespace, fs: GCSFileSystem) -> int:
    """Execute the ls command."""
    if not fs.is_directory(args.path):
        print(f"ERROR: Not a directory: {args.path}", file=sys.stderr)
        return 1

    for name in sorted(fs.get_directory_subdirs(args.path)):
        print(f"{name}/")
    for name in sorted(fs.get_directory_files(args.path)):
        print(name)
    return 0


def cmd_exists(args: argparse.Namespace, fs: GCSFileSystem) -> int:
    """Execute the exists command."""
    if not fs.file_exists(args.path):
        print(f"{args.path}: does not exist")
        return 1

    kind = "directory" if fs.is_directory(args.path) else "file"
    print(f"{args.path}: {kind}")
    return 0


def _staging_root(config: argparse.Namespace) -> Path | None:
    staging_root = getattr(config, "staging_root", "")
    return Path(staging_root) if staging_root else None


def parse_args(args: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        prog="remote-models",
        description="Browse gs:// model repositories and fetch model versions",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    add_args(parser)

    subparsers = parser.add_subparsers(
        dest="command",
        required=True,
        help="Command to execute",
    )

    # ─────────────────────────────────────────────────────────────────────────
    # FETCH command
    # ─────────────────────────────────────────────────────────────────────────
    fetch_parser = subparsers.add_parser(
        "fetch",
        help="Download model versions into a staging directory",
        description="Mirror gs://.../<model>/<version>/ trees to local disk.",
    )
    fetch_parser.add_argument("path", metavar="URI", help="Model root, gs://bucket/model")
    fetch_parser.add_argument(
        "--versions",
        type=int,
        nargs="+",
        required=True,
        metavar="N",
        help="Model versions to fetch",
    )
    add_fetch_args(fetch_parser)

    # ─────────────────────────────────────────────────────────────────────────
    # LS command
    # ─────────────────────────────────────────────────────────────────────────
    ls_parser = subparsers.add_parser(
        "ls",
        help="List a remote directory",
        description="Print subdirectories (with trailing /) then files.",
    )
    ls_parser.add_argument("path", metavar="URI", help="Directory, gs://bucket/prefix")

    # ─────────────────────────────────────────────────────────────────────────
    # EXISTS command
    # ─────────────────────────────────────────────────────────────────────────
    exists_parser = subparsers.add_parser(
        "exists",
        help="Check whether a remote path exists",
    )
    exists_parser.add_argument("path", metavar="URI", help="gs:// path")

    return parser.parse_args(args)


def main(args: list[str] | None = None) -> int:
    """CLI entry point."""
    load_dotenv()
    config = parse_args(args)
    setup_logging(config.log_level)

    try:
        check_config(config)
    except ValueError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 2

    logger.debug(f"Config: {config_to_dict(config)}")

    try:
        fs = create_filesystem(
            store_config=store_config(config),
            mirror_config=mirror_config(config),
            staging_root=_staging_root(config),
        )

        if config.command == "fetch":
            return cmd_fetch(config, fs)
        elif config.command == "ls":
            return cmd_ls(config, fs)
        elif config.command == "exists":
            return cmd_exists(config, fs)
        else:
            print(f"ERROR: Unknown command: {config.command}", file=sys.stderr)
            return 2

    except StorageError as e:
        print(f"ERROR: [{e.status.value}] {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("\nInterrupted")
        return 130


if __name__ == "__main__":
    sys.exit(main())
