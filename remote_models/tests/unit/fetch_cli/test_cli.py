"""Unit tests for the remote models CLI."""

from __future__ import annotations

from functools import partial
from pathlib import Path
from unittest.mock import patch

import pytest
from tenacity import wait_none

from remote_models.fetch_cli import cli
from remote_models.fetch_cli.cli import fetch_with_retry, main, parse_args
from remote_models.storage import (
    CredentialsError,
    CredentialSource,
    GCSFileSystem,
    MirrorConfig,
)
from remote_models.storage.local import create_temp_path


@pytest.fixture
def cli_fs(store, tmp_path: Path) -> GCSFileSystem:
    """Filesystem with unique staging paths under tmp_path."""
    return GCSFileSystem(
        store,
        config=MirrorConfig(accepted_files=(".bin",)),
        temp_path_factory=partial(create_temp_path, tmp_path),
    )


@pytest.fixture
def patched_factory(cli_fs: GCSFileSystem):
    with patch.object(cli, "create_filesystem", return_value=cli_fs) as factory:
        yield factory


@pytest.fixture(autouse=True)
def fast_cli(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(cli, "RETRY_WAIT", wait_none())
    monkeypatch.setattr(cli, "setup_logging", lambda level: None)


class TestParseArgs:
    """Tests for argument parsing."""

    def test_fetch_arguments(self) -> None:
        config = parse_args(
            [
                "--gcs.credentials",
                "anonymous",
                "fetch",
                "gs://m/resnet",
                "--versions",
                "1",
                "2",
            ]
        )

        assert config.command == "fetch"
        assert config.path == "gs://m/resnet"
        assert config.versions == [1, 2]
        assert config.credential_source == "anonymous"
        assert config.retries == 1

    def test_defaults_from_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("GCS_CREDENTIAL_SOURCE", "default")
        monkeypatch.setenv("MIRROR_MAX_DEPTH", "5")
        monkeypatch.setenv("FETCH_RETRIES", "4")

        config = parse_args(["fetch", "gs://m/resnet", "--versions", "1"])

        assert config.credential_source == "default"
        assert config.max_depth == 5
        assert config.retries == 4

    def test_versions_required(self) -> None:
        with pytest.raises(SystemExit):
            parse_args(["fetch", "gs://m/resnet"])

    def test_unknown_credential_source_rejected(self) -> None:
        with pytest.raises(SystemExit):
            parse_args(["--gcs.credentials", "magic", "ls", "gs://m"])


class TestFetchCommand:
    """Tests for the fetch command."""

    def test_fetch_success(self, store, patched_factory, capsys) -> None:
        store.put("resnet/1/model.bin", b"w")

        exit_code = main(["fetch", "gs://models/resnet", "--versions", "1"])

        out = capsys.readouterr().out
        assert exit_code == 0
        assert "Staging path:" in out
        staging = Path(out.split("Staging path: ")[1].strip())
        assert (staging / "1" / "model.bin").read_bytes() == b"w"

    def test_fetch_partial_failure(self, store, patched_factory, capsys) -> None:
        store.put("resnet/1/model.bin", b"w")

        exit_code = main(["fetch", "gs://models/resnet", "--versions", "1", "2"])

        captured = capsys.readouterr()
        assert exit_code == 1
        assert "2: RemoteFileNotFoundError" in captured.err
        assert "file_not_found" in captured.err

    def test_passes_configuration_to_factory(
        self, store, patched_factory, tmp_path: Path
    ) -> None:
        main(
            [
                "--gcs.credentials",
                "anonymous",
                "--mirror.max_depth",
                "3",
                "fetch",
                "gs://models/resnet",
                "--versions",
                "1",
                "--staging_root",
                str(tmp_path),
            ]
        )

        kwargs = patched_factory.call_args.kwargs
        assert kwargs["store_config"].credential_source is CredentialSource.ANONYMOUS
        assert kwargs["mirror_config"].max_depth == 3
        assert kwargs["staging_root"] == tmp_path

    def test_credentials_error(self, capsys) -> None:
        with patch.object(
            cli, "create_filesystem", side_effect=CredentialsError("no key")
        ):
            exit_code = main(["ls", "gs://models"])

        assert exit_code == 1
        assert "[credentials_error] no key" in capsys.readouterr().err

    def test_invalid_config_exits_with_usage_error(self, capsys) -> None:
        exit_code = main(
            ["fetch", "gs://models/resnet", "--versions", "1", "--retries", "0"]
        )

        assert exit_code == 2
        assert "--retries" in capsys.readouterr().err

    def test_service_account_without_key_file(
        self, monkeypatch: pytest.MonkeyPatch, capsys
    ) -> None:
        monkeypatch.delenv("GOOGLE_APPLICATION_CREDENTIALS", raising=False)

        exit_code = main(["--gcs.credentials", "service_account", "ls", "gs://models"])

        assert exit_code == 2


class TestFetchWithRetry:
    """Tests for fetch_with_retry."""

    def test_single_attempt_returns_failure(self, store, cli_fs: GCSFileSystem) -> None:
        download = fetch_with_retry(cli_fs, "gs://models/resnet", [1], attempts=1)

        assert download.success is False
        assert download.local_path.is_dir()

    def test_retries_until_success(self, store, cli_fs: GCSFileSystem) -> None:
        store.put("resnet/1/model.bin", b"one")
        original = cli_fs.download_model_versions
        attempts: list = []

        def flaky(path, versions):
            result = original(path, versions)
            attempts.append(result)
            store.put("resnet/2/model.bin", b"two")
            return result

        with patch.object(cli_fs, "download_model_versions", side_effect=flaky):
            download = fetch_with_retry(cli_fs, "gs://models/resnet", [1, 2], attempts=3)

        assert download.success is True
        assert len(attempts) == 2
        assert not attempts[0].local_path.exists()
        assert (download.local_path / "2" / "model.bin").read_bytes() == b"two"

    def test_keeps_last_staging_when_attempts_exhausted(
        self, store, cli_fs: GCSFileSystem
    ) -> None:
        original = cli_fs.download_model_versions
        attempts: list = []

        def recording(path, versions):
            result = original(path, versions)
            attempts.append(result)
            return result

        with patch.object(cli_fs, "download_model_versions", side_effect=recording):
            download = fetch_with_retry(cli_fs, "gs://models/resnet", [1], attempts=2)

        assert download.success is False
        assert len(attempts) == 2
        assert not attempts[0].local_path.exists()
        assert download.local_path.exists()


class TestLsAndExists:
    """Tests for the ls and exists commands."""

    def test_ls_lists_dirs_then_files(self, store, patched_factory, capsys) -> None:
        store.put("resnet/2/model.bin")
        store.put("resnet/1/model.bin")
        store.put("resnet/README.md")

        exit_code = main(["ls", "gs://models/resnet"])

        assert exit_code == 0
        assert capsys.readouterr().out.splitlines() == ["1/", "2/", "README.md"]

    def test_ls_missing_directory(self, patched_factory, capsys) -> None:
        exit_code = main(["ls", "gs://models/missing"])

        assert exit_code == 1
        assert "Not a directory" in capsys.readouterr().err

    def test_exists_file(self, store, patched_factory, capsys) -> None:
        store.put("resnet/1/model.bin")

        exit_code = main(["exists", "gs://models/resnet/1/model.bin"])

        assert exit_code == 0
        assert capsys.readouterr().out.strip().endswith(": file")

    def test_exists_directory(self, store, patched_factory, capsys) -> None:
        store.put("resnet/1/model.bin")

        exit_code = main(["exists", "gs://models/resnet"])

        assert exit_code == 0
        assert capsys.readouterr().out.strip().endswith(": directory")

    def test_exists_missing(self, patched_factory, capsys) -> None:
        exit_code = main(["exists", "gs://models/missing"])

        assert exit_code == 1
        assert "does not exist" in capsys.readouterr().out

    def test_invalid_uri(self, patched_factory, capsys) -> None:
        exit_code = main(["exists", "/tmp/model.bin"])

        assert exit_code == 1
        assert "[invalid_path]" in capsys.readouterr().err
