"""Unit tests for CLI commands."""

import json
from unittest.mock import MagicMock, patch

import pytest
from typer.testing import CliRunner

from cloudbackup import __version__
from cloudbackup.cli.client import CliState
from cloudbackup.cli.main import app

runner = CliRunner()

CREDENTIALS = ["--host", "backups.example.com", "--access-key", "AKIACLI", "--secret-key", "clisecretkey"]

SERVER_BODY = {
    "id": 7,
    "name": "db1",
    "dbTypeId": 1,
    "readonly": False,
    "dbHost": "localhost",
    "dbPort": "3306",
    "dbUser": "backup",
    "dbPass": "hunter2pass",
}

STORAGE_BODY = {
    "id": 4,
    "name": "disk",
    "storageType": 1,
    "localPath": "/data/backups",
    "bucket": "",
    "storage-access-key": "",
    "storage-secret-key": "",
    "region-endpoint": "",
}


@pytest.fixture
def invoke(mock_transport):
    """Run the CLI against the fake service with credentials on the command line."""

    def _invoke(*args: str, credentials: bool = True):
        argv = [*CREDENTIALS, *args] if credentials else list(args)
        return runner.invoke(app, argv, obj=CliState(transport=mock_transport))

    return _invoke


def sent_json(service, index: int = -1) -> dict:
    return json.loads(service.requests[index].content)


class TestMainApp:
    """Tests for main app options."""

    def test_help(self):
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        for group in ("server", "schedule", "retention", "storage", "backup", "system"):
            assert group in result.output

    def test_verbose_flag(self, invoke):
        result = invoke("-v", "system", "version")
        assert result.exit_code == 0

    def test_debug_flag(self, invoke):
        result = invoke("--debug", "system", "version")
        assert result.exit_code == 0

    def test_credentials_from_environment(self, invoke, service, monkeypatch):
        monkeypatch.setenv("BL_HOST", "backups.example.com")
        monkeypatch.setenv("BL_ACCESS_KEY", "AKIAENV")
        monkeypatch.setenv("BL_SECRET_KEY", "envsecretkey")
        service.reply(200, SERVER_BODY)

        result = invoke("server", "info", "--server-id", "7", credentials=False)

        assert result.exit_code == 0
        assert service.last.headers["bl-access-key"] == "AKIAENV"

    def test_credentials_from_config_file(self, invoke, service, tmp_path):
        config = tmp_path / "cli.yaml"
        config.write_text("host: backups.example.com\naccess_key: AKIAFILE\nsecret_key: filesecret\n")
        service.reply(200, SERVER_BODY)

        result = invoke("--config", str(config), "server", "info", "--server-id", "7", credentials=False)

        assert result.exit_code == 0
        assert service.last.headers["bl-access-key"] == "AKIAFILE"

    def test_missing_host_is_reported(self, invoke, service):
        result = invoke("server", "info", "--server-id", "7", credentials=False)

        assert result.exit_code == 1
        assert "API Host cannot be empty" in result.output
        assert service.requests == []

    def test_missing_config_file_is_reported(self, invoke, tmp_path):
        result = invoke("--config", str(tmp_path / "missing.yaml"), "server", "info", "--server-id", "7")

        assert result.exit_code == 1
        assert "Configuration file not found" in result.output


# =============================================================================
# server
# =============================================================================


class TestServerCommands:
    """Tests for server commands."""

    def test_new(self, invoke, service):
        service.reply(200, {"status": "ok", "id": 42})

        result = invoke(
            "server", "new", "--name", "db1", "--db-type", "MariaDB", "--db-port", "3306",
            "--db-user", "backup", "--db-pass", "hunter2pass",
        )

        assert result.exit_code == 0
        assert "Server created successfully" in result.output
        assert "ID: 42" in result.output
        assert "hunter2pass" not in result.output
        assert sent_json(service) == {
            "id": 0,
            "name": "db1",
            "dbTypeId": 1,
            "readonly": False,
            "dbHost": "localhost",
            "dbPort": "3306",
            "dbUser": "backup",
            "dbPass": "hunter2pass",
        }

    def test_new_json_output(self, invoke, service):
        service.reply(200, {"status": "ok", "id": 42})

        result = invoke(
            "server", "new", "--name", "db1", "--db-type", "mysql", "--db-port", "3306",
            "--db-pass", "hunter2pass", "--json",
        )

        assert result.exit_code == 0
        assert '"id": 42' in result.output
        assert '"dbPass": "****pass"' in result.output

    def test_new_unknown_db_type(self, invoke, service):
        result = invoke("server", "new", "--name", "db1", "--db-type", "oracle", "--db-port", "1521")

        assert result.exit_code == 1
        assert "Database type oracle not recognized" in result.output
        assert service.requests == []

    def test_new_non_finite_id_is_reported(self, invoke, service):
        service.reply(200, content=b'{"status": "ok", "id": NaN}')

        result = invoke("server", "new", "--name", "db1", "--db-type", "mysql", "--db-port", "3306")

        assert result.exit_code == 1
        assert "Missing ID from server response" in result.output
        assert result.exception is None or isinstance(result.exception, SystemExit)

    def test_new_missing_required_option(self, invoke, service):
        result = invoke("server", "new", "--name", "db1", "--db-type", "mysql")

        assert result.exit_code != 0
        assert service.requests == []

    def test_info(self, invoke, service):
        service.reply(200, SERVER_BODY)

        result = invoke("server", "info", "--server-id", "7")

        assert result.exit_code == 0
        assert "Name: db1" in result.output
        assert "DB Type: MySQL" in result.output
        assert "DB Pass: ****pass" in result.output

    def test_info_not_found(self, invoke, service):
        service.reply(404, {"status": "error", "message": "not found"})

        result = invoke("server", "info", "--server-id", "7")

        assert result.exit_code == 1
        assert "Error: not found, while getting server 7" in result.output

    def test_info_invalid_id(self, invoke, service):
        result = invoke("server", "info", "--server-id", "0")

        assert result.exit_code == 1
        assert "Invalid ID 0 for server" in result.output
        assert service.requests == []

    def test_update_changes_only_given_fields(self, invoke, service):
        service.reply(200, SERVER_BODY)
        service.reply(200, {"status": "ok"})

        result = invoke("server", "update", "--server-id", "7", "--db-port", "3307", "--readonly")

        assert result.exit_code == 0
        assert "Server updated successfully" in result.output
        assert [r.method for r in service.requests] == ["GET", "POST"]
        assert sent_json(service) == {**SERVER_BODY, "dbPort": "3307", "readonly": True}

    def test_update_rejects_db_type_change(self, invoke, service):
        service.reply(200, SERVER_BODY)

        result = invoke("server", "update", "--server-id", "7", "--db-type", "postgresql")

        assert result.exit_code == 1
        assert "Can't change db_type from MySQL to PostgreSQL" in result.output
        assert len(service.requests) == 1

    def test_delete(self, invoke, service):
        service.reply(200, {"status": "ok"})

        result = invoke("server", "delete", "--server-id", "7")

        assert result.exit_code == 0
        assert "Server deleted successfully" in result.output
        assert service.last.method == "DELETE"

    def test_install_dry_run_prints_script(self, invoke, service):
        service.reply(200, content=b"#!/bin/bash\necho installing agent\n")

        result = invoke("server", "install", "--server-id", "12", "--dry-run")

        assert result.exit_code == 0
        assert "echo installing agent" in result.output
        assert str(service.last.url).endswith("/servers/12/install")

    def test_install_requires_root(self, invoke, service, monkeypatch):
        service.reply(200, content=b"#!/bin/bash\n")
        monkeypatch.setattr("cloudbackup.cli.commands.server.os.geteuid", lambda: 1000)
        monkeypatch.setattr("cloudbackup.cli.commands.server.os.getegid", lambda: 1000)

        with patch("cloudbackup.cli.commands.server.subprocess.run") as mock_run:
            result = invoke("server", "install", "--server-id", "12")

        assert result.exit_code == 1
        assert "You need root privileges" in result.output
        mock_run.assert_not_called()

    def test_install_pipes_script_into_bash(self, invoke, service, monkeypatch):
        script = b"#!/bin/bash\necho installing agent\n"
        service.reply(200, content=script)
        monkeypatch.setattr("cloudbackup.cli.commands.server.os.geteuid", lambda: 0)
        monkeypatch.setattr("cloudbackup.cli.commands.server.os.getegid", lambda: 0)

        with patch("cloudbackup.cli.commands.server.subprocess.run",
                   return_value=MagicMock(returncode=0)) as mock_run:
            result = invoke("server", "install", "--server-id", "12")

        assert result.exit_code == 0
        mock_run.assert_called_once_with(["bash"], input=script, check=False)

    def test_install_script_failure(self, invoke, service, monkeypatch):
        service.reply(200, content=b"exit 3\n")
        monkeypatch.setattr("cloudbackup.cli.commands.server.os.geteuid", lambda: 0)
        monkeypatch.setattr("cloudbackup.cli.commands.server.os.getegid", lambda: 0)

        with patch("cloudbackup.cli.commands.server.subprocess.run", return_value=MagicMock(returncode=3)):
            result = invoke("server", "install", "--server-id", "12")

        assert result.exit_code == 1
        assert "exit code: 3" in result.output


# =============================================================================
# schedule / retention / storage
# =============================================================================


class TestScheduleCommands:
    """Tests for schedule commands."""

    def test_new(self, invoke, service):
        service.reply(200, {"status": "ok", "id": 3})

        result = invoke("schedule", "new", "--name", "nightly", "--schedule-type", "Daily", "--hours", "03:00")

        assert result.exit_code == 0
        assert "Schedule Type: Daily" in result.output
        assert sent_json(service)["scheduleType"] == 3
        assert sent_json(service)["scheduleHours"] == "03:00"
        assert str(service.last.url).endswith("/api/schedules")

    def test_new_unknown_type(self, invoke, service):
        result = invoke("schedule", "new", "--name", "n", "--schedule-type", "yearly")

        assert result.exit_code == 1
        assert "Schedule type yearly not recognized" in result.output

    def test_update_type(self, invoke, service):
        service.reply(200, {"id": 3, "name": "nightly", "scheduleType": 3, "scheduleHours": "03:00"})
        service.reply(200, {"status": "ok"})

        result = invoke("schedule", "update", "--schedule-id", "3", "--schedule-type", "weekly", "--days", "1,3")

        assert result.exit_code == 0
        assert sent_json(service)["scheduleType"] == 4
        assert sent_json(service)["scheduleDays"] == "1,3"
        assert sent_json(service)["scheduleHours"] == "03:00"

    def test_info_json(self, invoke, service):
        service.reply(200, {"id": 3, "name": "nightly", "scheduleType": 1})

        result = invoke("schedule", "info", "--schedule-id", "3", "--json")

        assert result.exit_code == 0
        assert '"scheduleType": 1' in result.output


class TestRetentionCommands:
    """Tests for retention commands."""

    def test_new(self, invoke, service):
        service.reply(200, {"status": "ok", "id": 5})

        result = invoke("retention", "new", "--name", "week", "--retention-type", "bydays", "--count", "7")

        assert result.exit_code == 0
        assert "Retention created successfully" in result.output
        assert sent_json(service)["retentionType"] == 1
        assert sent_json(service)["count"] == 7

    def test_new_zero_count(self, invoke, service):
        result = invoke("retention", "new", "--name", "week", "--retention-type", "bydays", "--count", "0")

        assert result.exit_code == 1
        assert "Retention count cannot be <= 0" in result.output
        assert service.requests == []

    def test_delete_remote_error(self, invoke, service):
        service.reply(200, {"status": "error", "message": "retention in use"})

        result = invoke("retention", "delete", "--retention-id", "5")

        assert result.exit_code == 1
        assert "retention in use, while deleting retention 5" in result.output


class TestStorageCommands:
    """Tests for storage commands."""

    def test_new_local(self, invoke, service):
        service.reply(200, {"status": "ok", "id": 4})

        result = invoke("storage", "new", "--name", "disk", "--storage-type", "local", "--path", "/data/backups")

        assert result.exit_code == 0
        assert "Path: /data/backups" in result.output
        assert sent_json(service)["localPath"] == "/data/backups"

    def test_new_cloud_masks_secret(self, invoke, service):
        service.reply(200, {"status": "ok", "id": 8})

        result = invoke(
            "storage", "new", "--name", "bucket", "--storage-type", "s3",
            "--bucket", "my-backups", "--storage-access-key", "AKIAS3",
            "--storage-secret-key", "s3secretvalue", "--region-endpoint", "s3.amazonaws.com",
        )

        assert result.exit_code == 0
        assert "s3secretvalue" not in result.output
        assert sent_json(service)["storage-secret-key"] == "s3secretvalue"

    def test_new_cloud_without_bucket(self, invoke, service):
        result = invoke("storage", "new", "--name", "bucket", "--storage-type", "google")

        assert result.exit_code == 1
        assert "Storage bucket cannot be empty" in result.output

    def test_update_rejects_type_change(self, invoke, service):
        service.reply(200, STORAGE_BODY)

        result = invoke(
            "storage", "update", "--storage-id", "4", "--storage-type", "s3",
            "--bucket", "b", "--storage-access-key", "a", "--storage-secret-key", "s",
            "--region-endpoint", "r",
        )

        assert result.exit_code == 1
        assert "Can't change storage_type" in result.output
        assert len(service.requests) == 1

    def test_update_path(self, invoke, service):
        service.reply(200, STORAGE_BODY)
        service.reply(200, {"status": "ok"})

        result = invoke("storage", "update", "--storage-id", "4", "--path", "/mnt/backups")

        assert result.exit_code == 0
        assert sent_json(service)["localPath"] == "/mnt/backups"


# =============================================================================
# backup / system
# =============================================================================


class TestBackupCommands:
    """Tests for backup commands."""

    def test_keys(self, invoke, service):
        service.reply(200, content=b'[{"backupId": 1, "key": "abc"}]')

        result = invoke("backup", "keys")

        assert result.exit_code == 0
        assert '[{"backupId": 1, "key": "abc"}]' in result.output
        assert str(service.last.url).endswith("/api/backups/keys")


class TestSystemCommands:
    """Tests for system commands."""

    def test_system_version(self, invoke):
        result = invoke("system", "version", credentials=False)
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_version_works_with_broken_config(self, invoke, tmp_path):
        result = invoke("--config", str(tmp_path / "missing.yaml"), "system", "version")
        assert result.exit_code == 0

    def test_system_config_masks_secret(self, invoke):
        result = invoke("system", "config")

        assert result.exit_code == 0
        assert "backups.example.com" in result.output
        assert "clisecretkey" not in result.output
        assert "****tkey" in result.output

    def test_system_config_section(self, invoke):
        result = invoke("system", "config", "logging")

        assert result.exit_code == 0
        assert "level" in result.output
        assert "host" not in result.output

    def test_system_config_unknown_section(self, invoke):
        result = invoke("system", "config", "database")

        assert result.exit_code == 1
        assert "Unknown section: database" in result.output
