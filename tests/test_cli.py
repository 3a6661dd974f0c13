"""
Tests for the todosync CLI.

Commands run through Typer's CliRunner against a real git storage root
selected with TODOSYNC_STORAGE_PATH.
"""

import json

import pytest
from typer.testing import CliRunner

from helpers import history
from todosync import __version__
from todosync.cli import app
from todosync.cli.errors import ExitCode

runner = CliRunner()


@pytest.fixture
def storage(tmp_path, monkeypatch):
    """Point the CLI at a storage root and run from an empty directory."""
    workdir = tmp_path / "work"
    workdir.mkdir()
    monkeypatch.chdir(workdir)

    root = tmp_path / "todos"
    monkeypatch.setenv("TODOSYNC_STORAGE_PATH", str(root))
    return root


class TestTopLevel:
    def test_version(self):
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_config_shows_effective_values(self, storage):
        result = runner.invoke(app, ["config"])

        assert result.exit_code == 0
        assert '"backend": "git"' in result.output
        assert '"remote"' in result.output

    def test_invalid_config(self, storage, monkeypatch):
        """Test that a bad configuration is reported before any command runs."""
        monkeypatch.setenv("TODOSYNC_BACKEND", "svn")

        result = runner.invoke(app, ["whoami"])

        assert result.exit_code == ExitCode.USER_ERROR
        assert "Invalid configuration" in result.output

    def test_explicit_config_file(self, storage, tmp_path):
        config_path = tmp_path / "alt.json"
        config_path.write_text(json.dumps({"git": {"default_branch": "trunk"}}))

        result = runner.invoke(app, ["--config", str(config_path), "config"])

        assert result.exit_code == 0
        assert '"default_branch": "trunk"' in result.output


class TestInitCommand:
    def test_init_creates_repository(self, storage):
        result = runner.invoke(app, ["init"])

        assert result.exit_code == 0, result.output
        assert "repository initialized" in result.output
        assert (storage / "INIT").is_file()
        assert history(storage) == ["Initial commit"]

    def test_init_twice(self, storage):
        runner.invoke(app, ["init"])

        result = runner.invoke(app, ["init"])

        assert result.exit_code == 0
        assert "already initialized" in result.output
        assert history(storage) == ["Initial commit"]


class TestCommitCommand:
    def test_commit_and_noop(self, storage):
        """Test a commit followed by the same commit with nothing changed."""
        runner.invoke(app, ["init"])
        (storage / "p1").mkdir()
        (storage / "p1" / "t1.json").write_text("{}")

        first = runner.invoke(app, ["commit", "p1/t1.json", "-m", "create: Buy milk"])
        second = runner.invoke(app, ["commit", "p1/t1.json", "-m", "create: Buy milk"])

        assert first.exit_code == 0, first.output
        assert "create: Buy milk" in first.output
        assert second.exit_code == 0
        assert "nothing to commit" in second.output
        assert history(storage) == ["create: Buy milk", "Initial commit"]

    def test_commit_bootstraps_storage(self, storage):
        """Test that committing into an existing but uninitialized root runs init."""
        storage.mkdir()
        (storage / "a.json").write_text("a")

        result = runner.invoke(app, ["commit", "a.json", "-m", "create: A"])

        assert result.exit_code == 0, result.output
        assert history(storage) == ["create: A", "Initial commit"]

    def test_absolute_path_rejected(self, storage):
        result = runner.invoke(app, ["commit", "/etc/hosts", "-m", "create: A"])

        assert result.exit_code == ExitCode.USER_ERROR
        assert "Invalid change set" in result.output

    def test_missing_storage_root(self, storage):
        result = runner.invoke(app, ["commit", "a.json", "-m", "create: A"])

        assert result.exit_code == ExitCode.GENERAL_ERROR
        assert "does not exist" in result.output

    def test_init_push_failure_exit_code(self, storage, monkeypatch):
        """Test that a failed bootstrap push is not reported as committed locally."""
        monkeypatch.setenv("TODOSYNC_REMOTE_ENABLE", "true")
        storage.mkdir()
        (storage / "a.json").write_text("a")

        # No remote named origin exists, so init's push fails
        result = runner.invoke(app, ["commit", "a.json", "-m", "create: A"])

        assert result.exit_code == ExitCode.GENERAL_ERROR
        assert "Error:" in result.output
        assert "Committed locally" not in result.output
        assert "init output" in result.output


class TestPullCommand:
    def test_pull_uninitialized(self, storage):
        storage.mkdir()

        result = runner.invoke(app, ["pull"])

        assert result.exit_code == ExitCode.GENERAL_ERROR
        assert "not initialized" in result.output

    def test_sync_without_remote_initializes(self, storage):
        result = runner.invoke(app, ["sync"])

        assert result.exit_code == 0, result.output
        assert (storage / "INIT").is_file()


class TestIdentityCommands:
    def test_whoami(self, storage):
        storage.mkdir()

        result = runner.invoke(app, ["whoami"])

        assert result.exit_code == 0
        assert "Test User <test@example.com>" in result.output

    def test_whoami_unknown(self, no_identity, storage):
        storage.mkdir()

        result = runner.invoke(app, ["whoami"])

        assert result.exit_code == 0
        assert "unknown" in result.output

    def test_whoami_missing_storage(self, storage):
        result = runner.invoke(app, ["whoami"])

        assert result.exit_code == ExitCode.USER_ERROR
        assert "todosync init" in result.output

    def test_contributors(self, storage):
        runner.invoke(app, ["init"])

        result = runner.invoke(app, ["contributors"])

        assert result.exit_code == 0
        assert "Test User" in result.output
        assert "you" in result.output

    def test_contributors_empty(self, storage):
        storage.mkdir()

        result = runner.invoke(app, ["contributors"])

        assert result.exit_code == 0
        assert "No contributors yet" in result.output
