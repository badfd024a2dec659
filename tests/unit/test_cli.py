"""Unit tests for the command-line interface."""

import shutil
import tempfile
from pathlib import Path

import pytest
from rich.console import Console
from typer.testing import CliRunner

from commitstore.core.database import Database
from commitstore.interfaces import cli
from commitstore.interfaces.cli import app


class TestCli:
    """Test CLI commands against a temporary data directory."""

    @pytest.fixture
    def temp_dir(self):
        temp_path = Path(tempfile.mkdtemp())
        yield temp_path
        shutil.rmtree(temp_path)

    @pytest.fixture
    def data_dir(self, temp_dir, monkeypatch):
        data = temp_dir / "data"
        monkeypatch.setenv("COMMITSTORE_DATA_DIR", str(data))
        monkeypatch.setattr(cli, "configure_from_config", lambda config: None)
        monkeypatch.setattr(cli, "console", Console(width=200))
        monkeypatch.setattr(cli, "err_console", Console(stderr=True, width=200))
        return data

    @pytest.fixture
    def runner(self):
        return CliRunner()

    def test_info(self, runner, data_dir):
        result = runner.invoke(app, ["info"])

        assert result.exit_code == 0
        assert str(data_dir) in result.output

    def test_repo_create_and_list(self, runner, data_dir):
        result = runner.invoke(app, ["repo", "create", "notes", "-d", "Meeting notes"])
        assert result.exit_code == 0
        assert "Created repository: notes" in result.output

        result = runner.invoke(app, ["repo", "list"])
        assert result.exit_code == 0
        assert "notes" in result.output
        assert "Meeting notes" in result.output

    def test_repo_create_twice_fails(self, runner, data_dir):
        runner.invoke(app, ["repo", "create", "notes"])

        result = runner.invoke(app, ["repo", "create", "notes"])

        assert result.exit_code == 1
        assert "already exists" in result.output

    def test_repo_list_empty(self, runner, data_dir):
        result = runner.invoke(app, ["repo", "list"])

        assert result.exit_code == 0
        assert "No repositories found" in result.output

    def test_repo_info_missing(self, runner, data_dir):
        result = runner.invoke(app, ["repo", "info", "missing"])

        assert result.exit_code == 1
        assert "not found" in result.output

    def test_file_put_get_rm(self, runner, data_dir, temp_dir):
        source = temp_dir / "hello.txt"
        source.write_text("hello from the cli")
        runner.invoke(app, ["repo", "create", "notes"])

        result = runner.invoke(app, ["file", "put", "notes", str(source), "-m", "add hello"])
        assert result.exit_code == 0
        assert "Stored hello.txt" in result.output

        result = runner.invoke(app, ["file", "get", "notes", "hello.txt"])
        assert result.exit_code == 0
        assert "hello from the cli" in result.output

        output = temp_dir / "copy.txt"
        result = runner.invoke(app, ["file", "get", "notes", "hello.txt", "-o", str(output)])
        assert result.exit_code == 0
        assert output.read_text() == "hello from the cli"

        result = runner.invoke(app, ["file", "rm", "notes", "hello.txt"])
        assert result.exit_code == 0

        result = runner.invoke(app, ["file", "exists", "notes", "hello.txt"])
        assert result.exit_code == 1

        repo = Database(data_dir).open_repo("notes")
        assert len(repo.history()) == 5
        assert not (repo.dir / "files" / "meta-data" / "hello.txt.json").exists()

    def test_file_get_missing(self, runner, data_dir):
        runner.invoke(app, ["repo", "create", "notes"])

        result = runner.invoke(app, ["file", "get", "notes", "nope.txt"])

        assert result.exit_code == 1
        assert "not found" in result.output

    def test_protected_repo_delete_requires_force(self, runner, data_dir):
        runner.invoke(app, ["repo", "create", "notes", "--protect"])

        result = runner.invoke(app, ["repo", "delete", "notes", "--yes"])
        assert result.exit_code == 1
        assert "protected" in result.output
        assert (data_dir / "notes").exists()

        result = runner.invoke(app, ["repo", "delete", "notes", "--yes", "--force"])
        assert result.exit_code == 0
        assert not (data_dir / "notes").exists()

    def test_repo_protect_off(self, runner, data_dir):
        runner.invoke(app, ["repo", "create", "notes", "--protect"])

        result = runner.invoke(app, ["repo", "protect", "notes", "--off"])
        assert result.exit_code == 0

        result = runner.invoke(app, ["repo", "delete", "notes", "--yes"])
        assert result.exit_code == 0

    def test_repo_log(self, runner, data_dir):
        runner.invoke(app, ["repo", "create", "notes"])

        result = runner.invoke(app, ["repo", "log", "notes"])

        assert result.exit_code == 0
        assert "db-repo" in result.output
        assert "commitstore" in result.output
