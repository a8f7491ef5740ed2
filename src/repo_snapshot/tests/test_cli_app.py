"""
Tests for the Typer CLI.

Links:
- Typer testing: https://typer.tiangolo.com/tutorial/testing/
"""

import importlib
import json

import pytest
from typer.testing import CliRunner

from repo_snapshot.cli.app import app

from .conftest import FakeBackend

# repo_snapshot.cli re-exports the Typer instance under the submodule name
app_module = importlib.import_module("repo_snapshot.cli.app")
runner = CliRunner()


@pytest.fixture
def fake_backend(monkeypatch):
    backend = FakeBackend(tracking="origin/main")
    monkeypatch.setattr(app_module, "get_backend", lambda: backend)
    return backend


def test_root_command_prints_root(fake_repo):
    result = runner.invoke(app, ["--log-level", "ERROR", "root", str(fake_repo / "src" / "app")])
    assert result.exit_code == 0
    assert str(fake_repo) in result.stdout


def test_root_command_without_repository(make_dirs, monkeypatch):
    base = make_dirs("plain/inner")
    monkeypatch.setitem(app_module.CONFIG["discovery"], "search_parents", False)
    result = runner.invoke(app, ["--log-level", "ERROR", "root", str(base / "plain")])
    assert result.exit_code == 1
    assert "No Git repository found" in result.stdout


def test_invalid_start_path_is_rejected(tmp_path):
    result = runner.invoke(app, ["root", str(tmp_path / "missing")])
    assert result.exit_code != 0


def test_tree_command(fake_repo):
    result = runner.invoke(app, ["--log-level", "ERROR", "tree", str(fake_repo)])
    assert result.exit_code == 0
    assert "docs" in result.stdout
    assert "5 directories" in result.stdout


def test_urls_command(fake_repo):
    result = runner.invoke(app, ["--log-level", "ERROR", "urls", str(fake_repo)])
    assert result.exit_code == 0
    assert result.stdout.strip().splitlines() == ["https://example.com/repo.git"]


def test_urls_command_missing_config(fake_repo):
    (fake_repo / ".git" / "config").unlink()
    result = runner.invoke(app, ["--log-level", "ERROR", "urls", str(fake_repo)])
    assert result.exit_code == 1
    assert "Error reading config file" in result.stdout


def test_snapshot_summary(fake_repo, fake_backend):
    result = runner.invoke(app, ["--log-level", "ERROR", "snapshot", str(fake_repo)])
    assert result.exit_code == 0
    assert "Snapshot built for repo" in result.stdout
    assert "Repository Summary" in result.stdout
    assert "Commit 3" in result.stdout


def test_snapshot_json_to_file(fake_repo, fake_backend, tmp_path):
    target = tmp_path / "snapshot.json"
    result = runner.invoke(
        app, ["--log-level", "ERROR", "snapshot", str(fake_repo), "--format", "json", "--output", str(target)]
    )
    assert result.exit_code == 0
    data = json.loads(target.read_text())
    assert data["root_folder_name"] == "repo"
    assert data["remote_config_urls"] == ["https://example.com/repo.git"]
    assert len(data["tracking_branch_history"]) == 2


def test_snapshot_json_to_stdout(fake_repo, fake_backend):
    result = runner.invoke(app, ["--log-level", "ERROR", "snapshot", str(fake_repo), "--format", "json"])
    assert result.exit_code == 0
    assert '"root_folder_name": "repo"' in result.stdout


def test_snapshot_fatal_backend_error(fake_repo, monkeypatch):
    monkeypatch.setattr(app_module, "get_backend", lambda: FakeBackend(fail={"status"}))
    result = runner.invoke(app, ["--log-level", "ERROR", "snapshot", str(fake_repo)])
    assert result.exit_code == 1
    assert "backend:status" in result.stdout
