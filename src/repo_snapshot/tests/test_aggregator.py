"""
Tests for snapshot aggregation and its fatal/recoverable failure policy.
"""

import asyncio

import pytest

from repo_snapshot.core.aggregator import build_snapshot, describe_repository, fetch_snapshot
from repo_snapshot.core.errors import (
    BackendUnavailable,
    FilesystemReadError,
    InvalidStartPath,
    NoRepositoryFound,
    SnapshotAssemblyError,
)
from repo_snapshot.core.models import RepositorySnapshot

from .conftest import FailingReader, FakeBackend, requires_git


def test_snapshot_from_nested_start_path(fake_repo):
    snapshot = fetch_snapshot(str(fake_repo / "src" / "app"), backend=FakeBackend())

    assert isinstance(snapshot, RepositorySnapshot)
    assert snapshot.root_path == str(fake_repo)
    assert snapshot.root_folder_name == "repo"
    assert snapshot.remote_url == "https://example.com/repo.git"
    assert snapshot.current_branch == "main"
    assert snapshot.working_tree_status.untracked == ("notes.txt",)
    assert [c.subject for c in snapshot.commit_history] == ["Commit 3", "Commit 2", "Commit 1"]
    assert snapshot.commit_diff_stats[0].path == "README.md"
    assert snapshot.remote_config_urls == ("https://example.com/repo.git",)
    assert snapshot.directory_topology.name == "."
    assert {child.name for child in snapshot.directory_topology.children} == {".git", "src", "docs"}


def test_no_tracking_branch_gives_empty_history(fake_repo):
    backend = FakeBackend(tracking=None)
    snapshot = fetch_snapshot(str(fake_repo), backend=backend)
    assert snapshot.tracking_branch_history == ()
    assert ("log", None) in backend.calls
    assert all(call[0] != "log" or call[1] is None for call in backend.calls)


def test_tracking_branch_history_is_fetched(fake_repo):
    backend = FakeBackend(tracking="origin/main")
    snapshot = fetch_snapshot(str(fake_repo), backend=backend)
    assert ("log", "origin/main") in backend.calls
    assert [c.subject for c in snapshot.tracking_branch_history] == ["Commit 2", "Commit 1"]


def test_no_repository_is_fatal(make_dirs):
    base = make_dirs("plain/src")
    with pytest.raises(NoRepositoryFound) as exc_info:
        fetch_snapshot(str(base / "plain"), backend=FakeBackend(), search_parents=False)
    assert exc_info.value.stage == "root_search"


def test_remote_url_failure_is_recoverable(fake_repo):
    snapshot = fetch_snapshot(str(fake_repo), backend=FakeBackend(fail={"remote_url"}))
    assert snapshot.remote_url == ""
    assert snapshot.current_branch == "main"


def test_remote_url_unexpected_error_is_recoverable(fake_repo):
    backend = FakeBackend(fail={"remote_url"}, fail_with=RuntimeError("boom"))
    assert fetch_snapshot(str(fake_repo), backend=backend).remote_url == ""


@pytest.mark.parametrize("operation", ["current_branch", "status", "log", "diff_summary"])
def test_required_backend_failure_is_fatal(fake_repo, operation):
    with pytest.raises(BackendUnavailable) as exc_info:
        fetch_snapshot(str(fake_repo), backend=FakeBackend(fail={operation}))
    assert exc_info.value.operation == operation


def test_connectivity_error_in_status_is_wrapped(fake_repo):
    backend = FakeBackend(fail={"status"}, fail_with=ConnectionError("connection reset"))
    with pytest.raises(BackendUnavailable) as exc_info:
        fetch_snapshot(str(fake_repo), backend=backend)
    assert exc_info.value.stage == "backend:status"
    assert isinstance(exc_info.value.__cause__, ConnectionError)


def test_tracking_log_failure_is_fatal(fake_repo):
    backend = FakeBackend(tracking="origin/main", fail={"tracking_log"}, fail_with=ConnectionError("reset"))
    with pytest.raises(BackendUnavailable) as exc_info:
        fetch_snapshot(str(fake_repo), backend=backend)
    assert exc_info.value.stage == "backend:tracking_log"


def test_first_failed_stage_is_reported(fake_repo):
    """With several failures the earliest pipeline stage wins."""
    backend = FakeBackend(fail={"diff_summary", "current_branch"})
    with pytest.raises(BackendUnavailable) as exc_info:
        fetch_snapshot(str(fake_repo), backend=backend)
    assert exc_info.value.operation == "current_branch"


def test_topology_failure_is_fatal(fake_repo):
    reader = FailingReader(fail_list=[str(fake_repo / "docs")])
    with pytest.raises(FilesystemReadError) as exc_info:
        fetch_snapshot(str(fake_repo), backend=FakeBackend(), reader=reader)
    assert exc_info.value.stage == "topology"


def test_config_read_failure_is_recoverable_and_reported(fake_repo):
    reported = []
    reader = FailingReader(fail_read=[str(fake_repo / ".git" / "config")])
    snapshot = fetch_snapshot(
        str(fake_repo),
        backend=FakeBackend(),
        reader=reader,
        error_reporter=reported.append,
    )
    assert snapshot.remote_config_urls == ()
    assert len(reported) == 1
    assert "Error reading config file" in reported[0]


def test_missing_config_file_is_recoverable(fake_repo):
    (fake_repo / ".git" / "config").unlink()
    reported = []
    snapshot = fetch_snapshot(str(fake_repo), backend=FakeBackend(), error_reporter=reported.append)
    assert snapshot.remote_config_urls == ()
    assert reported


def test_snapshot_is_frozen(fake_repo):
    snapshot = fetch_snapshot(str(fake_repo), backend=FakeBackend())
    with pytest.raises(Exception):
        snapshot.current_branch = "other"
    assert isinstance(snapshot.commit_history, tuple)


def test_build_snapshot_can_run_inside_event_loop(fake_repo):
    async def main():
        return await asyncio.gather(
            build_snapshot(str(fake_repo), backend=FakeBackend()),
            build_snapshot(str(fake_repo / "docs"), backend=FakeBackend()),
        )

    first, second = asyncio.run(main())
    assert first.root_path == second.root_path == str(fake_repo)


def test_describe_repository_success(fake_repo):
    result = describe_repository(str(fake_repo), backend=FakeBackend())
    assert result["success"] is True
    snapshot = result["snapshot"]
    assert snapshot["root_folder_name"] == "repo"
    assert snapshot["commit_history"][0]["date"].startswith("2024-05-03")
    assert snapshot["directory_topology"]["name"] == "."


def test_describe_repository_failure(fake_repo):
    result = describe_repository(str(fake_repo), backend=FakeBackend(fail={"status"}))
    assert result["success"] is False
    assert result["stage"] == "backend:status"
    assert "connection refused" in result["error"]


def test_describe_repository_invalid_path(tmp_path):
    result = describe_repository(str(tmp_path / "missing"), backend=FakeBackend())
    assert result["success"] is False
    assert result["stage"] == "input"


def test_invalid_start_path_raises(tmp_path):
    with pytest.raises(InvalidStartPath):
        fetch_snapshot(str(tmp_path / "missing"), backend=FakeBackend())


class MalformedLogBackend(FakeBackend):
    async def log(self, root, ref=None):
        return [{"hash": "abc"}]


def test_malformed_backend_data_is_an_assembly_failure(fake_repo):
    with pytest.raises(SnapshotAssemblyError) as exc_info:
        fetch_snapshot(str(fake_repo), backend=MalformedLogBackend())
    assert exc_info.value.stage == "assemble"


def test_describe_repository_malformed_backend_data(fake_repo):
    result = describe_repository(str(fake_repo), backend=MalformedLogBackend())
    assert result["success"] is False
    assert result["stage"] == "assemble"


@requires_git
def test_snapshot_of_real_repository(git_repo, tmp_path):
    snapshot = fetch_snapshot(str(git_repo / "src"))

    assert snapshot.root_path == str(git_repo)
    assert snapshot.root_folder_name == "work"
    assert snapshot.remote_url == str(tmp_path / "origin.git")
    assert snapshot.current_branch == "main"
    assert snapshot.working_tree_status.tracking == "origin/main"
    assert len(snapshot.commit_history) == 2
    assert len(snapshot.tracking_branch_history) == 1
    assert snapshot.remote_config_urls == (str(tmp_path / "origin.git"),)
    assert ".git" in {child.name for child in snapshot.directory_topology.children}
