"""
Shared fixtures for the repo_snapshot test suite.

Links:
- pytest fixtures: https://docs.pytest.org/en/stable/how-to/fixtures.html
"""

import os
import shutil
import subprocess
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional

import pytest

from repo_snapshot.core.errors import BackendUnavailable
from repo_snapshot.core.fs_reader import DirEntry, LocalFilesystemReader
from repo_snapshot.core.models import CommitRecord, DiffStat, WorkingTreeStatus

GIT = shutil.which("git")

requires_git = pytest.mark.skipif(GIT is None, reason="git executable not available")


def make_commit(n: int, subject: Optional[str] = None) -> CommitRecord:
    return CommitRecord(
        hash=f"{n:040x}",
        author_name="Ada Lovelace",
        author_email="ada@example.com",
        date=datetime(2024, 5, n, 10, 0, tzinfo=timezone.utc),
        subject=subject or f"Commit {n}",
    )


class FakeBackend:
    """In-memory VcsBackend with switchable failures."""

    def __init__(
        self,
        tracking: Optional[str] = None,
        fail: Iterable[str] = (),
        fail_with: Optional[Exception] = None,
        remote: str = "https://example.com/repo.git\n",
    ):
        self.tracking = tracking
        self.fail = set(fail)
        self.fail_with = fail_with
        self.remote = remote
        self.calls: List[tuple] = []

    def _maybe_fail(self, operation: str) -> None:
        if operation in self.fail:
            if self.fail_with is not None:
                raise self.fail_with
            raise BackendUnavailable(operation, "connection refused")

    async def remote_url(self, root: str) -> str:
        self._maybe_fail("remote_url")
        return self.remote

    async def current_branch(self, root: str) -> str:
        self._maybe_fail("current_branch")
        return "main\n"

    async def status(self, root: str) -> WorkingTreeStatus:
        self._maybe_fail("status")
        return WorkingTreeStatus(branch="main", tracking=self.tracking, untracked=("notes.txt",))

    async def log(self, root: str, ref: Optional[str] = None) -> List[CommitRecord]:
        self.calls.append(("log", ref))
        if ref is None:
            self._maybe_fail("log")
            return [make_commit(3), make_commit(2), make_commit(1)]
        self._maybe_fail("tracking_log")
        return [make_commit(2), make_commit(1)]

    async def diff_summary(self, root: str) -> List[DiffStat]:
        self._maybe_fail("diff_summary")
        return [DiffStat(path="README.md", insertions=3, deletions=1)]


class FailingReader(LocalFilesystemReader):
    """Local reader that raises for chosen paths."""

    def __init__(self, fail_list: Iterable[str] = (), fail_read: Iterable[str] = (), error: Optional[OSError] = None):
        super().__init__()
        self.fail_list = {os.path.abspath(p) for p in fail_list}
        self.fail_read = {os.path.abspath(p) for p in fail_read}
        self.error = error or PermissionError(13, "Permission denied")

    async def list_entries(self, path: str) -> List[DirEntry]:
        if os.path.abspath(path) in self.fail_list:
            raise self.error
        return await super().list_entries(path)

    async def read_text(self, path: str) -> str:
        if os.path.abspath(path) in self.fail_read:
            raise self.error
        return await super().read_text(path)


@pytest.fixture
def make_dirs(tmp_path):
    """Create directories (relative to tmp_path) and return tmp_path."""
    def _make(*paths: str):
        for p in paths:
            (tmp_path / p).mkdir(parents=True, exist_ok=True)
        return tmp_path
    return _make


@pytest.fixture
def fake_repo(tmp_path):
    """A directory tree with a .git marker and a config file, no real git."""
    repo = tmp_path / "repo"
    (repo / ".git").mkdir(parents=True)
    (repo / "src" / "app").mkdir(parents=True)
    (repo / "docs").mkdir()
    (repo / "README.md").write_text("# repo\n")
    (repo / ".git" / "config").write_text(
        "[core]\n"
        "\trepositoryformatversion = 0\n"
        "[remote \"origin\"]\n"
        "\turl = https://example.com/repo.git\n"
        "\tfetch = +refs/heads/*:refs/remotes/origin/*\n"
    )
    return repo


def _git(cwd, *args: str) -> str:
    env: Dict[str, str] = dict(os.environ)
    env.update({
        "GIT_AUTHOR_NAME": "Ada Lovelace",
        "GIT_AUTHOR_EMAIL": "ada@example.com",
        "GIT_COMMITTER_NAME": "Ada Lovelace",
        "GIT_COMMITTER_EMAIL": "ada@example.com",
        "GIT_CONFIG_NOSYSTEM": "1",
        "HOME": str(cwd),
    })
    result = subprocess.run([GIT, *args], cwd=cwd, env=env, check=True, capture_output=True, text=True)
    return result.stdout


@pytest.fixture
def git_repo(tmp_path):
    """A real git repository with two commits, a remote and a tracking branch."""
    if GIT is None:
        pytest.skip("git executable not available")

    origin = tmp_path / "origin.git"
    _git(tmp_path, "init", "--bare", "-b", "main", str(origin))

    repo = tmp_path / "work"
    repo.mkdir()
    _git(repo, "init", "-b", "main")
    (repo / "src").mkdir()
    (repo / "README.md").write_text("hello\n")
    (repo / "src" / "app.py").write_text("print('hi')\n")
    _git(repo, "add", ".")
    _git(repo, "commit", "-m", "Initial commit")
    _git(repo, "remote", "add", "origin", str(origin))
    _git(repo, "push", "-u", "origin", "main")

    (repo / "README.md").write_text("hello\nworld\n")
    _git(repo, "commit", "-am", "Second commit")

    # Unstaged edit, staged new file, untracked file
    (repo / "src" / "app.py").write_text("print('hi')\nprint('bye')\n")
    (repo / "staged.txt").write_text("staged\n")
    _git(repo, "add", "staged.txt")
    (repo / "scratch.txt").write_text("scratch\n")
    return repo
