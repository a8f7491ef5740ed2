"""Pydantic models for repository snapshots.

This module provides the immutable records produced by the discovery and
aggregation pipeline: the directory topology, commit and diff records, the
working-tree status and the consolidated RepositorySnapshot.

Links to third-party package documentation:
- Pydantic: https://docs.pydantic.dev/latest/
- Pydantic model config: https://docs.pydantic.dev/latest/api/config/

Sample input:
    node = DirectoryNode(name=".", absolute_path="/repo", children=())
    commit = CommitRecord(
        hash="9fceb02d0ae598e95dc970b74767f19372d61af8",
        author_name="Ada",
        author_email="ada@example.com",
        date="2024-05-01T10:00:00+00:00",
        subject="Initial commit"
    )

Expected output:
    node.count()
    # 1

    commit.model_dump(mode="json")
    # {'hash': '9fceb02...', 'author_name': 'Ada', ..., 'refs': ()}
"""

from datetime import datetime
from typing import Iterator, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field


class DirectoryNode(BaseModel):
    """One directory in the topology tree."""
    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="Path relative to the root ('.' for the root itself)")
    absolute_path: str = Field(..., description="Fully resolved filesystem path")
    children: Tuple["DirectoryNode", ...] = Field((), description="Subdirectories in listing order")

    def walk(self) -> Iterator["DirectoryNode"]:
        """Yield this node and all descendants in pre-order."""
        stack = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))

    def count(self) -> int:
        """Return the number of nodes in this subtree, including this one."""
        return sum(1 for _ in self.walk())


DirectoryNode.model_rebuild()


class CommitRecord(BaseModel):
    """A single commit from `git log`."""
    model_config = ConfigDict(frozen=True)

    hash: str = Field(..., description="Full commit hash")
    author_name: str = Field(..., description="Author name")
    author_email: str = Field("", description="Author email")
    date: datetime = Field(..., description="Author date (timezone aware)")
    subject: str = Field("", description="First line of the commit message")
    refs: Tuple[str, ...] = Field((), description="Ref decorations pointing at this commit")


class DiffStat(BaseModel):
    """Line counts for one changed file."""
    model_config = ConfigDict(frozen=True)

    path: str = Field(..., description="Path of the changed file relative to the root")
    insertions: int = Field(0, description="Inserted lines")
    deletions: int = Field(0, description="Deleted lines")
    binary: bool = Field(False, description="Whether git reported the file as binary")

    @property
    def changes(self) -> int:
        return self.insertions + self.deletions


class StatusEntry(BaseModel):
    """One line of porcelain status output."""
    model_config = ConfigDict(frozen=True)

    path: str
    index: str = Field(" ", description="Index (staged) status code")
    working_dir: str = Field(" ", description="Working tree status code")
    original_path: Optional[str] = Field(None, description="Source path of a rename or copy")


class WorkingTreeStatus(BaseModel):
    """Structured working-tree status with branch tracking information."""
    model_config = ConfigDict(frozen=True)

    branch: Optional[str] = Field(None, description="Checked-out branch, None when detached")
    tracking: Optional[str] = Field(None, description="Upstream ref, None when not configured")
    upstream_gone: bool = Field(False, description="Upstream is configured but the ref no longer exists")
    ahead: int = Field(0, description="Commits ahead of the tracking branch")
    behind: int = Field(0, description="Commits behind the tracking branch")
    staged: Tuple[str, ...] = ()
    unstaged: Tuple[str, ...] = ()
    untracked: Tuple[str, ...] = ()
    conflicted: Tuple[str, ...] = ()
    files: Tuple[StatusEntry, ...] = ()

    @property
    def is_clean(self) -> bool:
        return not (self.staged or self.unstaged or self.untracked or self.conflicted)


class RepositorySnapshot(BaseModel):
    """Point-in-time view of a repository, built once per request."""
    model_config = ConfigDict(frozen=True)

    remote_url: str = Field("", description="Remote URL, empty when unavailable")
    root_folder_name: str = Field(..., description="Last path segment of the repository root")
    root_path: str = Field(..., description="Resolved repository root")
    current_branch: str = Field(..., description="Abbreviated ref name of HEAD")
    working_tree_status: WorkingTreeStatus
    commit_history: Tuple[CommitRecord, ...] = Field((), description="Commits, newest first")
    commit_diff_stats: Tuple[DiffStat, ...] = Field((), description="Per-file working tree diff")
    tracking_branch_history: Tuple[CommitRecord, ...] = Field((), description="Commits of the upstream ref")
    directory_topology: DirectoryNode
    remote_config_urls: Tuple[str, ...] = Field((), description="URLs declared in the local config")
