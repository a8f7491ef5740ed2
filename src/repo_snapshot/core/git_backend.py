#!/usr/bin/env python3
"""
Git Backend Module

This module provides the version-control collaborator for the snapshot
pipeline. GitCliBackend runs the git executable with subprocess and parses
its machine-readable output into the snapshot models. Each call runs in a
worker thread so the aggregator can issue them concurrently.

This module is part of the Core Layer and should have no dependencies on
Presentation or Integration layers.

Links to documentation:
- git status porcelain format: https://git-scm.com/docs/git-status#_porcelain_format_version_1
- git log pretty formats: https://git-scm.com/docs/pretty-formats
- git diff --numstat: https://git-scm.com/docs/git-diff#Documentation/git-diff.txt---numstat

Sample input:
- root: "/path/to/repo"
- ref: "origin/main" (for log)

Expected output:
- remote_url: "https://github.com/user/repo.git"
- current_branch: "main"
- status: WorkingTreeStatus(branch="main", tracking="origin/main", ahead=1, ...)
- log: [CommitRecord(hash="9fceb02...", subject="Initial commit", ...), ...]
- diff_summary: [DiffStat(path="README.md", insertions=3, deletions=1), ...]
"""

import asyncio
import re
import subprocess
from datetime import datetime
from typing import List, Optional, Protocol

from loguru import logger

from repo_snapshot.core.config import CONFIG
from repo_snapshot.core.constants import CONFLICT_CODES, LOG_FIELD_SEP, LOG_FORMAT, LOG_RECORD_SEP
from repo_snapshot.core.errors import BackendUnavailable
from repo_snapshot.core.models import CommitRecord, DiffStat, StatusEntry, WorkingTreeStatus

BRANCH_HEADER_PATTERN = re.compile(
    r"^## (?:No commits yet on |Initial commit on )?"
    r"(?P<branch>.+?)"
    r"(?:\.\.\.(?P<tracking>\S+?))?"
    r"(?: \[(?P<info>[^\]]+)\])?$"
)
AHEAD_PATTERN = re.compile(r"ahead (\d+)")
BEHIND_PATTERN = re.compile(r"behind (\d+)")


class VcsBackend(Protocol):
    async def remote_url(self, root: str) -> str:
        ...

    async def current_branch(self, root: str) -> str:
        ...

    async def status(self, root: str) -> WorkingTreeStatus:
        ...

    async def log(self, root: str, ref: Optional[str] = None) -> List[CommitRecord]:
        ...

    async def diff_summary(self, root: str) -> List[DiffStat]:
        ...


def parse_status(output: str) -> WorkingTreeStatus:
    """
    Parse `git status --porcelain=v1 --branch -z` output.

    Args:
        output: NUL separated porcelain output

    Returns:
        WorkingTreeStatus: Structured status
    """
    tokens = output.split("\0")
    branch = None
    tracking = None
    upstream_gone = False
    ahead = behind = 0
    staged, unstaged, untracked, conflicted = [], [], [], []
    files = []

    i = 0
    while i < len(tokens):
        token = tokens[i]
        i += 1
        if not token:
            continue

        if token.startswith("## "):
            if token.startswith("## HEAD (no branch)"):
                continue
            match = BRANCH_HEADER_PATTERN.match(token)
            if match:
                branch = match.group("branch")
                tracking = match.group("tracking")
                info = match.group("info") or ""
                upstream_gone = info == "gone"
                ahead_match = AHEAD_PATTERN.search(info)
                behind_match = BEHIND_PATTERN.search(info)
                ahead = int(ahead_match.group(1)) if ahead_match else 0
                behind = int(behind_match.group(1)) if behind_match else 0
            continue

        code, path = token[:2], token[3:]
        if code == "!!":
            continue
        original_path = None
        if code[0] in "RC" and i < len(tokens):
            # -z puts the source path of a rename/copy in the next field
            original_path = tokens[i]
            i += 1

        files.append(StatusEntry(path=path, index=code[0], working_dir=code[1], original_path=original_path))

        if code == "??":
            untracked.append(path)
        elif code in CONFLICT_CODES:
            conflicted.append(path)
        else:
            if code[0] != " ":
                staged.append(path)
            if code[1] != " ":
                unstaged.append(path)

    return WorkingTreeStatus(
        branch=branch,
        tracking=tracking,
        upstream_gone=upstream_gone,
        ahead=ahead,
        behind=behind,
        staged=tuple(staged),
        unstaged=tuple(unstaged),
        untracked=tuple(untracked),
        conflicted=tuple(conflicted),
        files=tuple(files),
    )


def parse_log(output: str) -> List[CommitRecord]:
    """
    Parse `git log` output produced with LOG_FORMAT.

    Raises:
        ValueError: If a record does not have the expected fields
    """
    commits = []
    for record in output.split(LOG_RECORD_SEP):
        record = record.strip("\n")
        if not record:
            continue
        fields = record.split(LOG_FIELD_SEP)
        if len(fields) != 6:
            raise ValueError(f"Unexpected log record with {len(fields)} fields: {record[:80]!r}")
        commit_hash, author_name, author_email, date, subject, refs = fields
        commits.append(
            CommitRecord(
                hash=commit_hash,
                author_name=author_name,
                author_email=author_email,
                date=datetime.fromisoformat(date),
                subject=subject,
                refs=tuple(ref.strip() for ref in refs.split(",") if ref.strip()),
            )
        )
    return commits


def parse_numstat(output: str) -> List[DiffStat]:
    """
    Parse `git diff --numstat -z` output.

    Binary files are reported by git as `-` counts and are recorded with zero
    insertions and deletions.
    """
    stats = []
    tokens = output.split("\0")
    i = 0
    while i < len(tokens):
        token = tokens[i]
        i += 1
        if not token.strip():
            continue
        parts = token.split("\t", 2)
        if len(parts) != 3:
            raise ValueError(f"Unexpected numstat entry: {token!r}")
        added, deleted, path = parts
        if not path:
            # Rename: old and new paths follow as separate fields
            path = tokens[i + 1] if i + 1 < len(tokens) else tokens[i]
            i += 2
        binary = added == "-" and deleted == "-"
        stats.append(
            DiffStat(
                path=path,
                insertions=0 if binary else int(added),
                deletions=0 if binary else int(deleted),
                binary=binary,
            )
        )
    return stats


class GitCliBackend:
    """VcsBackend implementation that shells out to git."""

    def __init__(
        self,
        executable: Optional[str] = None,
        timeout: Optional[float] = None,
        log_max_count: Optional[int] = None,
    ):
        git_config = CONFIG["git"]
        self.executable = executable or git_config["executable"]
        self.timeout = timeout if timeout is not None else git_config["timeout"]
        self.log_max_count = log_max_count if log_max_count is not None else git_config["log_max_count"]

    def _run_git(self, root: str, operation: str, args: List[str]) -> str:
        command = [self.executable, *args]
        logger.debug(f"Running {' '.join(command)} in {root}")
        try:
            result = subprocess.run(
                command,
                cwd=root,
                check=True,
                capture_output=True,
                text=True,
                encoding="utf-8",
                errors="replace",
                timeout=self.timeout,
            )
        except subprocess.CalledProcessError as e:
            detail = (e.stderr or "").strip() or f"exit status {e.returncode}"
            raise BackendUnavailable(operation, detail) from e
        except subprocess.TimeoutExpired as e:
            raise BackendUnavailable(operation, f"timed out after {self.timeout}s") from e
        except OSError as e:
            raise BackendUnavailable(operation, str(e)) from e
        return result.stdout

    async def _git(self, root: str, operation: str, args: List[str]) -> str:
        return await asyncio.to_thread(self._run_git, root, operation, args)

    async def remote_url(self, root: str) -> str:
        output = await self._git(root, "remote_url", ["ls-remote", "--get-url"])
        return output.strip()

    async def current_branch(self, root: str) -> str:
        output = await self._git(root, "current_branch", ["rev-parse", "--abbrev-ref", "HEAD"])
        return output.strip()

    async def status(self, root: str) -> WorkingTreeStatus:
        output = await self._git(root, "status", ["status", "--porcelain=v1", "--branch", "-z"])
        return parse_status(output)

    async def log(self, root: str, ref: Optional[str] = None) -> List[CommitRecord]:
        """
        Fetch the commit log of HEAD or of ref, newest first.

        Args:
            root: Repository root
            ref: Ref to log instead of HEAD (optional)

        Returns:
            List[CommitRecord]: Commits newest first
        """
        args = ["log", f"--format={LOG_FORMAT}"]
        if self.log_max_count:
            args.append(f"--max-count={self.log_max_count}")
        if ref:
            args.extend([ref, "--"])
        output = await self._git(root, "log", args)
        try:
            return parse_log(output)
        except ValueError as e:
            raise BackendUnavailable("log", str(e)) from e

    async def diff_summary(self, root: str) -> List[DiffStat]:
        output = await self._git(root, "diff_summary", ["diff", "--numstat", "-z"])
        try:
            return parse_numstat(output)
        except ValueError as e:
            raise BackendUnavailable("diff_summary", str(e)) from e
