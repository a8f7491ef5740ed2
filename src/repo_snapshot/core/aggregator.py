#!/usr/bin/env python3
"""
Snapshot Aggregator Module

This module builds a RepositorySnapshot for a starting directory: it locates
the repository root, then collects remote URL, branch, status, history, diff
summary, tracking-branch history, directory topology and config URLs
concurrently and merges them into one immutable record.

Failure policy:
- No root found, or a failed branch/status/log/diff/topology read: fatal,
  raised as a SnapshotError naming the stage.
- Remote URL lookup failure: recoverable, remote_url becomes "".
- Config file read failure: recoverable, reported through error_reporter,
  remote_config_urls becomes ().

This module is part of the Core Layer and should have no dependencies on
Presentation or Integration layers.

Links to documentation:
- asyncio.gather: https://docs.python.org/3/library/asyncio-task.html#asyncio.gather

Sample input:
- start_path: "/path/to/repo/src"

Expected output:
- RepositorySnapshot(remote_url="https://github.com/user/repo.git",
                     root_folder_name="repo", current_branch="main", ...)
- describe_repository(): {"success": True, "snapshot": {...}}
  or {"success": False, "error": "...", "stage": "root_search"}
"""

import asyncio
import os
from typing import Any, Awaitable, Callable, Dict, Optional, Tuple, TypeVar

from loguru import logger
from pydantic import ValidationError

from repo_snapshot.core.config import CONFIG
from repo_snapshot.core.config_urls import read_config_urls
from repo_snapshot.core.constants import STAGE_INPUT
from repo_snapshot.core.errors import (
    BackendUnavailable,
    InvalidStartPath,
    NoRepositoryFound,
    SnapshotAssemblyError,
    SnapshotError,
)
from repo_snapshot.core.fs_reader import FilesystemReader, LocalFilesystemReader
from repo_snapshot.core.git_backend import GitCliBackend, VcsBackend
from repo_snapshot.core.models import CommitRecord, RepositorySnapshot, WorkingTreeStatus
from repo_snapshot.core.root_locator import locate_root
from repo_snapshot.core.topology import build_topology

T = TypeVar("T")

ErrorReporter = Callable[[str], None]


def _log_error(message: str) -> None:
    logger.error(message)


async def _required(operation: str, call: Awaitable[T]) -> T:
    """Await a required backend call, normalising failures to BackendUnavailable."""
    try:
        return await call
    except SnapshotError:
        raise
    except Exception as e:
        raise BackendUnavailable(operation, str(e)) from e


async def _remote_url(backend: VcsBackend, root: str) -> str:
    try:
        url = await backend.remote_url(root)
    except Exception as e:
        logger.warning(f"Remote URL unavailable for {root}: {e}")
        return ""
    return (url or "").strip()


async def _status_with_tracking(
    backend: VcsBackend, root: str
) -> Tuple[WorkingTreeStatus, Tuple[CommitRecord, ...]]:
    status = await _required("status", backend.status(root))
    if not status.tracking or status.upstream_gone:
        return status, ()
    logger.debug(f"Fetching history of tracking branch {status.tracking}")
    history = await _required("tracking_log", backend.log(root, status.tracking))
    return status, tuple(history)


async def _config_urls(
    root: str,
    reader: FilesystemReader,
    marker: str,
    error_reporter: ErrorReporter,
) -> Tuple[str, ...]:
    try:
        return tuple(await read_config_urls(root, reader, marker))
    except (OSError, UnicodeDecodeError) as e:
        error_reporter(f"Error reading config file: {e}")
        return ()


async def build_snapshot(
    start_path: str,
    backend: Optional[VcsBackend] = None,
    reader: Optional[FilesystemReader] = None,
    error_reporter: Optional[ErrorReporter] = None,
    marker: Optional[str] = None,
    search_parents: Optional[bool] = None,
    max_depth: Optional[int] = None,
    follow_symlinks: Optional[bool] = None,
) -> RepositorySnapshot:
    """
    Build a snapshot of the repository enclosing start_path.

    Args:
        start_path: Existing directory to start discovery from
        backend: Version-control backend (defaults to GitCliBackend)
        reader: Filesystem reader (defaults to the local filesystem)
        error_reporter: Receives messages for recoverable failures (defaults to logger.error)
        marker: Marker directory name (defaults to CONFIG)
        search_parents: Whether root discovery may check ancestors (defaults to CONFIG)
        max_depth: Depth bound for discovery and topology (defaults to CONFIG)
        follow_symlinks: Whether symlinked directories are descended (defaults to CONFIG)

    Returns:
        RepositorySnapshot: The consolidated snapshot

    Raises:
        InvalidStartPath: If start_path is not an existing directory
        NoRepositoryFound: If no repository root is found
        BackendUnavailable: If a required backend call fails
        FilesystemReadError: If root discovery or the topology build cannot read a directory
        SnapshotAssemblyError: If the collected parts do not fit the snapshot model
    """
    marker = marker or CONFIG["discovery"]["marker_dir"]
    if follow_symlinks is None:
        follow_symlinks = CONFIG["discovery"]["follow_symlinks"]
    reader = reader or LocalFilesystemReader(follow_symlinks=follow_symlinks)
    backend = backend or GitCliBackend()
    error_reporter = error_reporter or _log_error

    root = await locate_root(
        start_path,
        reader=reader,
        marker=marker,
        search_parents=search_parents,
        max_depth=max_depth,
    )
    if root is None:
        raise NoRepositoryFound(os.path.abspath(start_path), marker)

    logger.info(f"Building snapshot for repository at {root}")

    results = await asyncio.gather(
        _remote_url(backend, root),
        _required("current_branch", backend.current_branch(root)),
        _status_with_tracking(backend, root),
        _required("log", backend.log(root)),
        _required("diff_summary", backend.diff_summary(root)),
        build_topology(root, reader=reader, max_depth=max_depth),
        _config_urls(root, reader, marker, error_reporter),
        return_exceptions=True,
    )

    # Re-raise in pipeline order so the reported stage does not depend on timing
    for result in results:
        if isinstance(result, BaseException):
            logger.error(f"Snapshot of {root} failed: {result}")
            raise result

    remote_url, current_branch, (status, tracking_history), commits, diff_stats, topology, config_urls = results

    try:
        snapshot = RepositorySnapshot(
            remote_url=remote_url,
            root_folder_name=os.path.basename(os.path.abspath(root)),
            root_path=root,
            current_branch=current_branch.strip(),
            working_tree_status=status,
            commit_history=tuple(commits),
            commit_diff_stats=tuple(diff_stats),
            tracking_branch_history=tracking_history,
            directory_topology=topology,
            remote_config_urls=config_urls,
        )
    except ValidationError as e:
        logger.error(f"Snapshot of {root} failed: {e}")
        raise SnapshotAssemblyError(str(e)) from e

    logger.info(
        f"Snapshot of {snapshot.root_folder_name}: branch {snapshot.current_branch}, "
        f"{len(snapshot.commit_history)} commits, {topology.count()} directories"
    )
    return snapshot


def fetch_snapshot(start_path: str, **kwargs) -> RepositorySnapshot:
    """Synchronous wrapper around build_snapshot."""
    return asyncio.run(build_snapshot(start_path, **kwargs))


def describe_repository(start_path: str, **kwargs) -> Dict[str, Any]:
    """
    Build a snapshot and return it as a result dictionary.

    Args:
        start_path: Existing directory to start discovery from
        **kwargs: Passed through to build_snapshot

    Returns:
        Dict[str, Any]: Result with the following keys:
            - success (bool): Whether a snapshot was produced
            - snapshot (dict): JSON-ready snapshot if success is True
            - error (str): Error message if success is False
            - stage (str): Failed pipeline stage if success is False
    """
    try:
        snapshot = fetch_snapshot(start_path, **kwargs)
    except SnapshotError as e:
        logger.error(f"Error fetching repository info: {e}")
        return {"success": False, "error": str(e), "stage": e.stage}
    except InvalidStartPath as e:
        logger.error(f"Invalid start path: {e}")
        return {"success": False, "error": str(e), "stage": STAGE_INPUT}

    return {"success": True, "snapshot": snapshot.model_dump(mode="json")}
