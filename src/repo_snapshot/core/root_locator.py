#!/usr/bin/env python3
"""
Repository Root Locator Module

This module finds the version-controlled root for a starting directory. The
subtree under the starting directory is searched depth-first (pre-order) for a
directory that directly contains the marker directory; when the subtree has no
marker, the ancestors of the starting directory are checked, nearest first.

This module is part of the Core Layer and should have no dependencies on
Presentation or Integration layers.

Links to documentation:
- Git repository layout: https://git-scm.com/docs/gitrepository-layout

Sample input:
- start_path: "/path/to/repo/src/app"
- marker: ".git"

Expected output:
- "/path/to/repo" when /path/to/repo/.git exists
- None when no marker exists in the subtree or the ancestor chain
"""

import asyncio
import os
from typing import List, Optional, Tuple

from loguru import logger

from repo_snapshot.core.config import CONFIG
from repo_snapshot.core.constants import STAGE_ROOT_SEARCH
from repo_snapshot.core.errors import FilesystemReadError, InvalidStartPath
from repo_snapshot.core.fs_reader import DirEntry, FilesystemReader, LocalFilesystemReader


async def _list_or_raise(reader: FilesystemReader, path: str) -> List[DirEntry]:
    try:
        return await reader.list_entries(path)
    except OSError as e:
        raise FilesystemReadError(path, STAGE_ROOT_SEARCH, str(e)) from e


def _has_marker(entries: List[DirEntry], marker: str) -> bool:
    return any(entry.is_dir and entry.name == marker for entry in entries)


async def search_subtree(
    start_path: str,
    reader: FilesystemReader,
    marker: str,
    max_depth: Optional[int] = None,
) -> Optional[str]:
    """
    Depth-first pre-order search of the subtree rooted at start_path.

    Args:
        start_path: Absolute directory to start from
        reader: Filesystem reader
        marker: Marker directory name
        max_depth: Deepest level below start_path to inspect (None for unbounded)

    Returns:
        Optional[str]: First directory containing the marker, or None

    Raises:
        FilesystemReadError: If any directory in the walk cannot be listed
    """
    stack: List[Tuple[str, int]] = [(start_path, 0)]

    while stack:
        path, depth = stack.pop()
        entries = await _list_or_raise(reader, path)

        if _has_marker(entries, marker):
            logger.debug(f"Found '{marker}' in {path}")
            return path

        if max_depth is not None and depth >= max_depth:
            continue

        subdirs = [entry.path for entry in entries if entry.is_dir]
        # Reversed so the first listed subdirectory is popped first
        for subdir in reversed(subdirs):
            stack.append((subdir, depth + 1))

    return None


async def search_ancestors(start_path: str, reader: FilesystemReader, marker: str) -> Optional[str]:
    """Check each ancestor of start_path, nearest first, for the marker."""
    current = start_path
    while True:
        parent = os.path.dirname(current)
        if parent == current:
            return None
        if await reader.is_dir(os.path.join(parent, marker)):
            logger.debug(f"Found '{marker}' in ancestor {parent}")
            return parent
        current = parent


async def locate_root(
    start_path: str,
    reader: Optional[FilesystemReader] = None,
    marker: Optional[str] = None,
    search_parents: Optional[bool] = None,
    max_depth: Optional[int] = None,
    follow_symlinks: Optional[bool] = None,
) -> Optional[str]:
    """
    Locate the version-controlled root for start_path.

    Args:
        start_path: Existing directory to start from
        reader: Filesystem reader (defaults to the local filesystem)
        marker: Marker directory name (defaults to CONFIG)
        search_parents: Whether to fall back to the ancestor chain (defaults to CONFIG)
        max_depth: Depth bound for the subtree search (defaults to CONFIG)
        follow_symlinks: Whether symlinked directories are descended (defaults to CONFIG)

    Returns:
        Optional[str]: Absolute path of the root, or None when not found

    Raises:
        InvalidStartPath: If start_path is not an existing directory
        FilesystemReadError: If a directory in the subtree under start_path cannot be listed
    """
    discovery = CONFIG["discovery"]
    marker = marker or discovery["marker_dir"]
    if search_parents is None:
        search_parents = discovery["search_parents"]
    if max_depth is None:
        max_depth = discovery["max_depth"]
    if follow_symlinks is None:
        follow_symlinks = discovery["follow_symlinks"]
    if reader is None:
        reader = LocalFilesystemReader(follow_symlinks=follow_symlinks)

    start_path = os.path.abspath(start_path)
    logger.info(f"Searching for '{marker}' from {start_path}")

    try:
        root = await search_subtree(start_path, reader, marker, max_depth)
    except FilesystemReadError as e:
        if e.path == start_path and isinstance(e.__cause__, (NotADirectoryError, FileNotFoundError)):
            raise InvalidStartPath(start_path) from e.__cause__
        raise

    if root is None and search_parents:
        root = await search_ancestors(start_path, reader, marker)

    if root is None:
        logger.info(f"No '{marker}' found from {start_path}")
    return root


def locate_root_sync(start_path: str, **kwargs) -> Optional[str]:
    """Synchronous wrapper around locate_root."""
    return asyncio.run(locate_root(start_path, **kwargs))


if __name__ == "__main__":
    """Validate root discovery with real directories"""
    import sys
    import tempfile

    all_validation_failures = []
    total_tests = 0

    # Test 1: Deep start path resolves to the enclosing root
    total_tests += 1
    with tempfile.TemporaryDirectory() as temp_dir:
        os.makedirs(os.path.join(temp_dir, "repo", ".git"))
        os.makedirs(os.path.join(temp_dir, "repo", "src", "app"))
        found = locate_root_sync(os.path.join(temp_dir, "repo", "src", "app"))
        expected = os.path.join(os.path.abspath(temp_dir), "repo")
        if found != expected:
            all_validation_failures.append(f"Enclosing root: Expected {expected}, got {found}")

    # Test 2: Root inside the subtree is found
    total_tests += 1
    with tempfile.TemporaryDirectory() as temp_dir:
        os.makedirs(os.path.join(temp_dir, "workspace", "project", ".git"))
        found = locate_root_sync(os.path.join(temp_dir, "workspace"), search_parents=False)
        expected = os.path.join(os.path.abspath(temp_dir), "workspace", "project")
        if found != expected:
            all_validation_failures.append(f"Subtree root: Expected {expected}, got {found}")

    if all_validation_failures:
        print(f"❌ VALIDATION FAILED - {len(all_validation_failures)} of {total_tests} tests failed:")
        for failure in all_validation_failures:
            print(f"  - {failure}")
        sys.exit(1)
    else:
        print(f"✅ VALIDATION PASSED - All {total_tests} tests produced expected results")
        sys.exit(0)
