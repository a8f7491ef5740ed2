#!/usr/bin/env python3
"""
Directory Topology Module

This module builds the nested directory tree of a repository. Every
subdirectory is recorded, the marker directory included; regular files are
ignored. Any read failure aborts the build, so a returned tree is always
complete.

This module is part of the Core Layer and should have no dependencies on
Presentation or Integration layers.

Sample input:
- root: "/path/to/repo"

Expected output:
- DirectoryNode(name=".", absolute_path="/path/to/repo", children=(
      DirectoryNode(name=".git", ...),
      DirectoryNode(name="src", ..., children=(DirectoryNode(name="src/app", ...),)),
  ))
"""

import asyncio
import os
from typing import Dict, List, Optional, Tuple

from loguru import logger

from repo_snapshot.core.config import CONFIG
from repo_snapshot.core.constants import SELF_SENTINEL, STAGE_TOPOLOGY
from repo_snapshot.core.errors import FilesystemReadError
from repo_snapshot.core.fs_reader import FilesystemReader, LocalFilesystemReader
from repo_snapshot.core.models import DirectoryNode


def relative_name(path: str, root: str) -> str:
    """Label for path relative to root; the root itself is the self-sentinel."""
    rel = os.path.relpath(path, root)
    return SELF_SENTINEL if rel == os.curdir else rel


async def build_topology(
    root: str,
    reader: Optional[FilesystemReader] = None,
    max_depth: Optional[int] = None,
    follow_symlinks: Optional[bool] = None,
) -> DirectoryNode:
    """
    Build the directory tree rooted at root.

    Directories are listed with an explicit work stack; nodes are then
    assembled bottom-up so each one is immutable once created.

    Args:
        root: Repository root
        reader: Filesystem reader (defaults to the local filesystem)
        max_depth: Deepest level to descend (defaults to CONFIG, None for unbounded)
        follow_symlinks: Whether symlinked directories are descended (defaults to CONFIG)

    Returns:
        DirectoryNode: The root node

    Raises:
        FilesystemReadError: If any directory cannot be listed
    """
    if max_depth is None:
        max_depth = CONFIG["discovery"]["max_depth"]
    if reader is None:
        if follow_symlinks is None:
            follow_symlinks = CONFIG["discovery"]["follow_symlinks"]
        reader = LocalFilesystemReader(follow_symlinks=follow_symlinks)

    root = os.path.abspath(root)
    logger.debug(f"Building topology for {root}")

    children_of: Dict[str, List[str]] = {}
    visit_order: List[str] = []
    stack: List[Tuple[str, int]] = [(root, 0)]

    while stack:
        path, depth = stack.pop()
        visit_order.append(path)

        if max_depth is not None and depth >= max_depth:
            children_of[path] = []
            continue

        try:
            entries = await reader.list_entries(path)
        except OSError as e:
            raise FilesystemReadError(path, STAGE_TOPOLOGY, str(e)) from e

        subdirs = [entry.path for entry in entries if entry.is_dir]
        children_of[path] = subdirs
        for subdir in reversed(subdirs):
            stack.append((subdir, depth + 1))

    # Pre-order reversed puts every child before its parent
    nodes: Dict[str, DirectoryNode] = {}
    for path in reversed(visit_order):
        nodes[path] = DirectoryNode(
            name=relative_name(path, root),
            absolute_path=path,
            children=tuple(nodes[child] for child in children_of[path]),
        )

    logger.debug(f"Topology for {root} has {len(visit_order)} directories")
    return nodes[root]


def build_topology_sync(root: str, **kwargs) -> DirectoryNode:
    """Synchronous wrapper around build_topology."""
    return asyncio.run(build_topology(root, **kwargs))
