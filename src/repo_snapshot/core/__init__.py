"""
Core Layer for the Repository Snapshot Module

This package contains the discovery and aggregation logic: locating the
repository root, building the directory topology, extracting config URLs and
combining git state into one immutable snapshot. It has no dependencies on
UI or integration concerns.

The core layer is designed to be:
1. Independent of UI or integration concerns
2. Fully testable in isolation
3. Focused on business logic only

Usage:
    from repo_snapshot.core import fetch_snapshot
    snapshot = fetch_snapshot("/path/to/repo/src")
    print(snapshot.current_branch, len(snapshot.commit_history))
"""

# Snapshot aggregation
from repo_snapshot.core.aggregator import (
    build_snapshot,
    fetch_snapshot,
    describe_repository
)

# Discovery
from repo_snapshot.core.root_locator import (
    locate_root,
    locate_root_sync
)
from repo_snapshot.core.topology import (
    build_topology,
    build_topology_sync
)
from repo_snapshot.core.config_urls import (
    extract_urls,
    read_config_urls
)

# Collaborators
from repo_snapshot.core.git_backend import GitCliBackend, VcsBackend
from repo_snapshot.core.fs_reader import DirEntry, FilesystemReader, LocalFilesystemReader

# Models and errors
from repo_snapshot.core.models import (
    CommitRecord,
    DiffStat,
    DirectoryNode,
    RepositorySnapshot,
    StatusEntry,
    WorkingTreeStatus
)
from repo_snapshot.core.errors import (
    BackendUnavailable,
    FilesystemReadError,
    InvalidStartPath,
    NoRepositoryFound,
    SnapshotAssemblyError,
    SnapshotError
)

__all__ = [
    # Aggregation
    'build_snapshot',
    'fetch_snapshot',
    'describe_repository',

    # Discovery
    'locate_root',
    'locate_root_sync',
    'build_topology',
    'build_topology_sync',
    'extract_urls',
    'read_config_urls',

    # Collaborators
    'GitCliBackend',
    'VcsBackend',
    'DirEntry',
    'FilesystemReader',
    'LocalFilesystemReader',

    # Models
    'CommitRecord',
    'DiffStat',
    'DirectoryNode',
    'RepositorySnapshot',
    'StatusEntry',
    'WorkingTreeStatus',

    # Errors
    'BackendUnavailable',
    'FilesystemReadError',
    'InvalidStartPath',
    'NoRepositoryFound',
    'SnapshotAssemblyError',
    'SnapshotError'
]
