"""
Error types for the repository snapshot pipeline.

Every fatal failure raised out of the core layer derives from SnapshotError and
names the pipeline stage it came from, so callers can report which step broke.
Recoverable failures (remote URL lookup, config file read) are never raised;
the aggregator replaces them with empty defaults.

This module is part of the Core Layer and should have no dependencies on
Presentation or Integration layers.
"""

from typing import Optional

from repo_snapshot.core.constants import STAGE_ASSEMBLE, STAGE_ROOT_SEARCH


class SnapshotError(Exception):
    """Base class for fatal snapshot failures."""

    def __init__(self, message: str, stage: str):
        super().__init__(message)
        self.stage = stage


class NoRepositoryFound(SnapshotError):
    """No marker directory exists in the searched tree."""

    def __init__(self, start_path: str, marker: str = ".git"):
        super().__init__(
            f"No Git repository found in the project hierarchy of {start_path} "
            f"(looked for '{marker}')",
            STAGE_ROOT_SEARCH,
        )
        self.start_path = start_path
        self.marker = marker


class BackendUnavailable(SnapshotError):
    """A version-control backend call failed or returned unreadable output."""

    def __init__(self, operation: str, detail: str):
        super().__init__(f"git {operation} failed: {detail}", f"backend:{operation}")
        self.operation = operation
        self.detail = detail


class FilesystemReadError(SnapshotError):
    """A directory listing or file read failed."""

    def __init__(self, path: str, stage: str, reason: Optional[str] = None):
        message = f"Could not read {path}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message, stage)
        self.path = path


class SnapshotAssemblyError(SnapshotError):
    """Collected parts did not fit the snapshot model."""

    def __init__(self, detail: str):
        super().__init__(f"Could not assemble snapshot: {detail}", STAGE_ASSEMBLE)


class InvalidStartPath(ValueError):
    """The starting path is not an existing directory."""

    def __init__(self, start_path: str):
        super().__init__(f"Start path must be an existing directory: {start_path}")
        self.start_path = start_path
