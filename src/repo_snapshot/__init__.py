"""Repository discovery and snapshot module.

This module locates the version-controlled root enclosing a directory and
assembles a single immutable snapshot of it: remote, branch, status, history,
diff summary, tracking-branch history, directory topology and config URLs.

Links to third-party package documentation:
- Pydantic: https://docs.pydantic.dev/latest/
- Loguru: https://loguru.readthedocs.io/en/stable/
- Typer: https://typer.tiangolo.com/

Sample input:
    >>> from repo_snapshot import fetch_snapshot
    >>> snapshot = fetch_snapshot("/path/to/repo/src")

Expected output:
    >>> snapshot.root_folder_name
    'repo'
    >>> snapshot.remote_config_urls
    ('https://github.com/user/repo.git',)
"""

# Version
__version__ = "0.1.0"

from .core.aggregator import build_snapshot, fetch_snapshot, describe_repository
from .core.root_locator import locate_root
from .core.topology import build_topology
from .core.config_urls import extract_urls
from .core.models import RepositorySnapshot, DirectoryNode
from .core.errors import SnapshotError, NoRepositoryFound, BackendUnavailable, FilesystemReadError, InvalidStartPath

__all__ = [
    # Core functions
    "build_snapshot",
    "fetch_snapshot",
    "describe_repository",
    "locate_root",
    "build_topology",
    "extract_urls",

    # Models
    "RepositorySnapshot",
    "DirectoryNode",

    # Errors
    "SnapshotError",
    "NoRepositoryFound",
    "BackendUnavailable",
    "FilesystemReadError",
    "InvalidStartPath",

    # Version
    "__version__"
]
