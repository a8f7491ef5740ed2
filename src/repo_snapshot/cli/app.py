"""Command-line interface for the repo_snapshot module.

This module provides a Typer-based CLI for repo_snapshot functionality, allowing users
to locate a repository root, inspect its directory topology, list the remote URLs in
its local config and build a full snapshot.

Links to third-party package documentation:
- Typer: https://typer.tiangolo.com/
- Rich: https://rich.readthedocs.io/en/latest/

Sample input:
    $ repo-snapshot snapshot ~/projects/repo/src
    $ repo-snapshot snapshot ~/projects/repo --format=json --output=snapshot.json
    $ repo-snapshot root ~/projects/repo/src/app
    $ repo-snapshot tree ~/projects/repo --max-depth=2
    $ repo-snapshot urls ~/projects/repo

Expected output:
    ✅ Snapshot built for repo
    /home/user/projects/repo
    https://github.com/user/repo.git
"""

import asyncio
import json
import sys
from enum import Enum
from typing import Optional

import typer
from loguru import logger

from repo_snapshot.core.aggregator import fetch_snapshot
from repo_snapshot.core.config import CONFIG
from repo_snapshot.core.config_urls import config_file_path, read_config_urls
from repo_snapshot.core.errors import NoRepositoryFound, SnapshotError
from repo_snapshot.core.git_backend import GitCliBackend, VcsBackend
from repo_snapshot.core.root_locator import locate_root_sync
from repo_snapshot.core.topology import build_topology_sync

from .formatters import (
    print_success, print_error, print_warning, print_info,
    print_snapshot_summary, print_commits_table, print_diff_table,
    print_directory_tree, get_spinner
)
from .validators import validate_start_path, validate_output_file, validate_git_installed


class OutputFormat(str, Enum):
    """Output format enum."""
    SUMMARY = "summary"
    JSON = "json"
    TREE = "tree"


# Create Typer app
app = typer.Typer(
    name="repo-snapshot",
    help="Repository discovery and snapshot tool",
    rich_markup_mode="rich"
)


@app.callback()
def main_callback(
    log_level: str = typer.Option(
        CONFIG["logging"]["level"],
        "--log-level",
        "-l",
        help="Set logging level (DEBUG, INFO, WARNING, ERROR).",
        envvar="LOG_LEVEL",
    ),
):
    """Main callback to configure logging for the CLI."""
    log_level = log_level.upper()
    valid_levels = ["TRACE", "DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
    if log_level not in valid_levels:
        print(
            f"Warning: Invalid log level '{log_level}'. Defaulting to INFO.",
            file=sys.stderr,
        )
        log_level = "INFO"

    logger.remove()  # Remove default handler
    logger.add(
        sys.stderr,
        level=log_level,
        format="{time:HH:mm:ss} | {level: <7} | {message}",
        backtrace=False,
        diagnose=False,
    )


def get_backend() -> VcsBackend:
    """Create the git backend after checking that git is available."""
    validate_git_installed()
    return GitCliBackend()


def _locate_or_exit(path: str, max_depth: Optional[int] = None) -> str:
    try:
        root = locate_root_sync(path, max_depth=max_depth)
    except SnapshotError as e:
        print_error(str(e))
        sys.exit(1)
    if root is None:
        print_error(str(NoRepositoryFound(path, CONFIG["discovery"]["marker_dir"])))
        sys.exit(1)
    return root


@app.command("snapshot")
def snapshot_command(
    path: str = typer.Argument(
        ".",
        callback=validate_start_path,
        help="Directory to start repository discovery from"
    ),
    output_format: OutputFormat = typer.Option(
        OutputFormat.SUMMARY,
        "--format", "-f",
        help="Output format (summary, json, tree)"
    ),
    output_file: Optional[str] = typer.Option(
        None,
        "--output", "-o",
        callback=validate_output_file,
        help="Path to save the JSON snapshot (if not specified, prints to console)"
    ),
    max_depth: Optional[int] = typer.Option(
        None,
        "--max-depth", "-d",
        min=0,
        help="Limit directory traversal depth"
    ),
    commit_limit: int = typer.Option(
        10,
        "--commits", "-n",
        min=0,
        help="Number of commits to show in summary output"
    ),
) -> None:
    """Build a snapshot of the repository enclosing PATH.

    Examples:
        [bold]$ repo-snapshot snapshot .[/bold]

        [bold]$ repo-snapshot snapshot --format=json --output=snapshot.json ~/projects/repo[/bold]
    """
    backend = get_backend()

    with get_spinner("Building snapshot"):
        try:
            snapshot = fetch_snapshot(
                path,
                backend=backend,
                error_reporter=print_error,
                max_depth=max_depth
            )
        except SnapshotError as e:
            print_error(f"Error fetching repository info ({e.stage}): {e}")
            sys.exit(1)

    if output_file:
        with open(output_file, "w", encoding="utf-8") as f:
            f.write(snapshot.model_dump_json(indent=2))
        print_success(f"Snapshot of {snapshot.root_folder_name} saved to {output_file}")
        return

    if output_format == OutputFormat.JSON:
        typer.echo(json.dumps(snapshot.model_dump(mode="json"), indent=2))
        return

    if output_format == OutputFormat.TREE:
        print_directory_tree(snapshot.directory_topology)
        return

    print_success(f"Snapshot built for {snapshot.root_folder_name}")
    if not snapshot.remote_url:
        print_warning("No remote URL configured")
    print_snapshot_summary(snapshot)
    if commit_limit:
        print_commits_table(snapshot.commit_history, limit=commit_limit)
        if snapshot.working_tree_status.tracking:
            print_commits_table(
                snapshot.tracking_branch_history,
                title=f"History of {snapshot.working_tree_status.tracking}",
                limit=commit_limit
            )
    print_diff_table(snapshot.commit_diff_stats)


@app.command("root")
def root_command(
    path: str = typer.Argument(
        ".",
        callback=validate_start_path,
        help="Directory to start repository discovery from"
    ),
    max_depth: Optional[int] = typer.Option(
        None,
        "--max-depth", "-d",
        min=0,
        help="Limit how deep the subtree search descends"
    ),
) -> None:
    """Print the repository root enclosing PATH."""
    typer.echo(_locate_or_exit(path, max_depth))


@app.command("tree")
def tree_command(
    path: str = typer.Argument(
        ".",
        callback=validate_start_path,
        help="Directory to start repository discovery from"
    ),
    max_depth: Optional[int] = typer.Option(
        None,
        "--max-depth", "-d",
        min=0,
        help="Limit directory traversal depth"
    ),
) -> None:
    """Print the directory topology of the repository enclosing PATH."""
    root = _locate_or_exit(path)
    try:
        topology = build_topology_sync(root, max_depth=max_depth)
    except SnapshotError as e:
        print_error(str(e))
        sys.exit(1)
    print_directory_tree(topology)
    print_info(f"{topology.count()} directories")


@app.command("urls")
def urls_command(
    path: str = typer.Argument(
        ".",
        callback=validate_start_path,
        help="Directory to start repository discovery from"
    ),
) -> None:
    """List the remote URLs declared in the repository's local config file."""
    root = _locate_or_exit(path)
    try:
        urls = asyncio.run(read_config_urls(root))
    except (OSError, UnicodeDecodeError) as e:
        print_error(f"Error reading config file {config_file_path(root)}: {e}")
        sys.exit(1)

    if not urls:
        print_warning("No URLs found in config file")
        return
    for url in urls:
        typer.echo(url)
