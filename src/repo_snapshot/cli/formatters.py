"""Rich-based formatters for CLI output in the repo_snapshot module.

This module provides formatted console output for the repo_snapshot CLI using the Rich library.
It includes functions for status messages, the snapshot summary panel, commit and diff tables,
and the directory topology tree.

Links to third-party package documentation:
- Rich: https://rich.readthedocs.io/en/latest/
- Rich Tables: https://rich.readthedocs.io/en/latest/tables.html
- Rich Tree: https://rich.readthedocs.io/en/latest/tree.html

Sample input:
    print_success("Snapshot built")
    print_error("No Git repository found")
    print_snapshot_summary(snapshot)
    print_directory_tree(snapshot.directory_topology)

Expected output:
    ✅ Snapshot built
    ❌ Error: No Git repository found

    ╭──────────── Repository Summary ────────────╮
    │ Repository: repo                           │
    │ Remote: https://github.com/user/repo.git   │
    │ Branch: main (tracking origin/main)        │
    ╰────────────────────────────────────────────╯
"""

import os
from typing import List, Sequence, Tuple

from loguru import logger
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table
from rich.text import Text
from rich.tree import Tree

from repo_snapshot.core.models import CommitRecord, DiffStat, DirectoryNode, RepositorySnapshot, WorkingTreeStatus

# Create console instance
console = Console()


def print_success(message: str) -> None:
    """Print a success message to the console with a green checkmark.

    Args:
        message: The success message to display
    """
    console.print(f"✅ [bold green]{escape(message)}[/]")
    logger.success(message)


def print_error(message: str) -> None:
    """Print an error message to the console with a red X.

    Args:
        message: The error message to display
    """
    console.print(f"❌ [bold red]Error:[/] {escape(message)}")
    logger.error(message)


def print_warning(message: str) -> None:
    """Print a warning message to the console with a yellow warning sign.

    Args:
        message: The warning message to display
    """
    console.print(f"⚠️ [bold yellow]Warning:[/] {escape(message)}")
    logger.warning(message)


def print_info(message: str) -> None:
    """Print an info message to the console with a blue info sign."""
    console.print(f"ℹ️ [bold blue]Info:[/] {escape(message)}")
    logger.info(message)


def _branch_line(status: WorkingTreeStatus, current_branch: str) -> str:
    line = current_branch
    if status.tracking:
        line += f" (tracking {status.tracking}"
        if status.upstream_gone:
            line += ", gone"
        elif status.ahead or status.behind:
            line += f", ahead {status.ahead}, behind {status.behind}"
        line += ")"
    return line


def print_snapshot_summary(snapshot: RepositorySnapshot) -> None:
    """Print a summary panel for a repository snapshot.

    Args:
        snapshot: The snapshot to summarise
    """
    status = snapshot.working_tree_status
    urls = escape(", ".join(snapshot.remote_config_urls) or "-")
    panel = Panel(
        Text.from_markup(
            f"[bold blue]Repository:[/] {escape(snapshot.root_folder_name)}\n"
            f"[bold blue]Root:[/] {escape(snapshot.root_path)}\n"
            f"[bold blue]Remote:[/] {escape(snapshot.remote_url or '-')}\n"
            f"[bold blue]Branch:[/] {escape(_branch_line(status, snapshot.current_branch))}\n"
            f"[bold blue]Staged:[/] {len(status.staged)}  "
            f"[bold blue]Unstaged:[/] {len(status.unstaged)}  "
            f"[bold blue]Untracked:[/] {len(status.untracked)}  "
            f"[bold blue]Conflicted:[/] {len(status.conflicted)}\n"
            f"[bold blue]Commits:[/] {len(snapshot.commit_history)}\n"
            f"[bold blue]Tracking Commits:[/] {len(snapshot.tracking_branch_history)}\n"
            f"[bold blue]Directories:[/] {snapshot.directory_topology.count()}\n"
            f"[bold blue]Config URLs:[/] {urls}"
        ),
        title="Repository Summary",
        border_style="green"
    )
    console.print(panel)


def print_commits_table(commits: Sequence[CommitRecord], title: str = "Commit History", limit: int = 10) -> None:
    """Print a table of the most recent commits.

    Args:
        commits: Commits, newest first
        title: Table title
        limit: Maximum number of rows to show
    """
    if not commits:
        print_warning("No commits found")
        return

    table = Table(title=title)
    table.add_column("Hash", style="yellow")
    table.add_column("Date", style="green")
    table.add_column("Author", style="cyan")
    table.add_column("Subject")

    for commit in commits[:limit]:
        table.add_row(
            commit.hash[:8],
            commit.date.strftime("%Y-%m-%d %H:%M"),
            Text(commit.author_name),
            Text(commit.subject),
        )

    console.print(table)
    if len(commits) > limit:
        console.print(f"[dim]... {len(commits) - limit} more[/]")


def print_diff_table(stats: Sequence[DiffStat]) -> None:
    """Print per-file insertions and deletions."""
    if not stats:
        print_info("Working tree has no unstaged changes")
        return

    table = Table(title="Working Tree Diff")
    table.add_column("Path", style="cyan")
    table.add_column("+", justify="right", style="green")
    table.add_column("-", justify="right", style="red")

    for stat in stats:
        if stat.binary:
            table.add_row(Text(stat.path), "bin", "bin")
        else:
            table.add_row(Text(stat.path), str(stat.insertions), str(stat.deletions))

    console.print(table)


def print_directory_tree(topology: DirectoryNode) -> None:
    """Print a tree representation of a directory topology.

    Args:
        topology: Root node of the topology
    """
    tree = Tree(f"📁 [bold blue]{escape(topology.absolute_path)}[/]")
    stack: List[Tuple[DirectoryNode, Tree]] = [(topology, tree)]

    while stack:
        node, branch = stack.pop()
        pending = []
        for child in node.children:
            label = os.path.basename(child.absolute_path)
            pending.append((child, branch.add(f"📁 [bold blue]{escape(label)}[/]")))
        stack.extend(reversed(pending))

    console.print(tree)


def get_spinner(text: str) -> Progress:
    """Create and return a spinner progress indicator.

    Args:
        text: Text to display next to the spinner

    Returns:
        A Progress object that can be used in a context manager
    """
    return Progress(
        SpinnerColumn(),
        TextColumn(f"[bold blue]{text}[/]"),
        transient=True
    )
