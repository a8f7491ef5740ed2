"""Input validators for the repo_snapshot CLI.

This module provides validation functions for CLI input parameters in the repo_snapshot module.
It helps ensure that user inputs are usable before the discovery pipeline starts.

Links to third-party package documentation:
- Typer: https://typer.tiangolo.com/

Sample input:
    path = validate_start_path("~/projects/repo/src")
    path = validate_output_file("snapshot.json")
    validate_git_installed()

Expected output:
    "/home/user/projects/repo/src"  # If validation passes
    # OR raises a typer.BadParameter exception with a helpful error message
"""

import os
import subprocess
from typing import Optional

import typer

from repo_snapshot.core.config import CONFIG


def validate_start_path(path: str) -> str:
    """Validate the starting directory for discovery.

    Args:
        path: The directory path to validate

    Returns:
        The absolute, expanded directory path

    Raises:
        typer.BadParameter: If the path is not a readable directory
    """
    if not path:
        raise typer.BadParameter("Start path cannot be empty")

    expanded_path = os.path.abspath(os.path.expanduser(os.path.expandvars(path)))

    if not os.path.exists(expanded_path):
        raise typer.BadParameter(f"Path '{expanded_path}' does not exist")
    if not os.path.isdir(expanded_path):
        raise typer.BadParameter(f"Path '{expanded_path}' is not a directory")
    if not os.access(expanded_path, os.R_OK | os.X_OK):
        raise typer.BadParameter(f"Directory '{expanded_path}' is not readable")

    return expanded_path


def validate_output_file(path: Optional[str]) -> Optional[str]:
    """Validate an optional output file path; its parent directory must exist."""
    if path is None:
        return None

    expanded_path = os.path.abspath(os.path.expanduser(os.path.expandvars(path)))
    parent = os.path.dirname(expanded_path)
    if not os.path.isdir(parent):
        raise typer.BadParameter(f"Directory '{parent}' does not exist")
    if os.path.isdir(expanded_path):
        raise typer.BadParameter(f"Output path '{expanded_path}' is a directory")

    return expanded_path


def validate_git_installed() -> bool:
    """Check if Git is installed on the system.

    Returns:
        True if Git is installed

    Raises:
        typer.BadParameter: If Git is not installed
    """
    executable = CONFIG["git"]["executable"]
    try:
        result = subprocess.run(
            [executable, "--version"],
            capture_output=True,
            text=True,
            check=False
        )

        if result.returncode != 0:
            raise typer.BadParameter(
                "Git is not available on this system. Please install Git before using this tool."
            )

        return True

    except FileNotFoundError:
        raise typer.BadParameter(
            f"Git executable '{executable}' was not found. Please install Git before using this tool."
        )
