#!/usr/bin/env python3
"""
Config URL Extraction Module

This module pulls remote URLs out of the raw text of a git configuration
file with a line pattern, without parsing the file's sections. Any value
following `url =` is accepted verbatim apart from trailing whitespace.

This module is part of the Core Layer and should have no dependencies on
Presentation or Integration layers.

Links to documentation:
- git config file syntax: https://git-scm.com/docs/git-config#_syntax

Sample input:
    [remote "origin"]
        url = https://example.com/a.git
        fetch = +refs/heads/*:refs/remotes/origin/*

Expected output:
    ["https://example.com/a.git"]
"""

import os
from typing import List, Optional

from loguru import logger

from repo_snapshot.core.config import CONFIG
from repo_snapshot.core.constants import CONFIG_FILE_NAME, URL_PATTERN
from repo_snapshot.core.fs_reader import FilesystemReader, LocalFilesystemReader


def extract_urls(raw_text: str) -> List[str]:
    """
    Extract every `url = <value>` value from config text.

    Args:
        raw_text: Raw configuration file content

    Returns:
        List[str]: Values in order of appearance, duplicates included
    """
    return [match.group(1).rstrip() for match in URL_PATTERN.finditer(raw_text)]


def config_file_path(root: str, marker: Optional[str] = None) -> str:
    marker = marker or CONFIG["discovery"]["marker_dir"]
    return os.path.join(root, marker, CONFIG_FILE_NAME)


async def read_config_urls(
    root: str,
    reader: Optional[FilesystemReader] = None,
    marker: Optional[str] = None,
) -> List[str]:
    """
    Read the local config file of a repository and extract its URLs.

    Args:
        root: Repository root
        reader: Filesystem reader (defaults to the local filesystem)
        marker: Marker directory name (defaults to CONFIG)

    Returns:
        List[str]: URLs declared in the config file

    Raises:
        OSError: If the config file cannot be read
        UnicodeDecodeError: If the config file is not valid text
    """
    reader = reader or LocalFilesystemReader()
    path = config_file_path(root, marker)
    content = await reader.read_text(path)
    urls = extract_urls(content)
    logger.debug(f"Found {len(urls)} url(s) in {path}")
    return urls


if __name__ == "__main__":
    """Validate URL extraction with real config text"""
    import sys

    all_validation_failures = []
    total_tests = 0

    # Test 1: Leading whitespace and missing spaces around '='
    total_tests += 1
    text = "  url = https://example.com/a.git\n\turl=https://example.com/b.git"
    expected = ["https://example.com/a.git", "https://example.com/b.git"]
    actual = extract_urls(text)
    if actual != expected:
        all_validation_failures.append(f"Basic extraction: Expected {expected}, got {actual}")

    # Test 2: Unrelated lines are ignored, duplicates kept
    total_tests += 1
    text = (
        "[core]\n\tbare = false\n"
        "[remote \"origin\"]\n\turl = git@github.com:user/repo.git   \n"
        "\tfetch = +refs/heads/*:refs/remotes/origin/*\n"
        "[remote \"mirror\"]\n\turl = git@github.com:user/repo.git\n"
    )
    expected = ["git@github.com:user/repo.git", "git@github.com:user/repo.git"]
    actual = extract_urls(text)
    if actual != expected:
        all_validation_failures.append(f"Mixed config: Expected {expected}, got {actual}")

    if all_validation_failures:
        print(f"❌ VALIDATION FAILED - {len(all_validation_failures)} of {total_tests} tests failed:")
        for failure in all_validation_failures:
            print(f"  - {failure}")
        sys.exit(1)
    else:
        print(f"✅ VALIDATION PASSED - All {total_tests} tests produced expected results")
        sys.exit(0)
