#!/usr/bin/env python3
"""
Constants for the Repository Snapshot Module

This module defines constants used throughout the discovery and aggregation
pipeline, ensuring consistent naming across the core and CLI layers.

This module is part of the Core Layer and should have no dependencies on
Presentation or Integration layers.

Sample input:
- None (module contains only constants)

Expected output:
- None (module contains only constants)
"""

import re
from typing import Pattern

# Directory whose presence marks a version-controlled root
DEFAULT_MARKER_DIR: str = ".git"

# Name of the local configuration file inside the marker directory
CONFIG_FILE_NAME: str = "config"

# Relative name used for the root node of a directory topology
SELF_SENTINEL: str = "."

# `url = <value>` anywhere on a line; the value is the rest of that line
URL_PATTERN: Pattern[str] = re.compile(r"url[ \t]*=[ \t]*(\S.*)")

# git log field/record separators (unit and record separator control chars)
LOG_FIELD_SEP: str = "\x1f"
LOG_RECORD_SEP: str = "\x1e"
LOG_FORMAT: str = LOG_FIELD_SEP.join(["%H", "%an", "%ae", "%aI", "%s", "%D"]) + LOG_RECORD_SEP

# Porcelain status codes that indicate an unresolved merge conflict
CONFLICT_CODES = frozenset({"DD", "AU", "UD", "UA", "DU", "AA", "UU"})

# Pipeline stage labels carried by fatal errors
STAGE_ROOT_SEARCH: str = "root_search"
STAGE_TOPOLOGY: str = "topology"
STAGE_ASSEMBLE: str = "assemble"
STAGE_INPUT: str = "input"


if __name__ == "__main__":
    """Validate module constants"""
    import sys

    all_validation_failures = []
    total_tests = 0

    # Test 1: URL pattern captures the value
    total_tests += 1
    match = URL_PATTERN.search("\turl=https://example.com/b.git")
    if not match or match.group(1) != "https://example.com/b.git":
        all_validation_failures.append(f"URL_PATTERN: unexpected match {match}")

    # Test 2: Log format carries six fields
    total_tests += 1
    if LOG_FORMAT.count(LOG_FIELD_SEP) != 5:
        all_validation_failures.append(f"LOG_FORMAT: expected 6 fields, got {LOG_FORMAT!r}")

    if all_validation_failures:
        print(f"❌ VALIDATION FAILED - {len(all_validation_failures)} of {total_tests} tests failed:")
        for failure in all_validation_failures:
            print(f"  - {failure}")
        sys.exit(1)
    else:
        print(f"✅ VALIDATION PASSED - All {total_tests} tests produced expected results")
        sys.exit(0)
