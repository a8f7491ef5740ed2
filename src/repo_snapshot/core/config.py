# src/repo_snapshot/core/config.py
"""
Module Description:
Defines the central configuration dictionary (CONFIG) for repo_snapshot.
Loads settings from environment variables using python-dotenv for root
discovery, the git backend and logging. Includes a validation function that
reports malformed values.

Links:
- python-dotenv: https://github.com/theskumar/python-dotenv
- os module: https://docs.python.org/3/library/os.html

Sample Input/Output:

- Accessing config values:
  from repo_snapshot.core.config import CONFIG
  marker = CONFIG["discovery"]["marker_dir"]
  timeout = CONFIG["git"]["timeout"]

- Running validation:
  python -m repo_snapshot.core.config
  (Prints validation status and exits with 0 or 1)
"""
import os
import sys
from typing import Optional

from dotenv import load_dotenv
from loguru import logger

from repo_snapshot.core.constants import DEFAULT_MARKER_DIR

# Load environment variables
load_dotenv()


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def _env_int(name: str) -> Optional[int]:
    value = os.getenv(name)
    if value is None or not value.strip():
        return None
    try:
        return int(value)
    except ValueError:
        logger.warning(f"Ignoring non-integer {name}={value!r}")
        return None


def _env_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    try:
        return float(value)
    except ValueError:
        logger.warning(f"Ignoring non-numeric {name}={value!r}")
        return default


# Configuration
CONFIG = {
    "discovery": {
        "marker_dir": os.getenv("REPO_SNAPSHOT_MARKER_DIR", DEFAULT_MARKER_DIR),
        "search_parents": _env_bool("REPO_SNAPSHOT_SEARCH_PARENTS", True),
        "follow_symlinks": _env_bool("REPO_SNAPSHOT_FOLLOW_SYMLINKS", False),
        "max_depth": _env_int("REPO_SNAPSHOT_MAX_DEPTH"),  # None means unbounded
    },
    "git": {
        "executable": os.getenv("REPO_SNAPSHOT_GIT", "git"),
        "timeout": _env_float("REPO_SNAPSHOT_GIT_TIMEOUT", 30.0),  # seconds per git call
        "log_max_count": _env_int("REPO_SNAPSHOT_LOG_MAX_COUNT"),  # None means full history
    },
    "logging": {
        "level": os.getenv("LOG_LEVEL", "INFO").upper(),
    },
}


def validate_config() -> bool:
    """
    Validate the loaded configuration.
    Returns True if valid, False otherwise. Logs errors.
    """
    validation_passed = True
    problems = []

    marker = CONFIG["discovery"]["marker_dir"]
    if not marker or os.sep in marker:
        problems.append(f"REPO_SNAPSHOT_MARKER_DIR must be a plain directory name, got {marker!r}")

    max_depth = CONFIG["discovery"]["max_depth"]
    if max_depth is not None and max_depth < 0:
        problems.append(f"REPO_SNAPSHOT_MAX_DEPTH must be >= 0, got {max_depth}")

    if CONFIG["git"]["timeout"] <= 0:
        problems.append(f"REPO_SNAPSHOT_GIT_TIMEOUT must be positive, got {CONFIG['git']['timeout']}")

    log_max_count = CONFIG["git"]["log_max_count"]
    if log_max_count is not None and log_max_count < 1:
        problems.append(f"REPO_SNAPSHOT_LOG_MAX_COUNT must be >= 1, got {log_max_count}")

    if CONFIG["logging"]["level"] not in ("TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"):
        problems.append(f"LOG_LEVEL is not a loguru level: {CONFIG['logging']['level']}")

    for problem in problems:
        logger.error(problem)
        validation_passed = False

    if validation_passed:
        logger.info("Configuration validated successfully.")
    else:
        logger.error(f"Validation failed with {len(problems)} problem(s).")

    return validation_passed


if __name__ == "__main__":
    logger.remove()
    logger.add(sys.stderr, level="INFO")

    if validate_config():
        print("✅ VALIDATION PASSED - configuration is usable")
        sys.exit(0)
    else:
        print("❌ VALIDATION FAILED - see log output above")
        sys.exit(1)
