"""
Configuration for the preference store, read from the environment.
A ``.env`` file in the working directory is loaded first.
"""

import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

# Database path configuration
PREFS_DB_PATH = os.getenv("PREFS_DB_PATH", "./data/prefs.db")

DEBUG = os.getenv("DEBUG", "false").lower() == "true"

# HTTP surface (default enabled)
PREFS_API_ENABLED = os.getenv("PREFS_API_ENABLED", "true").lower() == "true"

# Sort find/list results by primary key instead of storage order
PREFS_DETERMINISTIC_ORDER = os.getenv("PREFS_DETERMINISTIC_ORDER", "false").lower() == "true"

PREFS_LOG_LEVEL = os.getenv("PREFS_LOG_LEVEL", "INFO").upper()

# Version string
VERSION = "1.0.0"


def get_db_path() -> str:
    """Get the configured database path, honouring late environment changes."""
    return os.getenv("PREFS_DB_PATH", PREFS_DB_PATH)


def debug_enabled():
    """Check if debug mode is enabled."""
    return os.getenv("DEBUG", "false").lower() == "true"


def deterministic_order():
    """Check if result sets should be sorted by primary key."""
    return os.getenv("PREFS_DETERMINISTIC_ORDER", "false").lower() == "true"


def api_enabled():
    """Check if the HTTP API should serve pref routes."""
    return os.getenv("PREFS_API_ENABLED", "true").lower() == "true"


def ensure_db_directory(db_path: str = None):
    """Ensure the database directory exists."""
    Path(db_path or get_db_path()).parent.mkdir(parents=True, exist_ok=True)


def validate_config():
    """Validate configuration and return any issues."""
    issues = []

    if not get_db_path():
        issues.append("PREFS_DB_PATH must not be empty")

    if PREFS_LOG_LEVEL not in ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]:
        issues.append(f"Invalid PREFS_LOG_LEVEL: {PREFS_LOG_LEVEL}")

    return issues
