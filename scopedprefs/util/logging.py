"""
Structured logging for preference storage and resolution.
Every module logs through the shared ``logger`` instance below.
"""

import logging
import os
from typing import Any, Dict

VALUE_PREVIEW_LEN = 50


class StructuredLogger:
    """Structured logger for pref reads, writes and storage failures."""

    def __init__(self, name: str = "scopedprefs"):
        self.logger = logging.getLogger(name)
        level = os.getenv("PREFS_LOG_LEVEL", "INFO").upper()
        self.logger.setLevel(getattr(logging, level, logging.INFO))

        # Create handler if not already set
        if not self.logger.handlers:
            handler = logging.StreamHandler()
            formatter = logging.Formatter(
                '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
            )
            handler.setFormatter(formatter)
            self.logger.addHandler(handler)

    def log_operation(self, operation: str, status: str, details: Dict[str, Any] = None):
        """Log a structured operation."""
        message = f"Operation: {operation}, Status: {status}"
        if details:
            message += f", Details: {details}"

        if status in ("failed", "corrupt"):
            self.logger.error(message)
        else:
            self.logger.info(message)

    def log_pref_operation(self, operation: str, pref, status: str = "success", details: Dict[str, Any] = None):
        """Log a pref read or write, identified by its scope and key."""
        log_details = {
            "user": pref.user,
            "channel": pref.channel,
            "broker": pref.broker,
            "plugin": pref.plugin,
            "key": pref.key,
        }
        if pref.value:
            value = pref.value
            log_details["value"] = value[:VALUE_PREVIEW_LEN] + "..." if len(value) > VALUE_PREVIEW_LEN else value
        if details:
            log_details.update(details)

        self.log_operation(f"prefs.{operation}", status, log_details)

    def log_query_failure(self, sql: str, error: Exception):
        """Log a failed SQL statement along with the statement text."""
        self.logger.error(" ".join(sql.split()))
        self.log_operation("prefs.query", "failed", {"error": str(error)[:100]})

    def log_corruption(self, scope: tuple, key: str, count: int):
        """Log a uniqueness violation on the prefs primary key."""
        self.log_operation("prefs.get_exact", "corrupt", {
            "scope": scope,
            "key": key,
            "rows": count,
        })

    # Standard logging methods for compatibility
    def info(self, message: str) -> None:
        """Log an info message."""
        self.logger.info(message)

    def warning(self, message: str) -> None:
        """Log a warning message."""
        self.logger.warning(message)

    def error(self, message: str) -> None:
        """Log an error message."""
        self.logger.error(message)

    def debug(self, message: str) -> None:
        """Log a debug message."""
        self.logger.debug(message)


# Global logger instance
logger = StructuredLogger()
