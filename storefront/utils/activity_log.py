"""Append-only audit trail of catalog and order mutations.

Each line looks like ``[2026-01-31T12:00:00.000000+00:00] Product created (id=1, name=Mug)``.
Writes are best effort: a failure is logged and never reaches the caller.
"""

import logging
import os
from datetime import datetime, timezone

from flask import current_app

logger = logging.getLogger(__name__)


def ensure_log_file(path: str) -> None:
    """Create the log file (and its directory) if it does not exist yet."""
    directory = os.path.dirname(path)
    if directory:
        os.makedirs(directory, exist_ok=True)
    with open(path, "a", encoding="utf-8"):
        pass


def format_line(message: str, when: datetime = None) -> str:
    when = when or datetime.now(timezone.utc)
    return f"[{when.isoformat()}] {message}\n"


def log_activity(message: str, path: str = None) -> bool:
    """Append ``message`` to the activity log. Returns False if it could not be written."""
    path = path or current_app.config["ACTIVITY_LOG_PATH"]
    try:
        ensure_log_file(path)
        with open(path, "a", encoding="utf-8") as fh:
            fh.write(format_line(message))
    except OSError:
        logger.warning("Could not write activity log entry to %s", path, exc_info=True)
        return False
    return True
