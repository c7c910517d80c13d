"""Utility-Module für FloatScribe.

Gemeinsame Hilfsfunktionen für Logging und Zeitmessung.

Usage:
    from utils import setup_logging, log, error, timed_operation

    setup_logging(debug=True)
    with timed_operation("API-Call"):
        do_something()
"""

# NOTE:
# Nur Module re-exportieren, die config nicht importieren (utils.preferences
# importiert config und refine, daher hier nicht).

from .logging import setup_logging, log, error, get_logger, get_session_id, mask_secret
from .timing import timed_operation, format_duration, format_bytes, log_preview

__all__ = [
    "setup_logging",
    "log",
    "error",
    "get_logger",
    "get_session_id",
    "mask_secret",
    "timed_operation",
    "log_preview",
    "format_duration",
    "format_bytes",
]
