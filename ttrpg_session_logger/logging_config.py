"""
Logging configuration for ttrpg-session-logger.

Supports:
- Event ID tracking with formatted markers
- Multiple verbosity levels (MINIMAL, NORMAL, VERBOSE)
- File and console output
"""

import logging
import os
import sys
from contextvars import ContextVar
from datetime import datetime
from pathlib import Path
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

# Context variable to track the calendar event currently being processed
_event_id_context: ContextVar[Optional[str]] = ContextVar("event_id", default=None)

VERBOSITY_LEVELS = {
    "MINIMAL": logging.WARNING,
    "NORMAL": logging.INFO,
    "VERBOSE": logging.DEBUG,
}


class EventIDFormatter(logging.Formatter):
    """Formatter that prefixes records with the current event marker."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self._tz = self._get_timezone()

    def _get_timezone(self):
        """Get server timezone from SERVER_TZ env var."""
        tz_name = os.getenv("SERVER_TZ")
        if tz_name:
            try:
                return ZoneInfo(tz_name)
            except (ZoneInfoNotFoundError, ValueError):
                pass
        # Fallback to local system timezone
        return datetime.now().astimezone().tzinfo

    def formatTime(self, record, datefmt=None):
        """Override formatTime to use server timezone."""
        dt = datetime.fromtimestamp(record.created, tz=self._tz)
        if datefmt:
            return dt.strftime(datefmt)
        return dt.isoformat()

    def format(self, record: logging.LogRecord) -> str:
        event_id = _event_id_context.get()
        base_msg = super().format(record)
        if event_id:
            return f"[{event_id}] {base_msg}"
        return base_msg


class VerbosityFilter(logging.Filter):
    """Filter that controls which records are logged based on verbosity level."""

    def __init__(self, verbosity_level: str):
        """Initialize filter with verbosity level.

        Args:
            verbosity_level: One of 'MINIMAL', 'NORMAL', 'VERBOSE'
        """
        super().__init__()
        self.verbosity_level = verbosity_level.upper()
        self.min_level = VERBOSITY_LEVELS.get(self.verbosity_level, logging.INFO)

    def filter(self, record: logging.LogRecord) -> bool:
        return record.levelno >= self.min_level


def set_event_id(event_id: Optional[str]) -> None:
    """Set the current event ID for log formatting.

    Args:
        event_id: Event marker (e.g., 'Curse of Strahd: #3 @ 2026-10-19')
            or None to clear
    """
    _event_id_context.set(event_id)


def get_event_id() -> Optional[str]:
    """Get the current event ID."""
    return _event_id_context.get()


def configure_logging(
    verbosity: str = "NORMAL", log_file: Optional[str] = None
) -> None:
    """Configure logging with event markers and verbosity levels.

    Args:
        verbosity: One of 'MINIMAL', 'NORMAL', 'VERBOSE'
        log_file: Optional path to write logs to file (in addition to stdout)
    """
    verbosity = verbosity.upper()
    if verbosity not in VERBOSITY_LEVELS:
        raise ValueError(
            f"Invalid verbosity level: {verbosity}. Must be MINIMAL, NORMAL, or VERBOSE"
        )

    formatter = EventIDFormatter(
        fmt="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    verbosity_filter = VerbosityFilter(verbosity)

    root_logger = logging.getLogger()
    # Allow all levels through; filter controls output
    root_logger.setLevel(logging.DEBUG)
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    console_handler.addFilter(verbosity_filter)
    root_logger.addHandler(console_handler)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path, encoding="utf-8")
        file_handler.setFormatter(formatter)
        file_handler.addFilter(verbosity_filter)
        root_logger.addHandler(file_handler)

    # Google client libraries are chatty at DEBUG
    for noisy in ("googleapiclient.discovery", "googleapiclient.discovery_cache"):
        logging.getLogger(noisy).setLevel(logging.WARNING)
