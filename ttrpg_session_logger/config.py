"""
Configuration settings for ttrpg-session-logger.

All settings can be overridden via environment variables or .env file.
See .env.example for all available options.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional


class ConfigurationError(RuntimeError):
    """A required setting is missing or does not resolve to a usable resource."""

    def __init__(self, message: str, setting: Optional[str] = None, value=None):
        super().__init__(message)
        self.setting = setting
        self.value = value


def get_env_bool(key: str, default: bool) -> bool:
    """Get boolean from environment variable."""
    value = os.getenv(key)
    if value is None:
        return default
    return value.lower() in ("true", "1", "yes", "on")


def _unquote(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] and value[0] in ("'", '"'):
        return value[1:-1]
    return value


# Load .env file if it exists (for local development)
def load_dotenv(env_file: Optional[Path] = None):
    """Load environment variables from .env file if it exists.

    Looks in the working directory first, then the project root. Values
    keep their whitespace (TITLE_PREFIX ends in a space); wrap a value in
    quotes to make that visible.
    """
    if env_file is None:
        candidates = [Path.cwd() / ".env", Path(__file__).parent.parent / ".env"]
        env_file = next((p for p in candidates if p.exists()), candidates[-1])
    if env_file.exists():
        with open(env_file) as f:
            for line in f:
                line = line.rstrip("\r\n").lstrip()
                if line and not line.startswith("#") and "=" in line:
                    key, value = line.split("=", 1)
                    key = key.strip()
                    if key not in os.environ:
                        os.environ[key] = _unquote(value)


load_dotenv()

# =============================================================================
# DATA STORAGE
# =============================================================================
# Base directory for local files (OAuth token, CSV output, logs).
DATA_DIR = os.getenv("DATA_DIR", "./data")

DEFAULT_SHEET_NAME = "Sessions"
DEFAULT_SCHEDULE_NAME = "ttrpg-session-logger-daily"

EVENT_SOURCES = ("google", "file")
SINKS = ("google", "csv")

# Logging configuration
LOG_VERBOSITY = os.getenv("LOG_VERBOSITY", "NORMAL")  # MINIMAL, NORMAL, or VERBOSE
LOG_FILE = os.getenv("LOG_FILE") or None  # Write logs to file (in addition to stdout)

# Validate LOG_VERBOSITY
if LOG_VERBOSITY.upper() not in ("MINIMAL", "NORMAL", "VERBOSE"):
    raise ValueError(
        f"Invalid LOG_VERBOSITY: {LOG_VERBOSITY}. Must be MINIMAL, NORMAL, or VERBOSE"
    )


@dataclass
class SessionLogConfig:
    """Settings for one run, loaded once and passed to the entry points."""

    calendar_id: str = ""
    spreadsheet_id: str = ""
    sheet_name: str = DEFAULT_SHEET_NAME
    # Empty prefix disables title filtering
    title_prefix: str = ""

    # "google" or "file"
    event_source: str = "google"
    local_events_file: Optional[str] = None

    # "google" or "csv"
    sink: str = "google"
    local_output_csv: str = os.path.join(DATA_DIR, "sessions.csv")

    credentials_file: str = "./credentials.json"
    token_file: str = os.path.join(DATA_DIR, "token.json")

    dry_run: bool = False
    schedule_name: str = DEFAULT_SCHEDULE_NAME

    @classmethod
    def from_env(cls) -> "SessionLogConfig":
        """Build a config from the current environment."""
        return cls(
            calendar_id=os.getenv("CALENDAR_ID", "").strip(),
            spreadsheet_id=os.getenv("SPREADSHEET_ID", "").strip(),
            sheet_name=os.getenv("SHEET_NAME", DEFAULT_SHEET_NAME).strip()
            or DEFAULT_SHEET_NAME,
            # Not stripped: trailing spaces are part of the prefix ("TTRPG - ")
            title_prefix=os.getenv("TITLE_PREFIX", ""),
            event_source=os.getenv("EVENT_SOURCE", "google").strip().lower(),
            local_events_file=os.getenv("LOCAL_EVENTS_FILE") or None,
            sink=os.getenv("SINK", "google").strip().lower(),
            local_output_csv=os.getenv(
                "LOCAL_OUTPUT_CSV", os.path.join(DATA_DIR, "sessions.csv")
            ),
            credentials_file=os.getenv(
                "GOOGLE_CREDENTIALS_FILE", "./credentials.json"
            ),
            token_file=os.getenv(
                "GOOGLE_TOKEN_FILE", os.path.join(DATA_DIR, "token.json")
            ),
            dry_run=get_env_bool("DRY_RUN", False),
            schedule_name=os.getenv("SCHEDULE_NAME", DEFAULT_SCHEDULE_NAME),
        )

    @property
    def uses_google(self) -> bool:
        return self.event_source == "google" or self.sink == "google"

    def validate(self) -> None:
        """Check that the selected adapters have what they need.

        Raises:
            ConfigurationError: naming the first offending setting
        """
        if self.event_source not in EVENT_SOURCES:
            raise ConfigurationError(
                f"Unknown EVENT_SOURCE '{self.event_source}'. "
                f"Must be one of: {', '.join(EVENT_SOURCES)}",
                setting="EVENT_SOURCE",
                value=self.event_source,
            )
        if self.sink not in SINKS:
            raise ConfigurationError(
                f"Unknown SINK '{self.sink}'. Must be one of: {', '.join(SINKS)}",
                setting="SINK",
                value=self.sink,
            )
        if self.event_source == "google" and not self.calendar_id:
            raise ConfigurationError(
                "CALENDAR_ID is not set", setting="CALENDAR_ID", value=""
            )
        if self.event_source == "file" and not self.local_events_file:
            raise ConfigurationError(
                "LOCAL_EVENTS_FILE is required when EVENT_SOURCE=file",
                setting="LOCAL_EVENTS_FILE",
                value=self.local_events_file,
            )
        if self.sink == "google" and not self.spreadsheet_id:
            raise ConfigurationError(
                "SPREADSHEET_ID is not set", setting="SPREADSHEET_ID", value=""
            )


def load_config() -> SessionLogConfig:
    """Load and validate the run configuration from the environment."""
    config = SessionLogConfig.from_env()
    config.validate()
    return config
