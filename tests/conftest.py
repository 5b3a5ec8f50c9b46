import sys
from pathlib import Path

import pytest

# Ensure repository root is on sys.path so tests can import the package
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

CONFIG_ENV_VARS = (
    "CALENDAR_ID",
    "SPREADSHEET_ID",
    "SHEET_NAME",
    "TITLE_PREFIX",
    "EVENT_SOURCE",
    "LOCAL_EVENTS_FILE",
    "SINK",
    "LOCAL_OUTPUT_CSV",
    "GOOGLE_CREDENTIALS_FILE",
    "GOOGLE_TOKEN_FILE",
    "DRY_RUN",
    "SCHEDULE_NAME",
)


@pytest.fixture(autouse=True)
def isolate_config(monkeypatch):
    """Ensure each test starts from a clean configuration environment."""
    for name in CONFIG_ENV_VARS:
        monkeypatch.delenv(name, raising=False)

    from ttrpg_session_logger.logging_config import set_event_id

    set_event_id(None)
    yield
    set_event_id(None)
