import os

import pytest

from ttrpg_session_logger.config import (
    ConfigurationError,
    SessionLogConfig,
    get_env_bool,
    load_config,
    load_dotenv,
)
from ttrpg_session_logger.title_filter import TitleFilter


def test_defaults_from_empty_environment():
    config = SessionLogConfig.from_env()

    assert config.sheet_name == "Sessions"
    assert config.title_prefix == ""
    assert config.event_source == "google"
    assert config.sink == "google"
    assert config.dry_run is False


def test_from_env_reads_settings(monkeypatch):
    monkeypatch.setenv("CALENDAR_ID", " games@group.calendar.google.com ")
    monkeypatch.setenv("SPREADSHEET_ID", "sheet-key")
    monkeypatch.setenv("SHEET_NAME", "Log")
    monkeypatch.setenv("TITLE_PREFIX", "TTRPG - ")
    monkeypatch.setenv("DRY_RUN", "yes")

    config = load_config()

    assert config.calendar_id == "games@group.calendar.google.com"
    assert config.spreadsheet_id == "sheet-key"
    assert config.sheet_name == "Log"
    # Trailing whitespace is part of the prefix
    assert config.title_prefix == "TTRPG - "
    assert config.dry_run is True


def test_blank_sheet_name_falls_back_to_default(monkeypatch):
    monkeypatch.setenv("SHEET_NAME", "  ")

    assert SessionLogConfig.from_env().sheet_name == "Sessions"


def test_missing_calendar_id_is_configuration_error(monkeypatch):
    monkeypatch.setenv("SPREADSHEET_ID", "sheet-key")

    with pytest.raises(ConfigurationError) as excinfo:
        load_config()

    assert excinfo.value.setting == "CALENDAR_ID"


def test_missing_spreadsheet_id_is_configuration_error(monkeypatch):
    monkeypatch.setenv("CALENDAR_ID", "primary")

    with pytest.raises(ConfigurationError) as excinfo:
        load_config()

    assert excinfo.value.setting == "SPREADSHEET_ID"


def test_local_adapters_need_no_google_ids(monkeypatch, tmp_path):
    monkeypatch.setenv("EVENT_SOURCE", "file")
    monkeypatch.setenv("LOCAL_EVENTS_FILE", str(tmp_path / "events.json"))
    monkeypatch.setenv("SINK", "CSV")

    config = load_config()

    assert config.sink == "csv"
    assert not config.uses_google


def test_file_source_requires_events_file(monkeypatch):
    monkeypatch.setenv("EVENT_SOURCE", "file")
    monkeypatch.setenv("SINK", "csv")

    with pytest.raises(ConfigurationError) as excinfo:
        load_config()

    assert excinfo.value.setting == "LOCAL_EVENTS_FILE"


@pytest.mark.parametrize("name,value", [("EVENT_SOURCE", "outlook"), ("SINK", "excel")])
def test_unknown_adapter_rejected(monkeypatch, name, value):
    monkeypatch.setenv(name, value)

    with pytest.raises(ConfigurationError) as excinfo:
        load_config()

    assert excinfo.value.setting == name
    assert excinfo.value.value == value


def test_get_env_bool(monkeypatch):
    monkeypatch.setenv("SOME_FLAG", "On")
    assert get_env_bool("SOME_FLAG", False) is True
    monkeypatch.setenv("SOME_FLAG", "0")
    assert get_env_bool("SOME_FLAG", True) is False
    monkeypatch.delenv("SOME_FLAG")
    assert get_env_bool("SOME_FLAG", True) is True


def test_load_dotenv_does_not_override_environment(monkeypatch, tmp_path):
    env_file = tmp_path / ".env"
    env_file.write_text("# comment\nCALENDAR_ID=from-file\nSHEET_NAME=FromFile\n")
    monkeypatch.setenv("CALENDAR_ID", "from-env")

    load_dotenv(env_file)

    assert os.environ["CALENDAR_ID"] == "from-env"
    assert os.environ["SHEET_NAME"] == "FromFile"


def test_load_dotenv_keeps_prefix_trailing_space(tmp_path):
    """A prefix ending in a space survives .env loading byte-exact."""
    env_file = tmp_path / ".env"
    env_file.write_text("TITLE_PREFIX=TTRPG - \n")

    load_dotenv(env_file)

    assert SessionLogConfig.from_env().title_prefix == "TTRPG - "


@pytest.mark.parametrize("line", ['TITLE_PREFIX="TTRPG - "', "TITLE_PREFIX='TTRPG - '"])
def test_load_dotenv_unquotes_values(tmp_path, line):
    env_file = tmp_path / ".env"
    env_file.write_text(f"  {line}\r\n")

    load_dotenv(env_file)

    prefix = SessionLogConfig.from_env().title_prefix
    assert prefix == "TTRPG - "
    assert TitleFilter(prefix).is_allowed("TTRPG - Masks")
    assert not TitleFilter(prefix).is_allowed("TTRPG -Masks")


def test_load_dotenv_prefers_working_directory(monkeypatch, tmp_path):
    (tmp_path / ".env").write_text("SHEET_NAME=FromCwd\n")
    monkeypatch.chdir(tmp_path)

    load_dotenv()

    assert os.environ["SHEET_NAME"] == "FromCwd"
