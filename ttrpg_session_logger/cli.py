"""
Command-line entry points.

Usage:
    python -m ttrpg_session_logger run
    python -m ttrpg_session_logger run --date 2026-10-17
    python -m ttrpg_session_logger run --dry-run
    python -m ttrpg_session_logger install-schedule
    python -m ttrpg_session_logger remove-schedule
    python -m ttrpg_session_logger authorize
"""

import argparse
import logging
from datetime import date, datetime
from typing import List, Optional

from .calendar_source import EventSource, GoogleCalendarSource, JsonFileEventSource
from .config import (
    LOG_FILE,
    LOG_VERBOSITY,
    ConfigurationError,
    SessionLogConfig,
    load_config,
)
from .logging_config import configure_logging
from .pipeline import SessionLogPipeline
from .scheduler import CronScheduler
from .sinks import CsvSink, GoogleSheetSink, TableSink
from .title_filter import TitleFilter
from .version import get_version_string

LOG = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_CONFIG = 2


def _parse_date(value: str) -> date:
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError:
        raise argparse.ArgumentTypeError(f"Invalid date '{value}', expected YYYY-MM-DD")


def build_source(config: SessionLogConfig, credentials=None) -> EventSource:
    if config.event_source == "file":
        return JsonFileEventSource(config.local_events_file)
    return GoogleCalendarSource.from_credentials(credentials, config.calendar_id)


def build_sink(config: SessionLogConfig, credentials=None) -> TableSink:
    if config.sink == "csv":
        return CsvSink(config.local_output_csv)
    return GoogleSheetSink.from_credentials(
        credentials, config.spreadsheet_id, config.sheet_name
    )


def build_pipeline(config: SessionLogConfig) -> SessionLogPipeline:
    """Wire up the adapters selected by config."""
    credentials = None
    if config.uses_google:
        from .google_auth import load_credentials

        credentials = load_credentials(config.credentials_file, config.token_file)

    return SessionLogPipeline(
        source=build_source(config, credentials),
        sink=build_sink(config, credentials),
        title_filter=TitleFilter(config.title_prefix),
        dry_run=config.dry_run,
    )


def cmd_run(args, config: SessionLogConfig) -> int:
    day = args.date or date.today()
    if args.dry_run:
        config.dry_run = True

    LOG.info("Logging sessions for %s", day)
    result = build_pipeline(config).run(day)
    LOG.info(
        "Done: %d events found, %d matched, %d rows written",
        result.events_found,
        result.events_matched,
        result.rows_written,
    )
    return EXIT_OK


def cmd_install_schedule(args, config: SessionLogConfig) -> int:
    scheduler = CronScheduler(command=args.command or "", name=config.schedule_name)
    entry = scheduler.install()
    print(f"✓ Installed: {entry}")
    return EXIT_OK


def cmd_remove_schedule(args, config: SessionLogConfig) -> int:
    scheduler = CronScheduler(name=config.schedule_name)
    if scheduler.remove():
        print(f"✓ Removed schedule '{config.schedule_name}'")
    else:
        print(f"No schedule named '{config.schedule_name}' was installed")
    return EXIT_OK


def cmd_authorize(args, config: SessionLogConfig) -> int:
    from .google_auth import authorize

    authorize(config.credentials_file, config.token_file)
    print(f"✓ Saved token to {config.token_file}")
    return EXIT_OK


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ttrpg-session-logger",
        description="Log tabletop RPG sessions from a calendar to a spreadsheet",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--version", action="version", version=get_version_string())
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Enable debug logging"
    )
    subparsers = parser.add_subparsers(dest="command_name", required=True)

    run = subparsers.add_parser("run", help="Log sessions for today (or --date)")
    run.add_argument(
        "--date",
        type=_parse_date,
        default=None,
        help="Day to log instead of today (YYYY-MM-DD)",
    )
    run.add_argument(
        "--dry-run", action="store_true", help="Parse events without writing rows"
    )
    run.set_defaults(func=cmd_run)

    install = subparsers.add_parser(
        "install-schedule", help="Run daily at midnight via crontab"
    )
    install.add_argument(
        "--command",
        default=None,
        help="Command for the crontab entry (default: this interpreter's 'run')",
    )
    install.set_defaults(func=cmd_install_schedule)

    remove = subparsers.add_parser("remove-schedule", help="Remove the daily schedule")
    remove.set_defaults(func=cmd_remove_schedule)

    auth = subparsers.add_parser(
        "authorize", help="Authorize Google access with OAuth client secrets"
    )
    auth.set_defaults(func=cmd_authorize)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    configure_logging(
        verbosity="VERBOSE" if args.verbose else LOG_VERBOSITY, log_file=LOG_FILE
    )

    try:
        if args.func is cmd_run:
            config = load_config()
        else:
            # Scheduling and authorization don't need calendar/sheet ids
            config = SessionLogConfig.from_env()
        return args.func(args, config)
    except ConfigurationError as e:
        LOG.error("Configuration error: %s", e)
        if e.setting:
            LOG.error("Fix %s in your .env file or environment and re-run", e.setting)
        return EXIT_CONFIG
    except RuntimeError as e:
        LOG.error("%s", e)
        return EXIT_ERROR
