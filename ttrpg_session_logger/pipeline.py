import logging
from datetime import date
from typing import List, Optional

from .calendar_source import EventSource
from .logging_config import set_event_id
from .models import SessionRecord
from .parser import build_session_record
from .sinks import TableSink
from .title_filter import TitleFilter

LOG = logging.getLogger(__name__)


class PipelineResult:
    """Result of logging one day's sessions."""

    def __init__(
        self,
        day: date,
        events_found: int = 0,
        events_matched: int = 0,
        rows_written: int = 0,
        records: Optional[List[SessionRecord]] = None,
    ):
        self.day = day
        self.events_found = events_found
        self.events_matched = events_matched
        self.rows_written = rows_written
        self.records = records if records is not None else []


class SessionLogPipeline:
    """Logs a day's calendar sessions to a table.

    Events are processed one at a time in the order the source returns
    them. Nothing is deduplicated: running the same day twice appends
    the same rows twice.
    """

    def __init__(
        self,
        source: EventSource,
        sink: TableSink,
        title_filter: Optional[TitleFilter] = None,
        dry_run: bool = False,
    ):
        """Initialize pipeline.

        Args:
            source: Where to read the day's events from
            sink: Where to append session records
            title_filter: Prefix filter; None logs every event
            dry_run: If True, build and log records without writing them
        """
        self.source = source
        self.sink = sink
        self.title_filter = title_filter or TitleFilter()
        self.dry_run = dry_run

    def run(self, day: date) -> PipelineResult:
        """Log every matching event on day.

        Returns:
            PipelineResult with counts and the records built

        Raises:
            ConfigurationError: If the calendar or spreadsheet can't be resolved
        """
        result = PipelineResult(day)

        events = self.source.events_for_day(day)
        result.events_found = len(events)
        if not events:
            LOG.info("No events found for %s", day)
            return result

        events = self.title_filter.apply(events)
        result.events_matched = len(events)
        if not events:
            LOG.info(
                "No events for %s match title prefix '%s'",
                day,
                self.title_filter.prefix,
            )
            return result

        for event in events:
            set_event_id(f"{event.title} @ {day.isoformat()}")
            try:
                title = self.title_filter.strip(event.title)
                record = build_session_record(day, title, event.description)
                result.records.append(record)

                if self.dry_run:
                    LOG.info("[DRY-RUN] Would log row: %s", record.to_row())
                    continue

                self.sink.append(record)
                result.rows_written += 1
            finally:
                set_event_id(None)

        LOG.info(
            "Logged %d of %d sessions for %s",
            result.rows_written,
            result.events_matched,
            day,
        )
        return result
