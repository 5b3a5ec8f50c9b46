"""Event sources: where the day's calendar events come from."""

import json
import logging
from abc import ABC, abstractmethod
from datetime import date, datetime, time
from pathlib import Path
from typing import List, Optional

from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

from .config import ConfigurationError
from .models import RawEvent

LOG = logging.getLogger(__name__)

# Last millisecond of a local day
END_OF_DAY = time(23, 59, 59, 999000)


def day_window(day: date):
    """Return the local-time (start, end) datetimes covering a calendar day."""
    start = datetime.combine(day, time.min).astimezone()
    end = datetime.combine(day, END_OF_DAY).astimezone()
    return start, end


class EventSource(ABC):
    """Supplies the raw events scheduled on a given day."""

    @abstractmethod
    def events_for_day(self, day: date) -> List[RawEvent]:
        """Return the events for day, in calendar order."""


class GoogleCalendarSource(EventSource):
    """Client for a single Google Calendar.

    Wraps the Calendar v3 API; the calendar is resolved once, on first use.
    """

    def __init__(self, service, calendar_id: str):
        """Initialize source.

        Args:
            service: Calendar v3 service from googleapiclient.discovery.build
            calendar_id: Calendar to read (e.g. 'primary' or '...@group.calendar.google.com')
        """
        self.service = service
        self.calendar_id = calendar_id
        self._calendar_name: Optional[str] = None

    @classmethod
    def from_credentials(cls, credentials, calendar_id: str) -> "GoogleCalendarSource":
        service = build("calendar", "v3", credentials=credentials, cache_discovery=False)
        return cls(service, calendar_id)

    def resolve(self) -> str:
        """Look up the calendar and return its name.

        Raises:
            ConfigurationError: If the calendar doesn't exist or isn't shared
        """
        if self._calendar_name is not None:
            return self._calendar_name

        try:
            calendar = self.service.calendars().get(calendarId=self.calendar_id).execute()
        except HttpError as e:
            if e.resp.status in (403, 404):
                raise ConfigurationError(
                    f"Calendar '{self.calendar_id}' not found or not accessible "
                    f"(HTTP {e.resp.status}). Check CALENDAR_ID and that the "
                    f"calendar is shared with these credentials.",
                    setting="CALENDAR_ID",
                    value=self.calendar_id,
                ) from e
            raise

        self._calendar_name = calendar.get("summary", self.calendar_id)
        LOG.debug("Resolved calendar '%s' (%s)", self._calendar_name, self.calendar_id)
        return self._calendar_name

    def events_for_day(self, day: date) -> List[RawEvent]:
        """Fetch the day's events between local 00:00:00.000 and 23:59:59.999."""
        self.resolve()
        start, end = day_window(day)
        LOG.info("Fetching events from '%s' for %s", self._calendar_name, day)

        items = []
        page_token = None
        while True:
            resp = (
                self.service.events()
                .list(
                    calendarId=self.calendar_id,
                    timeMin=start.isoformat(timespec="milliseconds"),
                    timeMax=end.isoformat(timespec="milliseconds"),
                    singleEvents=True,
                    orderBy="startTime",
                    pageToken=page_token,
                )
                .execute()
            )
            items.extend(resp.get("items", []))
            page_token = resp.get("nextPageToken")
            if not page_token:
                break

        events = [
            RawEvent(
                title=item.get("summary", ""),
                description=item.get("description"),
                date=day,
            )
            for item in items
            if item.get("status") != "cancelled"
        ]
        LOG.debug("Retrieved %d events (%d raw items)", len(events), len(items))
        return events


def _item_date(item: dict) -> Optional[date]:
    raw = item.get("date")
    if raw is None:
        start = item.get("start")
        if isinstance(start, dict):
            raw = start.get("dateTime") or start.get("date")
    if not raw or not isinstance(raw, str):
        return None
    try:
        parsed = datetime.fromisoformat(raw.replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone()
    return parsed.date()


class JsonFileEventSource(EventSource):
    """Reads events from a local JSON file, for offline runs and testing.

    The file holds a list of objects with "title" (or "summary"),
    optional "description", and "date" (YYYY-MM-DD or ISO datetime) or a
    Google-style "start" object.
    """

    def __init__(self, path: str):
        self.path = Path(path)

    def _load(self) -> list:
        if not self.path.exists():
            raise ConfigurationError(
                f"Local events file not found: {self.path}",
                setting="LOCAL_EVENTS_FILE",
                value=str(self.path),
            )
        try:
            with open(self.path, encoding="utf-8") as f:
                data = json.load(f)
        except ValueError as e:
            raise ConfigurationError(
                f"Local events file {self.path} is not valid JSON: {e}",
                setting="LOCAL_EVENTS_FILE",
                value=str(self.path),
            ) from e
        if isinstance(data, dict):
            data = data.get("items", [])
        if not isinstance(data, list):
            raise ConfigurationError(
                f"Local events file {self.path} must hold a list of events "
                f"or an object with an \"items\" list",
                setting="LOCAL_EVENTS_FILE",
                value=str(self.path),
            )
        return data

    def events_for_day(self, day: date) -> List[RawEvent]:
        events = []
        for item in self._load():
            if not isinstance(item, dict):
                LOG.warning("Skipping event that is not a JSON object: %r", item)
                continue
            item_day = _item_date(item)
            if item_day is None:
                LOG.warning("Skipping event without a usable date: %s", item)
                continue
            if item_day != day:
                continue
            events.append(
                RawEvent(
                    title=item.get("title", item.get("summary", "")),
                    description=item.get("description"),
                    date=day,
                )
            )
        LOG.info("[LOCAL] Found %d events for %s in %s", len(events), day, self.path)
        return events
