"""Title prefix filtering for calendar events.

Only events whose title starts with the configured prefix are logged,
e.g. "TTRPG - Curse of Strahd: #3" with prefix "TTRPG - ". The prefix is
removed before the campaign name is parsed.
"""

import logging
from typing import Iterable, List

from .models import RawEvent

LOG = logging.getLogger(__name__)


class TitleFilter:
    """Matches and strips a fixed, case-sensitive title prefix."""

    def __init__(self, prefix: str = ""):
        """Initialize filter.

        Args:
            prefix: Exact prefix to require; empty disables filtering
        """
        self.prefix = prefix or ""
        self.enabled = bool(self.prefix)

    def is_allowed(self, title: str) -> bool:
        """Check if an event with this title should be logged."""
        if not self.enabled:
            return True
        return (title or "").startswith(self.prefix)

    def strip(self, title: str) -> str:
        """Remove the prefix from a title.

        Titles that don't carry the prefix are returned unchanged.
        """
        if self.enabled and title and title.startswith(self.prefix):
            return title[len(self.prefix) :].strip()
        return title

    def apply(self, events: Iterable[RawEvent]) -> List[RawEvent]:
        """Return the events whose titles pass the filter, in order."""
        events = list(events)
        if not self.enabled:
            return events

        retained = []
        for event in events:
            if self.is_allowed(event.title):
                retained.append(event)
            else:
                LOG.debug(
                    "Event '%s' does not start with '%s', skipping",
                    event.title,
                    self.prefix,
                )

        LOG.info(
            "%d of %d events match title prefix '%s'",
            len(retained),
            len(events),
            self.prefix,
        )
        return retained
