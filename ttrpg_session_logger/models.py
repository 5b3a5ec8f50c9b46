"""Data models passed between the event sources, parser and sinks."""

from dataclasses import dataclass
from datetime import date
from typing import List, Optional

# Column order of the session log table
SESSION_HEADER = (
    "Date",
    "Campaign Name",
    "System",
    "Players",
    "Type",
    "Additional Details",
)


@dataclass(frozen=True)
class RawEvent:
    """A calendar event as supplied by an event source."""

    title: str
    description: Optional[str]
    date: date


@dataclass(frozen=True)
class SessionRecord:
    """One normalized row of the session log."""

    date: str
    campaign_name: str = ""
    system: str = ""
    players: str = ""
    type: str = ""
    additional_details: str = ""

    def to_row(self) -> List[str]:
        """Return the values in SESSION_HEADER order."""
        return [
            self.date,
            self.campaign_name,
            self.system,
            self.players,
            self.type,
            self.additional_details,
        ]
