"""
Extracts session metadata from calendar event titles and descriptions.

Descriptions are free-form "Key: Value" lines. System, Players and Type
go to their own columns; every other pair is kept in Additional Details.
Parsing is best-effort: lines that don't fit are skipped, never raised.
"""

import html
import logging
import re
from dataclasses import dataclass
from datetime import date
from typing import Optional

from .models import SessionRecord

LOG = logging.getLogger(__name__)

SESSION_TYPES = ("GM", "Player", "Solo", "GMless")

_CANONICAL_TYPES = {t.lower(): t for t in SESSION_TYPES}

# Tags that end a line of text in calendar HTML
_LINE_BREAK_TAG = re.compile(
    r"<\s*/?\s*(?:br|p|div|li|ul|ol|tr|table|blockquote|h[1-6]|hr)\b[^>]*>",
    re.IGNORECASE,
)
# Any remaining (inline) tag, e.g. <b>, <span>, <a href=...>
_ANY_TAG = re.compile(r"<[^>]*>")


@dataclass
class DescriptionFields:
    """Fields extracted from an event description."""

    system: str = ""
    players: str = ""
    type: str = ""
    additional_details: str = ""


def parse_campaign_name(title: Optional[str]) -> str:
    """Return the campaign name from an event title.

    The campaign name is everything before the first colon, or the whole
    title when there is none:

        "Curse of Strahd: Session 3" -> "Curse of Strahd"
        "One-shot"                   -> "One-shot"
    """
    if not title:
        return ""
    return title.split(":", 1)[0].strip()


def normalize_type(value: str) -> str:
    """Return the canonical spelling of a session type.

    Unrecognized values are returned unchanged so they stay visible in the
    log for someone to fix by hand.
    """
    canonical = _CANONICAL_TYPES.get(value.lower())
    if canonical is not None:
        return canonical

    LOG.warning(
        "Unrecognized session type '%s' (expected one of: %s); keeping as-is",
        value,
        ", ".join(SESSION_TYPES),
    )
    return value


def _clean_markup(description: str) -> str:
    text = _LINE_BREAK_TAG.sub("\n", description)
    text = _ANY_TAG.sub("", text)
    return html.unescape(text).strip()


def parse_description(description: Optional[str]) -> DescriptionFields:
    """Parse "Key: Value" lines from an event description.

    Args:
        description: Plain text or calendar HTML, may be None

    Returns:
        DescriptionFields; keys are matched case-insensitively and a
        repeated System/Players/Type line overwrites the earlier one.
    """
    fields = DescriptionFields()
    if not description:
        return fields

    extras = []
    for line in _clean_markup(description).splitlines():
        if ":" not in line:
            if line.strip():
                LOG.debug("Skipping description line without a colon: %r", line)
            continue

        key, value = line.split(":", 1)
        key = key.strip()
        value = value.strip()
        if not key or not value:
            LOG.debug("Skipping description line with empty key or value: %r", line)
            continue

        lowered = key.lower()
        if lowered == "system":
            fields.system = value
        elif lowered == "players":
            fields.players = value
        elif lowered == "type":
            fields.type = normalize_type(value)
        else:
            extras.append(f"{key}: {value}")

    fields.additional_details = "; ".join(extras)
    return fields


def build_session_record(
    day: date, title: Optional[str], description: Optional[str]
) -> SessionRecord:
    """Compose a SessionRecord for one event.

    Args:
        day: The date being logged (never taken from the event itself)
        title: Event title, already stripped of any configured prefix
        description: Event description

    Returns:
        SessionRecord ready for a sink
    """
    fields = parse_description(description)
    return SessionRecord(
        date=day.strftime("%Y-%m-%d"),
        campaign_name=parse_campaign_name(title),
        system=fields.system,
        players=fields.players,
        type=fields.type,
        additional_details=fields.additional_details,
    )
