"""
Text and timestamp formatting utilities.

This module provides consistent formatting for values pulled out of upstream
feeds before they reach a canonical record.

Usage:
    from incident_feeds.core.utils.formatting import strip_html, to_iso

    strip_html("<b>Theft</b> at 1 Main St")  # "Theft at 1 Main St"
    to_iso(1755472800000)                    # "2025-08-17T23:20:00.000Z"
"""

import re
from datetime import datetime, timezone
from typing import Any, Optional

from bs4 import BeautifulSoup
from dateutil import parser as date_parser

# Tags that end a line of description text
BLOCK_TAGS = ["p", "div", "li", "tr"]

# Two defaults differing in every date part; a string that only parses the
# same way under both carried its own full date
_FILL_DEFAULTS = (datetime(2000, 1, 1), datetime(2001, 2, 2))

_INLINE_SPACE = re.compile(r"[ \t\r\f\v\xa0]+")


def clean_text(value: Any) -> str:
    """
    Stringify and trim a feed value; None becomes "".

    Example:
        >>> clean_text("  CAD 123 ")
        'CAD 123'
    """
    if value is None:
        return ""
    return str(value).strip()


def strip_html(text: Optional[str]) -> str:
    """
    Remove markup from a free-text description.

    <br> and block-level tags end a line. Entities are decoded, runs of
    spaces collapse and each line is trimmed.

    Example:
        >>> strip_html("Theft at <b>1 Main St</b><br/>Sunday")
        'Theft at 1 Main St\\nSunday'
    """
    if not text:
        return ""

    soup = BeautifulSoup(str(text), "lxml")
    for br in soup.find_all("br"):
        br.replace_with("\n")
    for block in soup.find_all(BLOCK_TAGS):
        block.append("\n")

    lines = (_INLINE_SPACE.sub(" ", line).strip() for line in soup.get_text().splitlines())
    return "\n".join(line for line in lines if line)


def format_incident_type_name(raw: Any) -> Optional[str]:
    """
    Title-case an incident type name, keeping "/", "-" and space delimiters.

    Example:
        >>> format_incident_type_name("SHOTS FIRED/HEARD")
        'Shots Fired/Heard'
    """
    if raw is None or raw == "":
        return None

    parts = re.split(r"([/\- ]+)", str(raw).lower())
    formatted = "".join(
        part if re.fullmatch(r"[/\- ]+", part) else part[:1].upper() + part[1:]
        for part in parts
    )
    return formatted.strip() or None


def iso_from_datetime(dt: datetime) -> str:
    """UTC ISO-8601 with millisecond precision and a "Z" suffix."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return (
        dt.astimezone(timezone.utc)
        .isoformat(timespec="milliseconds")
        .replace("+00:00", "Z")
    )


def utc_now_iso() -> str:
    return iso_from_datetime(datetime.now(tz=timezone.utc))


def to_iso(value: Any) -> Optional[str]:
    """
    Normalize a feed timestamp to an ISO-8601 UTC instant.

    Handles:
    - millisecond epoch numbers (ArcGIS)
    - any date string python-dateutil can parse into a full calendar date
      (naive values are UTC; bare times, weekdays and day numbers are rejected)

    Returns:
        ISO string, or None when the value is missing or unparsable

    Example:
        >>> to_iso("2025-08-17T16:20:00-07:00")
        '2025-08-17T23:20:00.000Z'
        >>> to_iso("not a date") is None
        True
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, (int, float)):
        try:
            dt = datetime.fromtimestamp(value / 1000.0, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
        return iso_from_datetime(dt)

    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            first, second = (date_parser.parse(text, default=d) for d in _FILL_DEFAULTS)
        except (ValueError, OverflowError):
            return None
        if first != second:
            # year, month or day was filled in from the default
            return None
        return iso_from_datetime(first)

    return None
