"""
Free-text KML description parsing.

Police KML feeds pack the address, a human-readable timestamp and an incident
number into one description, e.g.:

    Theft at 123 Main St, Sunday, August 17, 2025 4:20 PM [Portland Police #PP1]
"""

import logging
import re
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from incident_feeds.core.utils.formatting import strip_html, iso_from_datetime

logger = logging.getLogger(__name__)

# Weekday-style timestamp on the address line (abbreviated or full weekday)
TS_INLINE = re.compile(
    r"\b(?:Sun|Mon|Tue|Tues|Wed|Wednes|Thu|Thur|Thurs|Fri|Sat|Satur)(?:day)?,\s+"
    r"[A-Za-z]+\s+\d{1,2},\s+\d{4}\s+\d{1,2}:\d{2}\s+(?:AM|PM)\b",
    re.IGNORECASE,
)

# Full weekday-long-date-time anywhere in the description
TS_ANYWHERE = re.compile(
    r"\b(?:Sunday|Monday|Tuesday|Wednesday|Thursday|Friday|Saturday),\s+"
    r"[A-Za-z]+\s+\d{1,2},\s+\d{4}\s+\d{1,2}:\d{2}\s+(?:AM|PM)\b",
    re.IGNORECASE,
)

# Bracketed incident id, e.g. "[Portland Police #PP25000223544]"
INCIDENT_ID = re.compile(
    r"\[(?:Portland Police|PPB|Police)[^#\]]*#([A-Za-z0-9-]+)\]",
    re.IGNORECASE,
)

# Pacific daylight first, then Pacific standard
PACIFIC_OFFSETS = ("-0700", "-0800")

_STAMP_FORMATS = (
    "%A, %B %d, %Y %I:%M %p %z",
    "%A, %b %d, %Y %I:%M %p %z",
)


@dataclass
class KmlDescription:
    """Pieces recovered from a KML placemark description."""

    address: str = ""
    incident_id: Optional[str] = None
    updated_at: Optional[str] = None


def parse_pacific_timestamp(stamp: str) -> Optional[str]:
    """
    Resolve "Sunday, August 17, 2025 4:20 PM" to a UTC ISO instant.

    Tries a Pacific daylight offset first and a Pacific standard offset
    second, accepting whichever parses.

    Example:
        >>> parse_pacific_timestamp("Sunday, August 17, 2025 4:20 PM")
        '2025-08-17T23:20:00.000Z'
    """
    text = " ".join(stamp.split())
    for offset in PACIFIC_OFFSETS:
        for fmt in _STAMP_FORMATS:
            try:
                dt = datetime.strptime(f"{text} {offset}", fmt)
            except ValueError:
                continue
            return iso_from_datetime(dt)

    logger.debug(f"Unparsable Pacific timestamp: {stamp!r}")
    return None


def parse_kml_description(description: Optional[str]) -> KmlDescription:
    """
    Recover a clean address, incident id and timestamp from a description.

    The address is the text after the first " at ", limited to its first
    line, with any inline timestamp and bracketed incident id removed and
    punctuation tidied. The timestamp is searched for in the full
    description, not just the address line.
    """
    desc = strip_html(description)

    at_idx = desc.lower().find(" at ")
    addr = desc[at_idx + 4:] if at_idx >= 0 else desc
    addr = addr.split("\n")[0].strip()

    addr = TS_INLINE.sub("", addr, count=1).strip()

    incident_id = None
    match = INCIDENT_ID.search(addr)
    if match:
        incident_id = match.group(1)
        addr = (addr[:match.start()] + addr[match.end():]).strip()

    addr = re.sub(r"\s{2,}", " ", addr)
    addr = re.sub(r"\s*,\s*", ", ", addr)
    addr = re.sub(r",\s*PORT(?:LAND)?\.?\s*$", "", addr, flags=re.IGNORECASE)
    addr = re.sub(r",\s*,+", ",", addr)
    addr = addr.strip()
    addr = re.sub(r"^,\s*|\s*,$", "", addr).strip()

    updated_at = None
    stamp = TS_ANYWHERE.search(desc)
    if stamp:
        updated_at = parse_pacific_timestamp(stamp.group(0))

    return KmlDescription(address=addr, incident_id=incident_id, updated_at=updated_at)
