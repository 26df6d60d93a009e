"""
HTML table incident feed parser.

Reads the first <table> of a dispatch page. Columns are found by matching the
header text, so column order does not matter. Coordinates come from Google
Maps links inside a row when present.
"""

import logging
import re
from typing import Dict, List, Optional, Tuple

from bs4 import BeautifulSoup

from incident_feeds.core.utils.formatting import to_iso
from incident_feeds.core.utils.geo import to_float
from incident_feeds.extract.fields import SourceRow

logger = logging.getLogger(__name__)

COLUMN_PATTERNS = {
    "name": re.compile(r"problem|type|incident", re.IGNORECASE),
    "address": re.compile(r"address|location", re.IGNORECASE),
    "updatedAt": re.compile(r"received|time|datetime|updated", re.IGNORECASE),
}

MAP_QUERY = re.compile(r"[?&]q=(-?\d+(?:\.\d+)?),\s*(-?\d+(?:\.\d+)?)")
MAP_PLACE = re.compile(r"!3d(-?\d+(?:\.\d+)?)!4d(-?\d+(?:\.\d+)?)")


def classify_headers(headers: List[str]) -> Dict[str, int]:
    """Map row keys to column indexes; the first matching header wins."""
    columns: Dict[str, int] = {}
    for field_name, pattern in COLUMN_PATTERNS.items():
        for idx, header in enumerate(headers):
            if pattern.search(header):
                columns[field_name] = idx
                break
    return columns


def coordinates_from_href(href: str) -> Tuple[Optional[float], Optional[float]]:
    """
    Extract (lat, lon) from a Google Maps link.

    Example:
        >>> coordinates_from_href("https://maps.google.com/?q=45.5,-122.6")
        (45.5, -122.6)
    """
    match = MAP_QUERY.search(href) or MAP_PLACE.search(href)
    if not match:
        return None, None
    return to_float(match.group(1)), to_float(match.group(2))


def _cell_text(cells, idx: Optional[int]) -> Optional[str]:
    if idx is None or idx >= len(cells):
        return None
    text = " ".join(cells[idx].get_text(" ").split())
    return text or None


def parse_html_table(content) -> List[SourceRow]:
    """Parse the first table of an HTML page into source rows."""
    if not content:
        return []

    try:
        soup = BeautifulSoup(content, "lxml")
    except Exception as e:
        logger.warning(f"HTML parse failed: {e}")
        return []

    table = soup.find("table")
    if table is None:
        logger.debug("No <table> found in HTML feed")
        return []

    trs = table.find_all("tr")
    if not trs:
        return []

    headers = [
        " ".join(cell.get_text(" ").split()).lower()
        for cell in trs[0].find_all(["th", "td"])
    ]
    columns = classify_headers(headers)

    rows: List[SourceRow] = []
    for tr in trs[1:]:
        cells = tr.find_all("td")
        if not cells:
            continue

        lat = lon = None
        for cell in cells:
            for link in cell.find_all("a", href=True):
                href = link["href"]
                if "google." not in href and "maps" not in href:
                    continue
                found_lat, found_lon = coordinates_from_href(href)
                if found_lat is not None and found_lon is not None:
                    lat, lon = found_lat, found_lon

        updated = _cell_text(cells, columns.get("updatedAt"))
        rows.append({
            "name": _cell_text(cells, columns.get("name")) or "Incident",
            "address": _cell_text(cells, columns.get("address")),
            "updatedAt": to_iso(updated) if updated else None,
            "lat": lat,
            "lon": lon,
        })

    logger.debug(f"Parsed {len(rows)} HTML table rows")
    return rows
