"""
KML incident feed parser.

Each Placemark becomes one source row. The placemark title carries the
incident type ("Theft at 123 Main St"), the point carries lon,lat[,alt], and
the free-text description carries the address, a timestamp and the police
incident number.
"""

import logging
from typing import List, Optional, Tuple

from bs4 import BeautifulSoup

from incident_feeds.core.utils.geo import to_float
from incident_feeds.extract.description import parse_kml_description
from incident_feeds.extract.fields import SourceRow

logger = logging.getLogger(__name__)


def _text(tag) -> str:
    return tag.get_text().strip() if tag is not None else ""


def _point_coordinates(placemark) -> Tuple[Optional[float], Optional[float]]:
    """First lon,lat tuple of the placemark's Point (or bare coordinates)."""
    point = placemark.find("Point")
    coords = point.find("coordinates") if point is not None else None
    if coords is None:
        coords = placemark.find("coordinates", recursive=False)
    if coords is None:
        return None, None

    tuples = coords.get_text().split()
    if not tuples:
        return None, None

    parts = tuples[0].split(",")
    if len(parts) < 2:
        return None, None

    lon, lat = to_float(parts[0]), to_float(parts[1])
    return lat, lon


def parse_placemark(placemark) -> SourceRow:
    title = _text(placemark.find("name"))
    name = title.split(" at ")[0].strip()

    raw_description = _text(placemark.find("description"))
    parsed = parse_kml_description(raw_description)
    lat, lon = _point_coordinates(placemark)

    return {
        "id": placemark.get("id"),
        "title": title or None,
        "name": name or "Incident",
        "lat": lat,
        "lon": lon,
        "address": parsed.address or None,
        "incidentId": parsed.incident_id,
        "updatedAt": parsed.updated_at,
        "rawDescription": raw_description,
    }


def parse_kml(content) -> List[SourceRow]:
    """
    Parse KML bytes or text into source rows, one per Placemark.

    Returns an empty list for malformed or empty documents.
    """
    if not content:
        return []

    try:
        soup = BeautifulSoup(content, "xml")
        placemarks = soup.find_all("Placemark")
    except Exception as e:
        logger.warning(f"KML parse failed: {e}")
        return []

    rows: List[SourceRow] = []
    for placemark in placemarks:
        try:
            rows.append(parse_placemark(placemark))
        except Exception as e:
            logger.warning(f"Skipping malformed placemark {placemark.get('id')}: {e}")

    logger.debug(f"Parsed {len(rows)} KML placemarks")
    return rows
