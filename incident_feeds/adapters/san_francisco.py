"""
San Francisco law enforcement dispatched calls adapter (Socrata JSON).

Dataset: https://data.sfgov.org/resource/gnap-fj3t.json

Coordinates come only from the dataset itself; rows without them are
dropped and never geocoded.
"""

import re
from typing import Any, Dict, Optional, Tuple

from incident_feeds.core import settings
from incident_feeds.core.http import FeedFetcher, FetchResponse
from incident_feeds.core.regions import SAN_FRANCISCO
from incident_feeds.core.utils.address import prettify_street, with_city_state
from incident_feeds.core.utils.formatting import clean_text, to_iso
from incident_feeds.core.utils.geo import to_float
from incident_feeds.adapters.base import BaseAdapter
from incident_feeds.extract.fields import FieldChain, keys
from incident_feeds.models import IntermediateRecord, compact_extras

WKT_POINT = re.compile(
    r"POINT\s*\(\s*(-?\d+(?:\.\d+)?)\s+(-?\d+(?:\.\d+)?)\s*\)",
    re.IGNORECASE,
)

# Socrata columns that may hold a point, in priority order
POINT_CONTAINERS = ("intersection_point", "location", "point", "location_1", "geom", "geometry")

STREET = FieldChain(
    "street",
    keys("address", "intersection_name", "intersection", "location_text"),
    skip_blank=True,
)
INCIDENT_TYPE = FieldChain(
    "incidentTypeName",
    keys("call_type_final_desc", "call_type_original_desc", "call_type",
         "incident_type_description", "description", "problem_type"),
    skip_blank=True,
)
RECEIVED = FieldChain(
    "callTimeReceived",
    keys("call_last_updated_at", "received_datetime", "entry_datetime",
         "updated_datetime", "dispatch_datetime"),
    skip_blank=True,
)
CAD_NUMBER = FieldChain(
    "cadNumber",
    keys("cad_number", "cadnumber", "event_number", "id"),
    skip_blank=True,
)

EXTRA_CHAINS = {
    "priority": keys("priority_final", "priority_original", "priority", "priority_level"),
    "callTypeFinal": keys("call_type_final_desc"),
    "callTypeOriginal": keys("call_type_original_desc"),
    "callTypeOriginalCode": keys("call_type_original"),
    "disposition": keys("disposition", "call_disposition"),
    "neighborhood": keys("analysis_neighborhood", "neighborhood_district"),
    "policeDistrict": keys("police_district"),
    "supervisorDistrict": keys("supervisor_district"),
    "source": keys("agency", "source"),
}


def _pair(lat: Any, lon: Any) -> Tuple[Optional[float], Optional[float]]:
    lat, lon = to_float(lat), to_float(lon)
    if lat is None or lon is None:
        return None, None
    return lat, lon


def extract_coordinates(row: Dict[str, Any]) -> Tuple[Optional[float], Optional[float]]:
    """
    (lat, lon) from the dataset's own fields.

    Tries top-level latitude/longitude, then each point container as a
    GeoJSON point, a {latitude, longitude} object or a WKT "POINT (lon lat)".

    Example:
        >>> extract_coordinates({"intersection_point": "POINT (-122.41 37.77)"})
        (37.77, -122.41)
    """
    lat, lon = _pair(row.get("latitude"), row.get("longitude"))
    if lat is not None:
        return lat, lon

    for name in POINT_CONTAINERS:
        container = row.get(name)
        if not container:
            continue

        if isinstance(container, dict):
            coords = container.get("coordinates")
            if isinstance(coords, (list, tuple)) and len(coords) >= 2:
                lat, lon = _pair(coords[1], coords[0])
                if lat is not None:
                    return lat, lon

            lat, lon = _pair(container.get("latitude"), container.get("longitude"))
            if lat is not None:
                return lat, lon

        elif isinstance(container, str):
            match = WKT_POINT.search(container)
            if match:
                lat, lon = _pair(match.group(2), match.group(1))
                if lat is not None:
                    return lat, lon

    return None, None


class SanFranciscoAdapter(BaseAdapter):
    """SFPD dispatched calls for service, real-time dataset."""

    name = "sf"
    default_city = "sf"
    region = SAN_FRANCISCO

    geocode_missing = False
    validate_region = False

    def __init__(
        self,
        url: Optional[str] = None,
        app_token: Optional[str] = None,
        limit: Optional[int] = None,
    ):
        super().__init__()
        self.url = url if url is not None else settings.SF_DATASET_URL
        self.app_token = app_token if app_token is not None else settings.SF_SODA_APP_TOKEN
        self.limit = limit if limit is not None else settings.SF_LIMIT

    async def fetch(self, fetcher: FeedFetcher) -> FetchResponse:
        url = self.require_url(self.url, "SF_DATASET_URL")
        params = {"$order": "received_datetime DESC", "$limit": str(self.limit)}
        headers = {"X-App-Token": self.app_token} if self.app_token else None

        self.logger.info(f"Fetching San Francisco calls from {url} (limit {self.limit})")
        return await fetcher.fetch("SF", url, headers=headers, params=params)

    def extract(self, row: Dict[str, Any], context) -> Optional[IntermediateRecord]:
        lat, lon = extract_coordinates(row)
        if lat is None:
            self.logger.debug(f"No coordinates for row {row.get('cad_number') or row.get('id') or ''}")
            return None

        street = prettify_street(clean_text(STREET.resolve(row)))
        incident_type = clean_text(INCIDENT_TYPE.resolve(row))
        received = to_iso(RECEIVED.resolve(row))
        cad = clean_text(CAD_NUMBER.resolve(row))

        record_id = cad or f"{incident_type or 'Incident'}-{received or ''}-{lat:.5f}{lon:.5f}"

        extras = {
            "cadNumber": cad or None,
            "incidentTypeName": incident_type or None,
        }
        for extra_name, candidates in EXTRA_CHAINS.items():
            extras[extra_name] = FieldChain(extra_name, candidates).resolve(row)

        return IntermediateRecord(
            source_row=row,
            id=record_id,
            name=incident_type or "Incident",
            raw_address=street or None,
            display_address=with_city_state(street or None, self.region),
            updated_at=to_iso(row.get("call_last_updated_at")),
            call_time_received=received,
            extras=compact_extras(extras),
            native_lat=lat,
            native_lon=lon,
        )
