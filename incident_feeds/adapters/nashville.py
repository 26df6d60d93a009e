"""
Nashville Metro Police active dispatch adapter (ArcGIS GeoJSON).

The feed's point geometry is not trusted; every incident is geocoded from a
display address rebuilt from the feed's street and city fields, and checked
against Nashville's center.
"""

from typing import Any, Dict, Optional

from incident_feeds.core import settings
from incident_feeds.core.http import FeedFetcher, FetchResponse
from incident_feeds.core.regions import NASHVILLE
from incident_feeds.core.utils.address import canonicalize_display
from incident_feeds.core.utils.formatting import format_incident_type_name, to_iso
from incident_feeds.adapters.base import BaseAdapter
from incident_feeds.extract.fields import FieldChain, keys
from incident_feeds.models import IntermediateRecord, compact_extras

ADDRESS = FieldChain(
    "address",
    keys("Address", "ADDRESS", "Location", "LOCATION", "addr_full", "Street", "STREET"),
    skip_blank=True,
)
CATEGORY = FieldChain(
    "category",
    keys("IncidentDescription", "CALL_TYPE", "Event_Type", "CallType", "Description", "TYPE"),
)
HEADLINE = FieldChain("name", keys("Headline", "Title"))
UPDATED_AT = FieldChain("updatedAt", keys("LastUpdated", "LastUpdate", "UpdatedAt"))
CALL_RECEIVED = FieldChain(
    "callTimeReceived",
    keys("CallReceivedTime", "call_received", "Call_Received", "datetime"),
)
CITY = FieldChain("city", keys("CityName", "city", "CITYNAME"))

ID_KEYS = keys(
    "GlobalID", "GLOBALID", "OBJECTID", "objectid",
    "IncidentNumber", "Incident_No", "CallID", "id",
)


class NashvilleAdapter(BaseAdapter):
    """Metro Nashville Police Department active incidents."""

    name = "nashvilleMNPD"
    default_city = "nashville"
    region = NASHVILLE

    use_native_coordinates = False
    geocode_without_street = True

    def __init__(self, url: Optional[str] = None):
        super().__init__()
        self.url = url if url is not None else settings.NASHVILLE_URL

    async def fetch(self, fetcher: FeedFetcher) -> FetchResponse:
        url = self.require_url(self.url, "NASHVILLE_URL")
        self.logger.info(f"Fetching Nashville incidents from {url}")
        return await fetcher.fetch("Nashville", url)

    def extract(self, row: Dict[str, Any], context) -> Optional[IntermediateRecord]:
        props = row.get("properties")
        if not isinstance(props, dict):
            props = row

        street = ADDRESS.resolve(props)
        category = CATEGORY.resolve(props)
        name = HEADLINE.resolve(props) or category or "Incident"
        record_id = FieldChain(
            "id", ID_KEYS, default_factory=context.random_id, skip_blank=True
        ).resolve(props)

        return IntermediateRecord(
            source_row=row,
            id=str(record_id),
            name=str(name),
            category=str(category) if category is not None else None,
            raw_address=str(street).strip() if street is not None else None,
            display_address=canonicalize_display(
                street, CITY.resolve(props), self.region, context.precinct_labels
            ),
            updated_at=to_iso(UPDATED_AT.resolve(props)),
            call_time_received=to_iso(CALL_RECEIVED.resolve(props)),
            extras=compact_extras({
                "incidentTypeCode": props.get("IncidentTypeCode"),
                "incidentTypeName": format_incident_type_name(props.get("IncidentTypeName")),
            }),
        )
