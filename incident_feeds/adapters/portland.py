"""
Portland Police dispatched calls adapter.

The upstream publishes the same calls as KML, JSON or an HTML table depending
on the endpoint; the format is sniffed from the payload. Coordinates carried
by the feed are used as-is; rows without them are geocoded from their address.
"""

from typing import Any, Dict, Optional

from incident_feeds.core import settings
from incident_feeds.core.http import FeedFetcher, FetchResponse
from incident_feeds.core.regions import PORTLAND
from incident_feeds.core.utils.address import with_city_state
from incident_feeds.adapters.base import BaseAdapter
from incident_feeds.extract.fields import extract_generic
from incident_feeds.models import IntermediateRecord, compact_extras


class PortlandAdapter(BaseAdapter):
    """Portland Police Bureau dispatched calls (KML, JSON or HTML)."""

    name = "pdx"
    default_city = "portland"
    region = PORTLAND

    def __init__(self, url: Optional[str] = None):
        super().__init__()
        self.url = url if url is not None else settings.PORTLAND_URL

    async def fetch(self, fetcher: FeedFetcher) -> FetchResponse:
        url = self.require_url(self.url, "PORTLAND_URL")
        self.logger.info(f"Fetching Portland incidents from {url}")
        return await fetcher.fetch("PDX", url)

    def extract(self, row: Dict[str, Any], context) -> Optional[IntermediateRecord]:
        fields = extract_generic(row, context.random_id)
        address = fields["address"] or None

        return IntermediateRecord(
            source_row=row,
            id=fields["id"],
            name=fields["name"],
            category=fields["category"],
            raw_address=address,
            display_address=with_city_state(address, self.region),
            updated_at=fields["updatedAt"],
            call_time_received=fields["updatedAt"],
            extras=compact_extras(fields["extras"]),
            native_lat=fields["lat"],
            native_lon=fields["lon"],
        )
