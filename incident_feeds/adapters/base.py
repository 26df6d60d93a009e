"""
Base class for city feed adapters.
"""

import logging
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Dict, Optional

from incident_feeds.core.http import FeedFetcher, FetchResponse
from incident_feeds.core.regions import SourceRegion
from incident_feeds.models import IntermediateRecord, PlaceBatch

if TYPE_CHECKING:
    from incident_feeds.pipeline import PipelineContext


class FeedConfigurationError(Exception):
    """Raised when a source's feed URL (or other required setting) is missing."""

    def __init__(self, message: str, source: str = "", setting: str = ""):
        self.message = message
        self.source = source
        self.setting = setting
        super().__init__(f"[{source}] {message}" if source else message)


class BaseAdapter(ABC):
    """
    Base class for all source adapters.

    Subclasses must implement:
    - fetch(): Retrieve the raw feed through the shared fetcher
    - extract(): Turn one parsed source row into an IntermediateRecord

    Policy flags read by the pipeline:
    - use_native_coordinates: Trust coordinates carried by the feed
    - geocode_missing: Geocode records without native coordinates
    - geocode_without_street: Also geocode records that only have a city-level address
    - validate_region: Wrap the geocoder in the distance-from-center retry
    """

    name: str = ""
    default_city: str = ""
    region: SourceRegion

    use_native_coordinates: bool = True
    geocode_missing: bool = True
    geocode_without_street: bool = False
    validate_region: bool = True

    def __init__(self):
        self.logger = logging.getLogger(self.__class__.__name__)

    @abstractmethod
    async def fetch(self, fetcher: FeedFetcher) -> FetchResponse:
        """Fetch the raw feed; raises UpstreamFetchError or FeedConfigurationError."""
        pass

    @abstractmethod
    def extract(
        self,
        row: Dict[str, Any],
        context: "PipelineContext",
    ) -> Optional[IntermediateRecord]:
        """Map one source row to an IntermediateRecord, or None to skip it."""
        pass

    def require_url(self, url: str, setting: str) -> str:
        if not url:
            raise FeedConfigurationError(
                f"{setting} is not set", source=self.name, setting=setting
            )
        return url

    def geocode_address_for(self, record: IntermediateRecord) -> Optional[str]:
        """The address to geocode for a record, or None if it is not geocoded."""
        if not self.geocode_missing:
            return None
        if self.use_native_coordinates and record.has_native_coordinates:
            return None
        if not record.raw_address and not self.geocode_without_street:
            return None
        return record.display_address or None

    async def fetch_city(
        self,
        city: Optional[str] = None,
        context: Optional["PipelineContext"] = None,
    ) -> PlaceBatch:
        """
        Fetch, normalize and geocode this source's incidents.

        Args:
            city: City label echoed in the batch (defaults to default_city)
            context: Shared pipeline context; a temporary one is built and
                closed when not provided

        Returns:
            PlaceBatch of canonical places
        """
        from incident_feeds.pipeline import build_context, run_pipeline

        label = (city or self.default_city).lower()
        if context is not None:
            return await run_pipeline(self, context, label)

        context = build_context()
        try:
            return await run_pipeline(self, context, label)
        finally:
            await context.aclose()
