"""
Geographic sanity check for geocoded results.

A geocoder handed "500 Main St, East, TN" can land in the wrong state. When a
result falls outside the radius around the source's center, the address is
retried once with the canonical "<City>, <REGION>" suffix forced on.
"""

import logging
from typing import Optional

from incident_feeds.core import settings
from incident_feeds.core.regions import SourceRegion
from incident_feeds.core.utils.address import force_region_suffix
from incident_feeds.core.utils.geo import haversine_distance
from incident_feeds.geocoding.base import BaseGeocoder, GeocodingResult, GeocodingError

logger = logging.getLogger(__name__)


class SanityValidator:
    """
    Wraps a geocoder with the distance-from-center retry.

    Usage:
        validator = SanityValidator(geocoder, NASHVILLE)
        result = await validator.resolve("500 Main St, East, TN")
    """

    def __init__(
        self,
        geocoder: BaseGeocoder,
        region: SourceRegion,
        radius_miles: Optional[float] = None,
    ):
        self.geocoder = geocoder
        self.region = region
        self.radius_miles = radius_miles if radius_miles is not None else settings.SANITY_RADIUS_MILES

    def distance_miles(self, result: GeocodingResult) -> float:
        return haversine_distance(
            self.region.center_lat, self.region.center_lon,
            result.latitude, result.longitude,
            unit="miles",
        )

    def is_within_radius(self, result: GeocodingResult) -> bool:
        return self.distance_miles(result) <= self.radius_miles

    async def resolve(self, address: str) -> GeocodingResult:
        """
        Geocode an address, retrying once with a forced region suffix when
        the first hit is outside the radius.

        The retry is accepted only if it lands inside the radius; otherwise
        (including a failed retry) the first result is returned unchanged.

        Raises:
            GeocodingError: The first lookup failed
        """
        result = await self.geocoder.geocode(address)
        if self.is_within_radius(result):
            return result

        retry_address = force_region_suffix(address, self.region)
        logger.info(
            f"{address!r} geocoded {self.distance_miles(result):.1f} mi from "
            f"{self.region.city}; retrying as {retry_address!r}"
        )

        try:
            retry = await self.geocoder.geocode(retry_address)
        except GeocodingError as e:
            logger.warning(f"Retry failed for {retry_address!r}: {e}")
            return result

        if self.is_within_radius(retry):
            return retry

        logger.warning(
            f"Retry for {retry_address!r} still {self.distance_miles(retry):.1f} mi out; "
            f"keeping first result"
        )
        return result
