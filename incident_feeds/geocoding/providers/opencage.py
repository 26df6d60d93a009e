"""
OpenCage Geocoding API provider.

Paid (free tier available) forward geocoder with worldwide coverage.
https://opencagedata.com/api
"""

import logging
import math
from typing import Optional

import httpx

from incident_feeds.core import settings
from incident_feeds.core.utils.address import normalize_address
from incident_feeds.geocoding.base import (
    BaseGeocoder,
    GeocodingResult,
    GeocodingError,
    GeocoderNotConfiguredError,
)
from incident_feeds.geocoding.cache import GeocodeCache

logger = logging.getLogger(__name__)

OPENCAGE_URL = "https://api.opencagedata.com/geocode/v1/json"


class OpenCageGeocoder(BaseGeocoder):
    """
    OpenCage Geocoding API provider.

    Usage:
        geocoder = OpenCageGeocoder()  # Uses OPENCAGE_KEY from env
        result = await geocoder.geocode("123 Main St, Portland, OR")

    Caching:
        Successful lookups are kept in an in-memory GeocodeCache keyed by the
        normalized address, for GEOCODE_TTL_SECONDS.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        cache: Optional[GeocodeCache] = None,
        client: Optional[httpx.AsyncClient] = None,
        timeout: Optional[float] = None,
    ):
        """
        Initialize OpenCage Geocoder.

        Args:
            api_key: OpenCage API key (uses settings if not provided)
            cache: Result cache (a fresh one if not provided)
            client: Shared HTTP client (one is created lazily if not provided)
            timeout: Request timeout in seconds
        """
        self.api_key = api_key if api_key is not None else settings.OPENCAGE_KEY
        self.cache = cache if cache is not None else GeocodeCache()
        self._client = client
        self._owns_client = client is None
        self.timeout = timeout if timeout is not None else settings.HTTP_TIMEOUT

    @property
    def provider_name(self) -> str:
        return "opencage"

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout)
        return self._client

    async def aclose(self):
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def geocode(self, address: str, **kwargs) -> GeocodingResult:
        """
        Geocode an address using the OpenCage API.

        Args:
            address: Free-form address; sent as-is, cached by its normalized form

        Returns:
            GeocodingResult for the top hit

        Raises:
            GeocoderNotConfiguredError: No API key
            GeocodingError: HTTP error, transport failure, unreadable body or no results
        """
        if not self.api_key:
            raise GeocoderNotConfiguredError(
                "OPENCAGE_KEY not configured",
                provider=self.provider_name,
                address=address,
            )

        query = normalize_address(address)
        if not query:
            raise GeocodingError("Empty address", provider=self.provider_name, address=address)

        cached = self.cache.get(query)
        if cached is not None:
            logger.debug(f"OpenCage: Cache hit for {query}")
            return cached

        params = {
            "q": address,
            "key": self.api_key,
            "limit": 1,
            "no_annotations": 1,
        }

        try:
            response = await self.client.get(OPENCAGE_URL, params=params)
        except httpx.HTTPError as e:
            raise GeocodingError(
                f"Request failed: {e}", provider=self.provider_name, address=address
            ) from e

        if response.status_code >= 400:
            raise GeocodingError(
                f"HTTP {response.status_code}: {response.text[:200]}",
                provider=self.provider_name,
                address=address,
            )

        try:
            data = response.json()
        except ValueError as e:
            raise GeocodingError(
                f"Unreadable response body: {e}", provider=self.provider_name, address=address
            ) from e

        results = data.get("results") if isinstance(data, dict) else None
        hit = results[0] if isinstance(results, list) and results else None
        geometry = hit.get("geometry") if isinstance(hit, dict) else None
        lat = geometry.get("lat") if isinstance(geometry, dict) else None
        lng = geometry.get("lng") if isinstance(geometry, dict) else None

        if not _is_finite_number(lat) or not _is_finite_number(lng):
            raise GeocodingError("No results", provider=self.provider_name, address=address)

        result = GeocodingResult(
            latitude=float(lat),
            longitude=float(lng),
            formatted=hit.get("formatted") or "",
            provider=self.provider_name,
            confidence=hit.get("confidence"),
        )
        self.cache.set(query, result)
        return result


def _is_finite_number(value) -> bool:
    return (
        isinstance(value, (int, float))
        and not isinstance(value, bool)
        and math.isfinite(value)
    )
