"""
Base classes and interfaces for geocoding providers.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Optional

from incident_feeds.core import settings
from incident_feeds.core.utils.formatting import utc_now_iso


@dataclass(frozen=True)
class GeocodingResult:
    """Standard result from any geocoding provider."""

    latitude: float
    longitude: float
    formatted: str = ""
    provider: str = ""
    confidence: Optional[float] = None
    geocoded_at: str = field(default_factory=utc_now_iso)


class GeocodingError(Exception):
    """Exception raised when geocoding fails."""

    def __init__(self, message: str, provider: str = "", address: str = ""):
        self.message = message
        self.provider = provider
        self.address = address
        super().__init__(f"[{provider}] {message}" if provider else message)


class GeocoderNotConfiguredError(GeocodingError):
    """Raised when a lookup is needed but the provider has no API key."""


class BaseGeocoder(ABC):
    """
    Abstract base class for geocoding providers.

    Subclasses must implement:
    - geocode(): Geocode a single address, raising GeocodingError on failure
    - provider_name: Name of the provider

    Optional overrides:
    - is_configured: Whether credentials are present
    - rate_limit_delay: Delay each batch worker waits before a lookup
    """

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Name of the geocoding provider."""
        pass

    @property
    def is_configured(self) -> bool:
        return True

    @property
    def rate_limit_delay(self) -> float:
        """Delay between requests in seconds."""
        return settings.GEOCODER_DELAY

    @abstractmethod
    async def geocode(self, address: str, **kwargs) -> GeocodingResult:
        """
        Geocode a single free-form address.

        Args:
            address: Address as it should be sent to the provider
            **kwargs: Provider-specific options

        Returns:
            GeocodingResult with finite coordinates

        Raises:
            GeocodingError: On any failure, including "no results"
        """
        pass

