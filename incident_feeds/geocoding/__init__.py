"""
Geocoding for incident addresses.

Provides:
- OpenCage: forward geocoding provider with an in-memory TTL cache
- geocode_batch: bounded-concurrency worker pool over deduplicated queries
- SanityValidator: distance-from-center retry around any geocoder

Usage:
    from incident_feeds.geocoding import OpenCageGeocoder, geocode_batch

    geocoder = OpenCageGeocoder()
    result = await geocoder.geocode("123 Main St, Portland, OR")

    outcomes = await geocode_batch({"123 main st": "123 Main St"}, geocoder.geocode)
"""

from incident_feeds.geocoding.base import (
    GeocodingResult,
    GeocodingError,
    GeocoderNotConfiguredError,
    BaseGeocoder,
)
from incident_feeds.geocoding.cache import GeocodeCache, GeocodeCacheEntry
from incident_feeds.geocoding.providers.opencage import OpenCageGeocoder
from incident_feeds.geocoding.facade import (
    GeocodeOutcome,
    geocode_batch,
    get_geocoder,
    successful_results,
)
from incident_feeds.geocoding.validation import SanityValidator

__all__ = [
    # Base classes
    "GeocodingResult",
    "GeocodingError",
    "GeocoderNotConfiguredError",
    "BaseGeocoder",
    # Cache
    "GeocodeCache",
    "GeocodeCacheEntry",
    # Providers
    "OpenCageGeocoder",
    # Batch
    "GeocodeOutcome",
    "geocode_batch",
    "get_geocoder",
    "successful_results",
    # Validation
    "SanityValidator",
]
