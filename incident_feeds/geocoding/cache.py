"""
In-memory TTL cache of geocoding results, keyed by normalized query.
"""

import logging
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional

from incident_feeds.core import settings
from incident_feeds.core.utils.address import normalize_address
from incident_feeds.geocoding.base import GeocodingResult

logger = logging.getLogger(__name__)

Clock = Callable[[], float]


@dataclass(frozen=True)
class GeocodeCacheEntry:
    result: GeocodingResult
    expires_at: float  # clock seconds


class GeocodeCache:
    """
    Process-wide map from normalized query to a successful lookup.

    Entries expire after the TTL; an expired entry is dropped when read.
    Only successes are stored, so failed lookups are retried next time.

    Usage:
        cache = GeocodeCache(ttl_seconds=3600)
        cache.set("5th Ave", result)
        cache.get("5TH   AVE")  # same entry
    """

    def __init__(self, ttl_seconds: Optional[float] = None, clock: Clock = time.time):
        self.ttl_seconds = ttl_seconds if ttl_seconds is not None else settings.GEOCODE_TTL_SECONDS
        self.clock = clock
        self._entries: Dict[str, GeocodeCacheEntry] = {}

    def get(self, address: str) -> Optional[GeocodingResult]:
        key = normalize_address(address)
        entry = self._entries.get(key)
        if entry is None:
            return None
        if entry.expires_at <= self.clock():
            logger.debug(f"Geocode cache entry expired: {key}")
            del self._entries[key]
            return None
        return entry.result

    def set(self, address: str, result: GeocodingResult) -> None:
        key = normalize_address(address)
        self._entries[key] = GeocodeCacheEntry(
            result=result,
            expires_at=self.clock() + self.ttl_seconds,
        )

    def __len__(self) -> int:
        return len(self._entries)
