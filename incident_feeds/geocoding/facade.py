"""
Geocoding facade: provider lookup and the bounded batch worker pool.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Dict, Literal, Optional

from incident_feeds.geocoding.base import GeocodingResult, GeocodingError, BaseGeocoder
from incident_feeds.geocoding.providers.opencage import OpenCageGeocoder

logger = logging.getLogger(__name__)

ProviderType = Literal["opencage"]

# Any coroutine function turning an address into a result
Resolver = Callable[[str], Awaitable[GeocodingResult]]

DEFAULT_CONCURRENCY = 5


@dataclass
class GeocodeOutcome:
    """Per-query result of a batch: a GeocodingResult or an error message."""

    query: str
    address: str
    result: Optional[GeocodingResult] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.result is not None


def get_geocoder(provider: ProviderType = "opencage", **kwargs) -> BaseGeocoder:
    """
    Get a geocoder instance by provider name.

    Args:
        provider: Provider name ("opencage")
        **kwargs: Passed to the provider constructor

    Returns:
        Geocoder instance
    """
    providers = {
        "opencage": OpenCageGeocoder,
    }

    if provider not in providers:
        raise ValueError(f"Unknown provider: {provider}. Choose from: {list(providers.keys())}")

    return providers[provider](**kwargs)


async def geocode_batch(
    queries: Dict[str, str],
    resolve: Resolver,
    concurrency: int = DEFAULT_CONCURRENCY,
    delay: float = 0.0,
) -> Dict[str, GeocodeOutcome]:
    """
    Resolve many queries with at most `concurrency` lookups in flight.

    A failing lookup is logged and recorded as a failed outcome; it never
    aborts the other workers.

    Args:
        queries: Pre-deduplicated map of normalized query -> address to send
        resolve: Coroutine function performing one lookup
        concurrency: Max concurrent lookups
        delay: Seconds each worker waits before its lookup

    Returns:
        Dict mapping query to GeocodeOutcome

    Example:
        outcomes = await geocode_batch(
            {"123 main st, portland, or": "123 Main St, Portland, OR"},
            geocoder.geocode,
        )
    """
    if not queries:
        return {}

    semaphore = asyncio.Semaphore(max(1, concurrency))

    async def geocode_one(query: str, address: str) -> GeocodeOutcome:
        async with semaphore:
            if delay > 0:
                await asyncio.sleep(delay)
            try:
                result = await resolve(address)
            except GeocodingError as e:
                logger.warning(f"Geocode failed for {address!r}: {e}")
                return GeocodeOutcome(query=query, address=address, error=str(e))
            except Exception as e:
                logger.error(f"Unexpected error geocoding {address!r}: {e}")
                return GeocodeOutcome(query=query, address=address, error=str(e))
            return GeocodeOutcome(query=query, address=address, result=result)

    tasks = [geocode_one(query, address) for query, address in queries.items()]

    outcomes: Dict[str, GeocodeOutcome] = {}
    for coro in asyncio.as_completed(tasks):
        outcome = await coro
        outcomes[outcome.query] = outcome

    succeeded = sum(1 for o in outcomes.values() if o.ok)
    logger.info(f"Geocoded {succeeded}/{len(queries)} queries")
    return outcomes


def successful_results(outcomes: Dict[str, GeocodeOutcome]) -> Dict[str, GeocodingResult]:
    """Query -> result for the outcomes that succeeded."""
    return {query: o.result for query, o in outcomes.items() if o.result is not None}
