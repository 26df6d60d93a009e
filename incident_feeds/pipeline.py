"""
Fetch -> parse -> extract -> geocode -> validate -> emit.

The pipeline is shared by every source adapter. Adapters contribute only the
fetch request, the per-row field extraction and a few policy flags; the
pipeline owns deduplication of geocode queries, the bounded worker pool, the
sanity retry and the final coordinate filter.

Usage:
    from incident_feeds.pipeline import build_context, run_pipeline
    from incident_feeds.adapters import get_adapter

    context = build_context()
    batch = await run_pipeline(get_adapter("pdx"), context, "pdx")
    await context.aclose()
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Callable, Dict, List, Optional

from pydantic import ValidationError

from incident_feeds.core import settings, FeedFetcher
from incident_feeds.core.utils.address import GeocodeQuery, normalize_address
from incident_feeds.core.utils.geo import is_valid_coordinate
from incident_feeds.extract.fields import RandomIdSource
from incident_feeds.geocoding import (
    BaseGeocoder,
    GeocodingResult,
    GeocoderNotConfiguredError,
    SanityValidator,
    geocode_batch,
    get_geocoder,
    successful_results,
)
from incident_feeds.models import CanonicalPlace, IntermediateRecord, PlaceBatch
from incident_feeds.parsers import parse_feed

if TYPE_CHECKING:
    from incident_feeds.adapters.base import BaseAdapter

logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(tz=timezone.utc)


@dataclass
class PipelineContext:
    """
    Long-lived dependencies shared by pipeline invocations.

    Built once per process so the geocoder's cache is shared across fetches.
    """

    fetcher: FeedFetcher
    geocoder: BaseGeocoder
    random_id: Callable[[], str] = field(default_factory=RandomIdSource)
    clock: Callable[[], datetime] = _utc_now
    concurrency: int = field(default_factory=lambda: settings.GEOCODE_CONCURRENCY)
    sanity_radius_miles: float = field(default_factory=lambda: settings.SANITY_RADIUS_MILES)
    precinct_labels: Optional[List[str]] = None

    async def aclose(self):
        await self.fetcher.aclose()
        close = getattr(self.geocoder, "aclose", None)
        if close is not None:
            await close()


def build_context(**overrides) -> PipelineContext:
    """Context wired to the real HTTP fetcher and OpenCage geocoder."""
    fetcher = overrides.pop("fetcher", None) or FeedFetcher()
    geocoder = overrides.pop("geocoder", None) or get_geocoder()
    return PipelineContext(fetcher=fetcher, geocoder=geocoder, **overrides)


def collect_geocode_queries(
    records: List[IntermediateRecord],
    adapter: "BaseAdapter",
) -> Dict[GeocodeQuery, str]:
    """
    Deduplicate the addresses that need geocoding.

    Returns:
        Dict of normalized query -> address to send; the first address seen
        for a query wins
    """
    queries: Dict[GeocodeQuery, str] = {}
    for record in records:
        address = adapter.geocode_address_for(record)
        if not address:
            continue
        query = normalize_address(address)
        if query and query not in queries:
            queries[query] = address
    return queries


def assemble_places(
    records: List[IntermediateRecord],
    resolved: Dict[GeocodeQuery, GeocodingResult],
    adapter: "BaseAdapter",
) -> List[CanonicalPlace]:
    """
    Attach coordinates to each record and build the canonical places.

    Native coordinates win when the adapter trusts them; otherwise the
    record's resolved geocode is used. Records left without valid finite
    coordinates are dropped.
    """
    places: List[CanonicalPlace] = []
    for record in records:
        if adapter.use_native_coordinates and record.has_native_coordinates:
            lat, lon = record.native_lat, record.native_lon
        else:
            address = adapter.geocode_address_for(record)
            hit = resolved.get(normalize_address(address)) if address else None
            lat, lon = (hit.latitude, hit.longitude) if hit else (None, None)

        if not is_valid_coordinate(lat, lon):
            logger.debug(f"{adapter.name}: dropping {record.id}, no valid coordinates ({lat}, {lon})")
            continue

        try:
            places.append(CanonicalPlace(
                id=record.id,
                name=record.name,
                category=record.category,
                lat=lat,
                lon=lon,
                address=record.display_address,
                call_time_received=record.call_time_received,
                updated_at=record.updated_at,
                extras=record.extras,
            ))
        except ValidationError as e:
            logger.debug(f"{adapter.name}: dropping {record.id}: {e.error_count()} validation errors")

    return places


async def run_pipeline(
    adapter: "BaseAdapter",
    context: PipelineContext,
    city: Optional[str] = None,
) -> PlaceBatch:
    """
    Run one fetch of a source through to a PlaceBatch.

    Raises:
        UpstreamFetchError: The feed could not be fetched
        FeedConfigurationError: The source URL is not configured
        GeocoderNotConfiguredError: Records need geocoding but no key is set
    """
    response = await adapter.fetch(context.fetcher)
    fetched_at = context.clock()

    rows = parse_feed(response.content, response.content_type)

    records: List[IntermediateRecord] = []
    for row in rows:
        record = adapter.extract(row, context)
        if record is None:
            logger.debug(f"{adapter.name}: skipping unusable row")
            continue
        records.append(record)

    queries = collect_geocode_queries(records, adapter)
    resolved: Dict[GeocodeQuery, GeocodingResult] = {}

    if queries:
        geocoder = context.geocoder
        if not geocoder.is_configured:
            raise GeocoderNotConfiguredError(
                f"{len(queries)} addresses need geocoding but no API key is configured",
                provider=geocoder.provider_name,
            )

        if adapter.validate_region:
            validator = SanityValidator(geocoder, adapter.region, context.sanity_radius_miles)
            resolve = validator.resolve
        else:
            resolve = geocoder.geocode

        outcomes = await geocode_batch(
            queries,
            resolve,
            concurrency=context.concurrency,
            delay=geocoder.rate_limit_delay,
        )
        resolved = successful_results(outcomes)

    places = assemble_places(records, resolved, adapter)
    logger.info(
        f"{adapter.name}: {len(rows)} rows, {len(records)} records, "
        f"{len(queries)} geocode queries, {len(places)} places"
    )

    return PlaceBatch(
        city=city or adapter.default_city,
        source=adapter.name,
        fetched_at=fetched_at,
        places=places,
    )
