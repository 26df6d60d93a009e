"""
Shared test helpers: fixture loading, fake HTTP transport, fake geocoder.
"""

import asyncio
import itertools
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import httpx
import pytest

from incident_feeds.core.http import FeedFetcher
from incident_feeds.core.utils.address import normalize_address
from incident_feeds.geocoding.base import BaseGeocoder, GeocodingError, GeocodingResult
from incident_feeds.pipeline import PipelineContext

FIXTURES = Path(__file__).parent / "fixtures"

FIXED_NOW = datetime(2025, 8, 18, 12, 0, 0, tzinfo=timezone.utc)


def load_fixture(name: str) -> bytes:
    return (FIXTURES / name).read_bytes()


class FakeGeocoder(BaseGeocoder):
    """
    In-memory geocoder keyed by normalized address.

    Records every call and the peak number of lookups in flight.
    """

    def __init__(
        self,
        results: Optional[Dict[str, Tuple[float, float]]] = None,
        default: Optional[Tuple[float, float]] = None,
        delay: float = 0.0,
        configured: bool = True,
    ):
        self.results = {normalize_address(k): v for k, v in (results or {}).items()}
        self.default = default
        self.delay = delay
        self.configured = configured
        self.calls: List[str] = []
        self.in_flight = 0
        self.max_in_flight = 0

    @property
    def provider_name(self) -> str:
        return "fake"

    @property
    def is_configured(self) -> bool:
        return self.configured

    @property
    def rate_limit_delay(self) -> float:
        return 0.0

    async def geocode(self, address: str, **kwargs) -> GeocodingResult:
        self.calls.append(address)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(self.delay)
            coords = self.results.get(normalize_address(address), self.default)
            if coords is None:
                raise GeocodingError("No results", provider=self.provider_name, address=address)
            return GeocodingResult(latitude=coords[0], longitude=coords[1], provider=self.provider_name)
        finally:
            self.in_flight -= 1


def sequential_ids(prefix: str = "rnd"):
    counter = itertools.count(1)
    return lambda: f"{prefix}-{next(counter)}"


def serve(content: bytes, content_type: str = "application/json", status: int = 200, requests=None):
    """MockTransport handler returning a fixed payload, optionally recording requests."""

    def handler(request: httpx.Request) -> httpx.Response:
        if requests is not None:
            requests.append(request)
        return httpx.Response(status, content=content, headers={"content-type": content_type})

    return handler


def make_fetcher(handler) -> FeedFetcher:
    return FeedFetcher(client=httpx.AsyncClient(transport=httpx.MockTransport(handler)))


def make_context(handler, geocoder: Optional[BaseGeocoder] = None, **overrides) -> PipelineContext:
    params = {
        "random_id": sequential_ids(),
        "clock": lambda: FIXED_NOW,
        "concurrency": 5,
        "sanity_radius_miles": 40.0,
    }
    params.update(overrides)
    return PipelineContext(
        fetcher=make_fetcher(handler),
        geocoder=geocoder or FakeGeocoder(),
        **params,
    )


@pytest.fixture
def fake_geocoder():
    return FakeGeocoder()
