"""
Known source regions: display suffix and expected center for each city feed.
"""

from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True)
class SourceRegion:
    """City/state a feed belongs to, plus its approximate center."""

    city: str
    region: str  # state abbreviation, e.g. "OR"
    region_name: str  # full state name, e.g. "Oregon"
    center_lat: float
    center_lon: float

    @property
    def center(self) -> Tuple[float, float]:
        return self.center_lat, self.center_lon

    @property
    def label(self) -> str:
        """City-level display label, e.g. "Portland, OR"."""
        return f"{self.city}, {self.region}"


NASHVILLE = SourceRegion(
    city="Nashville",
    region="TN",
    region_name="Tennessee",
    center_lat=36.1627,
    center_lon=-86.7816,
)

PORTLAND = SourceRegion(
    city="Portland",
    region="OR",
    region_name="Oregon",
    center_lat=45.5152,
    center_lon=-122.6784,
)

SAN_FRANCISCO = SourceRegion(
    city="San Francisco",
    region="CA",
    region_name="California",
    center_lat=37.7749,
    center_lon=-122.4194,
)
