#!/usr/bin/env python3
"""
Command-line interface for the geocoding module.

Usage:
    python -m incident_feeds.geocoding.cli --address "123 Main St, Portland, OR"
    python -m incident_feeds.geocoding.cli --address "500 Main St, East, TN" --city nashville
    python -m incident_feeds.geocoding.cli --address "Broadway / 5th Ave N" --city nashville --no-retry
"""

import argparse
import asyncio
import logging
import sys

from incident_feeds.core import settings
from incident_feeds.core.regions import NASHVILLE, PORTLAND, SAN_FRANCISCO
from incident_feeds.geocoding import (
    GeocodingError,
    get_geocoder,
    SanityValidator,
)

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL, logging.INFO),
    format="%(asctime)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

REGIONS = {
    "nashville": NASHVILLE,
    "pdx": PORTLAND,
    "portland": PORTLAND,
    "sf": SAN_FRANCISCO,
}


async def geocode_single_address(address: str, city: str, retry: bool = True) -> int:
    """Geocode one address and report its distance from the city center."""
    region = REGIONS[city]
    geocoder = get_geocoder()
    validator = SanityValidator(geocoder, region)

    print(f"\nGeocoding: {address}")
    print(f"Region:    {region.label} (radius {validator.radius_miles:.0f} mi)")
    print("-" * 50)

    try:
        if retry:
            result = await validator.resolve(address)
        else:
            result = await geocoder.geocode(address)
    except GeocodingError as e:
        print(f"✗ {e}")
        return 1
    finally:
        await geocoder.aclose()

    distance = validator.distance_miles(result)
    print("✓ Success!")
    print(f"  Latitude:  {result.latitude:.6f}")
    print(f"  Longitude: {result.longitude:.6f}")
    print(f"  Formatted: {result.formatted}")
    print(f"  Distance:  {distance:.1f} mi from {region.city}"
          f"{'' if validator.is_within_radius(result) else '  (outside radius)'}")
    return 0


def main():
    parser = argparse.ArgumentParser(
        description="Geocode an address with OpenCage and check it against a city center"
    )

    parser.add_argument(
        "--address", "-a",
        type=str,
        required=True,
        help="Address to geocode"
    )
    parser.add_argument(
        "--city", "-c",
        type=str,
        default="pdx",
        choices=sorted(REGIONS),
        help="City whose center the result is checked against"
    )
    parser.add_argument(
        "--no-retry",
        action="store_true",
        help="Skip the forced-suffix retry for far-away results"
    )

    args = parser.parse_args()

    if not settings.validate_geocoding():
        print("Error: OPENCAGE_KEY (or GEOCODE_API_KEY) is not set")
        sys.exit(2)

    sys.exit(asyncio.run(geocode_single_address(args.address, args.city, retry=not args.no_retry)))


if __name__ == "__main__":
    main()
