"""
Geographic utility functions for coordinate calculations and validation.

This module consolidates all geographic calculations used across the codebase:
- Haversine distance calculation (meters, feet, kilometers, miles)
- Coordinate coercion and range validation

Usage:
    from incident_feeds.core.utils.geo import haversine_distance, is_valid_coordinate

    # Calculate distance in miles
    distance_mi = haversine_distance(45.52, -122.68, 45.60, -122.50, unit='miles')

    # Validate a coordinate pair
    is_valid_coordinate(91.0, -122.0)  # False
"""

import math
from typing import Any, Optional, Literal

# Earth radius constants
EARTH_RADIUS_METERS = 6_371_000
EARTH_RADIUS_FEET = 20_902_231
EARTH_RADIUS_KM = 6_371
EARTH_RADIUS_MILES = 3_958.8

# Unit type for type hints
DistanceUnit = Literal['meters', 'feet', 'kilometers', 'miles']


def haversine_distance(
    lat1: float,
    lon1: float,
    lat2: float,
    lon2: float,
    unit: DistanceUnit = 'meters'
) -> float:
    """
    Calculate the great-circle distance between two points on Earth.

    Uses the Haversine formula which gives accurate results for most distances.

    Args:
        lat1: Latitude of first point in decimal degrees
        lon1: Longitude of first point in decimal degrees
        lat2: Latitude of second point in decimal degrees
        lon2: Longitude of second point in decimal degrees
        unit: Unit for the result ('meters', 'feet', 'kilometers', 'miles')

    Returns:
        Distance between the two points in the specified unit

    Example:
        >>> round(haversine_distance(45.5152, -122.6784, 47.6062, -122.3321, unit='miles'))
        145
    """
    # Select earth radius based on unit
    earth_radius = {
        'meters': EARTH_RADIUS_METERS,
        'feet': EARTH_RADIUS_FEET,
        'kilometers': EARTH_RADIUS_KM,
        'miles': EARTH_RADIUS_MILES,
    }.get(unit, EARTH_RADIUS_METERS)

    # Convert to radians
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    delta_phi = math.radians(lat2 - lat1)
    delta_lambda = math.radians(lon2 - lon1)

    # Haversine formula
    a = (
        math.sin(delta_phi / 2) ** 2 +
        math.cos(phi1) * math.cos(phi2) * math.sin(delta_lambda / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))

    return earth_radius * c


def to_float(value: Any) -> Optional[float]:
    """
    Coerce a feed value to a finite float.

    Accepts numbers and numeric strings. Booleans, blanks, NaN and infinities
    come back as None.

    Example:
        >>> to_float("45.52")
        45.52
        >>> to_float("") is None
        True
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None

    try:
        num = float(value)
    except (TypeError, ValueError):
        return None

    return num if math.isfinite(num) else None


def is_valid_coordinate(lat: Optional[float], lon: Optional[float]) -> bool:
    """
    Check that a lat/lon pair is finite and inside the WGS84 ranges.

    Example:
        >>> is_valid_coordinate(45.5, -122.6)
        True
        >>> is_valid_coordinate(91, 0)
        False
    """
    if lat is None or lon is None:
        return False
    if isinstance(lat, bool) or isinstance(lon, bool):
        return False
    try:
        lat_f = float(lat)
        lon_f = float(lon)
    except (TypeError, ValueError):
        return False
    if not (math.isfinite(lat_f) and math.isfinite(lon_f)):
        return False
    return -90 <= lat_f <= 90 and -180 <= lon_f <= 180
