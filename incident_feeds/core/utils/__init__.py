"""
Shared utility functions for the incident feed pipeline.

Modules:
- geo: Geographic calculations (haversine, coordinate validation)
- address: Address normalization and display policies
- formatting: Text cleanup and timestamp normalization

Usage:
    from incident_feeds.core.utils import haversine_distance, normalize_address, to_iso

    # Calculate distance
    distance = haversine_distance(45.52, -122.68, 45.60, -122.50, unit='miles')

    # Normalize address
    normalized = normalize_address("123  MAIN ST")  # "123 main st"

    # Normalize a timestamp
    stamp = to_iso(1755472800000)  # "2025-08-17T23:20:00.000Z"
"""

from incident_feeds.core.utils.geo import (
    haversine_distance,
    is_valid_coordinate,
    to_float,
)
from incident_feeds.core.utils.address import (
    normalize_address,
    normalize_intersection,
    title_case,
    prettify_street,
    canonicalize_display,
    with_city_state,
    force_region_suffix,
)
from incident_feeds.core.utils.formatting import (
    clean_text,
    strip_html,
    format_incident_type_name,
    to_iso,
)

__all__ = [
    # Geo utilities
    "haversine_distance",
    "is_valid_coordinate",
    "to_float",
    # Address utilities
    "normalize_address",
    "normalize_intersection",
    "title_case",
    "prettify_street",
    "canonicalize_display",
    "with_city_state",
    "force_region_suffix",
    # Formatting utilities
    "clean_text",
    "strip_html",
    "format_incident_type_name",
    "to_iso",
]
