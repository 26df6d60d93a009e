"""
Geocoding provider implementations.
"""

from incident_feeds.geocoding.providers.opencage import OpenCageGeocoder

__all__ = ["OpenCageGeocoder"]
