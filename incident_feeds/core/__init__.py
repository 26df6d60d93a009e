"""
Core module providing shared configuration, HTTP access, and utilities.

This module consolidates common functionality used across the codebase:
- Configuration management (settings, environment variables)
- Upstream feed fetching (httpx)
- Utility functions (geo, address, formatting)

Usage:
    from incident_feeds.core import settings, FeedFetcher
    from incident_feeds.core.utils import haversine_distance, normalize_address
"""

from incident_feeds.core.config import settings, Settings
from incident_feeds.core.http import FeedFetcher, FetchResponse, UpstreamFetchError

__all__ = [
    "settings",
    "Settings",
    "FeedFetcher",
    "FetchResponse",
    "UpstreamFetchError",
]
