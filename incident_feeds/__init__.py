"""
City police incident feeds normalized into one place schema.

Packages:
- core: settings, HTTP fetching, regions and shared utilities
- parsers: KML, JSON and HTML-table feed parsers
- extract: fallback-chain field extraction
- geocoding: OpenCage provider, batch pool and sanity validation
- adapters: per-city feed adapters and registry

Usage:
    from incident_feeds.adapters import get_adapter

    batch = await get_adapter("pdx").fetch_city("pdx")
    print(batch.as_dict())
"""

__version__ = "1.0.0"
