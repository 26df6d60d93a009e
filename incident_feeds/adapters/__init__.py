"""
City feed adapters and the city -> adapter registry.

Usage:
    from incident_feeds.adapters import get_adapter

    adapter = get_adapter("pdx")
    batch = await adapter.fetch_city("pdx")
"""

import logging
from typing import Dict, Type

from incident_feeds.adapters.base import BaseAdapter, FeedConfigurationError
from incident_feeds.adapters.nashville import NashvilleAdapter
from incident_feeds.adapters.portland import PortlandAdapter
from incident_feeds.adapters.san_francisco import SanFranciscoAdapter

logger = logging.getLogger(__name__)

ADAPTERS: Dict[str, Type[BaseAdapter]] = {
    NashvilleAdapter.name: NashvilleAdapter,
    PortlandAdapter.name: PortlandAdapter,
    SanFranciscoAdapter.name: SanFranciscoAdapter,
}

CITY_ADAPTERS: Dict[str, str] = {
    "nashville": NashvilleAdapter.name,
    "portland": PortlandAdapter.name,
    "pdx": PortlandAdapter.name,
    "sf": SanFranciscoAdapter.name,
    "san-francisco": SanFranciscoAdapter.name,
    "sanfrancisco": SanFranciscoAdapter.name,
}

DEFAULT_ADAPTER = NashvilleAdapter.name


def get_adapter(city: str, **kwargs) -> BaseAdapter:
    """
    Get an adapter instance for a city name.

    Unknown cities fall back to the Nashville adapter.

    Args:
        city: City name or alias, case-insensitive
        **kwargs: Passed to the adapter constructor

    Returns:
        Adapter instance
    """
    key = str(city or "").strip().lower()
    name = CITY_ADAPTERS.get(key)
    if name is None:
        logger.info(f"No adapter for city {city!r}; using {DEFAULT_ADAPTER}")
        name = DEFAULT_ADAPTER
    return ADAPTERS[name](**kwargs)


__all__ = [
    "BaseAdapter",
    "FeedConfigurationError",
    "NashvilleAdapter",
    "PortlandAdapter",
    "SanFranciscoAdapter",
    "ADAPTERS",
    "CITY_ADAPTERS",
    "get_adapter",
]
