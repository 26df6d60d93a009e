"""
Centralized configuration management for the incident feed pipeline.

All configuration is loaded from environment variables with sensible defaults.
Use the `settings` singleton for accessing configuration values.

Usage:
    from incident_feeds.core.config import settings

    # Access configuration
    print(settings.NASHVILLE_URL)
    print(settings.GEOCODE_TTL_SECONDS)
"""

import os
from pathlib import Path
from dataclasses import dataclass, field
from typing import List
from dotenv import load_dotenv

# Load environment variables from .env file
# Search in common locations
_env_paths = [
    Path(__file__).parent.parent.parent / ".env",  # repository root
    Path.cwd() / ".env",  # Current working directory
]

for env_path in _env_paths:
    if env_path.exists():
        load_dotenv(env_path)
        break

DEFAULT_PRECINCT_LABELS = "EAST,WEST,NORTH,SOUTH,CENTRAL,MIDTOWN,DOWNTOWN"


def _split_labels(raw: str) -> List[str]:
    return [label.strip().upper() for label in raw.split(",") if label.strip()]


@dataclass
class Settings:
    """Application settings loaded from environment variables."""

    # ==========================================================================
    # Geocoding (OpenCage)
    # ==========================================================================
    OPENCAGE_KEY: str = field(
        default_factory=lambda: os.getenv("OPENCAGE_KEY") or os.getenv("GEOCODE_API_KEY", "")
    )
    GEOCODE_TTL_SECONDS: int = field(
        default_factory=lambda: int(os.getenv("GEOCODE_TTL_SECONDS", str(30 * 24 * 3600)))
    )
    GEOCODE_CONCURRENCY: int = field(
        default_factory=lambda: int(os.getenv("GEOCODE_CONCURRENCY", "5"))
    )
    GEOCODER_DELAY: float = field(
        default_factory=lambda: float(os.getenv("GEOCODER_DELAY", "0.0"))
    )

    # ==========================================================================
    # Geographic sanity check
    # ==========================================================================
    SANITY_RADIUS_MILES: float = field(
        default_factory=lambda: float(os.getenv("SANITY_RADIUS_MILES", "40"))
    )
    # Feed "city" values that are really precincts or compass areas
    PRECINCT_LABELS: List[str] = field(
        default_factory=lambda: _split_labels(
            os.getenv("PRECINCT_LABELS", DEFAULT_PRECINCT_LABELS)
        )
    )

    # ==========================================================================
    # Upstream feeds
    # ==========================================================================
    NASHVILLE_URL: str = field(
        default_factory=lambda: os.getenv("NASHVILLE_URL", "")
    )
    PORTLAND_URL: str = field(
        default_factory=lambda: os.getenv("PORTLAND_URL", "")
    )
    SF_DATASET_URL: str = field(
        default_factory=lambda: os.getenv(
            "SF_DATASET_URL",
            "https://data.sfgov.org/resource/gnap-fj3t.json"
        )
    )
    SF_SODA_APP_TOKEN: str = field(
        default_factory=lambda: os.getenv("SF_SODA_APP_TOKEN", "")
    )
    SF_LIMIT: int = field(
        default_factory=lambda: int(os.getenv("SF_LIMIT", "1000"))
    )

    # ==========================================================================
    # HTTP
    # ==========================================================================
    HTTP_TIMEOUT: float = field(
        default_factory=lambda: float(os.getenv("HTTP_TIMEOUT", "30"))
    )
    USER_AGENT: str = field(
        default_factory=lambda: os.getenv("USER_AGENT", "IncidentFeeds/1.0")
    )

    # ==========================================================================
    # Logging
    # ==========================================================================
    LOG_LEVEL: str = field(
        default_factory=lambda: os.getenv("LOG_LEVEL", "INFO").upper()
    )

    def validate_geocoding(self) -> bool:
        """Check if a geocoding API key is configured."""
        return bool(self.OPENCAGE_KEY)


# Singleton settings instance
settings = Settings()
