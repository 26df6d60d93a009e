"""
Data models for incident records.

IntermediateRecord is the per-row working shape produced by a source adapter's
field extraction. CanonicalPlace and PlaceBatch are the only types handed to
clients; they are pydantic models serialized with camelCase keys.
"""
import math
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from incident_feeds.core.utils.formatting import iso_from_datetime

# Values allowed in the free-form extras bag
ExtraValue = Union[str, int, float, bool, None]


def compact_extras(extras: Dict[str, Any]) -> Dict[str, ExtraValue]:
    """Drop missing values and stringify anything that is not a scalar."""
    out: Dict[str, ExtraValue] = {}
    for key, value in extras.items():
        if value is None:
            continue
        if isinstance(value, (str, int, float, bool)):
            out[key] = value
        else:
            out[key] = str(value)
    return out


@dataclass
class IntermediateRecord:
    """One extracted feed row, before coordinates are resolved."""

    source_row: Dict[str, Any]
    id: str
    name: str
    display_address: str
    category: Optional[str] = None
    raw_address: Optional[str] = None
    updated_at: Optional[str] = None
    call_time_received: Optional[str] = None
    extras: Dict[str, ExtraValue] = field(default_factory=dict)
    native_lat: Optional[float] = None
    native_lon: Optional[float] = None

    @property
    def has_native_coordinates(self) -> bool:
        return (
            self.native_lat is not None
            and self.native_lon is not None
            and math.isfinite(self.native_lat)
            and math.isfinite(self.native_lon)
        )


class CanonicalPlace(BaseModel):
    """Unified incident record shared by every source."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    category: Optional[str] = None
    lat: float = Field(..., ge=-90, le=90)
    lon: float = Field(..., ge=-180, le=180)
    address: str = Field(..., min_length=1)
    call_time_received: Optional[str] = Field(None, alias="callTimeReceived")
    updated_at: Optional[str] = Field(None, alias="updatedAt")
    extras: Dict[str, ExtraValue] = Field(default_factory=dict)

    @field_validator("lat", "lon")
    @classmethod
    def require_finite(cls, v: float) -> float:
        if not math.isfinite(v):
            raise ValueError("coordinate must be finite")
        return v

    def as_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return self.model_dump(by_alias=True)


class PlaceBatch(BaseModel):
    """One fetch worth of canonical places plus batch metadata."""

    model_config = ConfigDict(populate_by_name=True)

    city: str
    source: str
    fetched_at: datetime = Field(..., alias="fetchedAt")
    places: List[CanonicalPlace] = Field(default_factory=list)

    def as_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "city": self.city,
            "source": self.source,
            "fetchedAt": iso_from_datetime(self.fetched_at),
            "places": [place.as_dict() for place in self.places],
        }
