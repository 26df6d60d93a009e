"""
Fallback-chain field extraction.

Each canonical field is resolved from a source row by an explicit ordered list
of (label, extractor) candidates. Candidates are evaluated in order and the
first defined value wins; a chain may end in a default or a default factory,
e.g. a random id.

Usage:
    from incident_feeds.extract.fields import FieldChain, keys

    id_chain = FieldChain("id", keys("GlobalID", "OBJECTID"), default_factory=random_id)
    record_id = id_chain.resolve(row)
"""

import logging
import random
import string
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

from incident_feeds.core.utils.geo import to_float
from incident_feeds.core.utils.formatting import to_iso

logger = logging.getLogger(__name__)

SourceRow = Dict[str, Any]
Extractor = Callable[[Mapping[str, Any]], Any]
Candidate = Tuple[str, Extractor]

_BASE36 = string.digits + string.ascii_lowercase


class RandomIdSource:
    """
    Callable producing random base-36 ids for rows with no natural id.

    Ids from this source are not stable across fetches. Pass a seeded
    random.Random to make them reproducible.
    """

    def __init__(self, rng: Optional[random.Random] = None, length: int = 11):
        self.rng = rng or random.Random()
        self.length = length

    def __call__(self) -> str:
        return "".join(self.rng.choice(_BASE36) for _ in range(self.length))


def key(name: str) -> Extractor:
    """Extractor reading one top-level key."""
    return lambda row: row.get(name)


def path(*steps: Any) -> Extractor:
    """Extractor walking nested dicts/lists, e.g. path("geometry", "coordinates", 1)."""

    def extract(row: Mapping[str, Any]) -> Any:
        current: Any = row
        for step in steps:
            if isinstance(current, Mapping):
                current = current.get(step)
            elif isinstance(current, (list, tuple)) and isinstance(step, int):
                current = current[step] if -len(current) <= step < len(current) else None
            else:
                return None
            if current is None:
                return None
        return current

    return extract


def keys(*names: str) -> List[Candidate]:
    """Candidates for a list of top-level keys, in order."""
    return [(name, key(name)) for name in names]


@dataclass
class FieldChain:
    """Ordered fallback chain for one canonical field."""

    field: str
    candidates: List[Candidate]
    default: Any = None
    default_factory: Optional[Callable[[], Any]] = None
    skip_blank: bool = False

    def resolve(self, row: Mapping[str, Any]) -> Any:
        """First defined candidate value, else the default."""
        for _, extractor in self.candidates:
            try:
                value = extractor(row)
            except (KeyError, IndexError, TypeError, AttributeError):
                value = None
            if value is None:
                continue
            if self.skip_blank and isinstance(value, str) and not value.strip():
                continue
            return value

        if self.default_factory is not None:
            return self.default_factory()
        return self.default


def resolve_all(chains: Mapping[str, FieldChain], row: Mapping[str, Any]) -> Dict[str, Any]:
    """Resolve every chain in a field map against one row."""
    return {name: chain.resolve(row) for name, chain in chains.items()}


# =============================================================================
# Generic chains for JSON, KML and HTML-table incident rows
# =============================================================================

def generic_field_chains(random_id: Callable[[], str]) -> Dict[str, FieldChain]:
    """
    Field map applied to loosely-typed incident rows of unknown provenance.

    Covers raw ArcGIS/Socrata JSON keys as well as the keys the KML and HTML
    parsers emit.
    """
    type_name = keys(
        "IncidentTypeName", "type_name", "type", "CallType",
        "description", "Description", "name",
    )
    return {
        "id": FieldChain(
            "id",
            keys("id", "objectid", "OBJECTID", "GlobalID", "GLOBALID",
                 "callid", "CallID", "title"),
            default_factory=random_id,
            skip_blank=True,
        ),
        "name": FieldChain("name", type_name, default="Incident", skip_blank=True),
        "category": FieldChain("category", keys("Category", "category")),
        "address": FieldChain(
            "address",
            keys("Address", "address", "Location", "location", "addr_full"),
            skip_blank=True,
        ),
        "lat": FieldChain(
            "lat",
            keys("lat", "latitude") + [("geometry.coordinates[1]", path("geometry", "coordinates", 1))],
        ),
        "lon": FieldChain(
            "lon",
            keys("lon", "longitude") + [("geometry.coordinates[0]", path("geometry", "coordinates", 0))],
        ),
        "updatedAt": FieldChain(
            "updatedAt",
            keys("updatedAt", "LastUpdate", "time", "datetime", "LastUpdated", "CreationDate"),
        ),
        "incidentTypeCode": FieldChain(
            "incidentTypeCode",
            keys("IncidentTypeCode", "type_code", "code", "CallTypeCode"),
        ),
        "incidentTypeName": FieldChain("incidentTypeName", type_name),
        "priority": FieldChain("priority", keys("Priority", "priority")),
        "incidentId": FieldChain("incidentId", keys("incidentId")),
    }


def extract_generic(row: Mapping[str, Any], random_id: Callable[[], str]) -> Dict[str, Any]:
    """
    Resolve the generic field map and coerce its types.

    Returns:
        Dict with id, name, category, address, lat, lon, updatedAt and extras
    """
    values = resolve_all(generic_field_chains(random_id), row)
    address = values["address"]

    return {
        "id": str(values["id"]),
        "name": str(values["name"]),
        "category": str(values["category"]) if values["category"] is not None else None,
        "address": str(address).strip() if address is not None else None,
        "lat": to_float(values["lat"]),
        "lon": to_float(values["lon"]),
        "updatedAt": to_iso(values["updatedAt"]),
        "extras": {
            "incidentTypeCode": values["incidentTypeCode"],
            "incidentTypeName": values["incidentTypeName"] or values["name"],
            "priority": values["priority"],
            "incidentId": values["incidentId"],
        },
    }
