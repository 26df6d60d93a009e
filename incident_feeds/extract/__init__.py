"""
Field extraction from loosely-typed source rows.

- fields: fallback chains, random id source, generic incident field map
- description: KML free-text description parsing
"""

from incident_feeds.extract.fields import (
    SourceRow,
    FieldChain,
    RandomIdSource,
    key,
    keys,
    path,
    resolve_all,
    generic_field_chains,
    extract_generic,
)
from incident_feeds.extract.description import (
    KmlDescription,
    parse_kml_description,
    parse_pacific_timestamp,
)

__all__ = [
    "SourceRow",
    "FieldChain",
    "RandomIdSource",
    "key",
    "keys",
    "path",
    "resolve_all",
    "generic_field_chains",
    "extract_generic",
    "KmlDescription",
    "parse_kml_description",
    "parse_pacific_timestamp",
]
