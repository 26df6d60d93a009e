"""
JSON incident feed parser.

Accepts three document shapes:
- a bare array of incident objects
- an {"incidents": [...]} envelope
- a GeoJSON {"features": [...]} envelope

GeoJSON features are flattened: the feature's properties are merged with the
feature itself, feature keys taking precedence, so "geometry" stays reachable
for the coordinate fallback chains. The feature's own "type": "Feature" marker
is not carried over.
"""

import json
import logging
from typing import Any, List

from incident_feeds.extract.fields import SourceRow

logger = logging.getLogger(__name__)

# Returned by load_json when the content is not a JSON document
NOT_JSON = object()


def load_json(content) -> Any:
    """Decode a JSON document, or return NOT_JSON."""
    if isinstance(content, (bytes, bytearray)):
        content = bytes(content).decode("utf-8-sig", errors="replace")
    if not content or not content.strip():
        return NOT_JSON
    try:
        return json.loads(content)
    except (ValueError, RecursionError):
        return NOT_JSON


def _flatten_feature(feature: dict) -> SourceRow:
    properties = feature.get("properties")
    merged = dict(properties) if isinstance(properties, dict) else {}
    for name, value in feature.items():
        # GeoJSON object marker, not an incident type
        if name == "type" and value == "Feature":
            continue
        merged[name] = value
    return merged


def rows_from_document(doc: Any) -> List[SourceRow]:
    """Pull incident rows out of an already-decoded JSON document."""
    if isinstance(doc, list):
        items, geojson = doc, False
    elif isinstance(doc, dict) and isinstance(doc.get("incidents"), list):
        items, geojson = doc["incidents"], False
    elif isinstance(doc, dict) and isinstance(doc.get("features"), list):
        items, geojson = doc["features"], True
    else:
        logger.debug("JSON document has no recognizable incident list")
        return []

    rows: List[SourceRow] = []
    for item in items:
        if not isinstance(item, dict):
            continue
        rows.append(_flatten_feature(item) if geojson else dict(item))
    return rows


def parse_json(content) -> List[SourceRow]:
    """Parse JSON bytes or text into source rows; [] when not JSON."""
    doc = load_json(content)
    if doc is NOT_JSON:
        return []
    return rows_from_document(doc)
