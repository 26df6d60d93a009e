"""
Format parsers turning raw feed payloads into source rows.

Parsers are total: unparsable or empty input yields an empty list. The format
is sniffed from the content itself; the upstream content type is only a hint.

Usage:
    from incident_feeds.parsers import parse_feed

    rows = parse_feed(response.content, response.content_type)
"""

import logging
import re
from typing import List, Optional

from incident_feeds.extract.fields import SourceRow
from incident_feeds.parsers.html_table import parse_html_table
from incident_feeds.parsers.json_feed import NOT_JSON, load_json, parse_json, rows_from_document
from incident_feeds.parsers.kml import parse_kml

logger = logging.getLogger(__name__)

KML_ROOT = re.compile(r"<kml[\s>]", re.IGNORECASE)
HTML_ROOT = re.compile(r"<html[\s>]|<table[\s>]", re.IGNORECASE)

_HINT_FORMATS = (
    ("kml", ("kml", "xml")),
    ("json", ("json",)),
    ("html", ("html",)),
)


def _decode(content) -> str:
    if isinstance(content, (bytes, bytearray)):
        return bytes(content).decode("utf-8-sig", errors="replace")
    return content or ""


def _format_from_hint(content_hint: Optional[str]) -> Optional[str]:
    hint = (content_hint or "").lower()
    for fmt, markers in _HINT_FORMATS:
        if any(marker in hint for marker in markers):
            return fmt
    return None


def sniff_format(content) -> Optional[str]:
    """
    Detect the payload format: "kml", "json", "html", or None.

    Checked in order: a <kml root tag, a successful JSON parse, an <html root
    tag (or a bare <table>).
    """
    text = _decode(content)
    if not text.strip():
        return None
    if KML_ROOT.search(text):
        return "kml"
    if load_json(text) is not NOT_JSON:
        return "json"
    if HTML_ROOT.search(text):
        return "html"
    return None


def parse_feed(content, content_hint: Optional[str] = None) -> List[SourceRow]:
    """Sniff the payload format and parse it into source rows."""
    text = _decode(content)
    fmt = sniff_format(text)

    hinted = _format_from_hint(content_hint)
    if hinted and fmt and hinted != fmt:
        logger.info(f"Content type {content_hint!r} suggests {hinted}, sniffed {fmt}")

    if fmt == "kml":
        return parse_kml(content if isinstance(content, (bytes, bytearray)) else text)
    if fmt == "json":
        return rows_from_document(load_json(text))
    if fmt == "html":
        return parse_html_table(text)

    logger.warning("Unrecognized feed format; no rows parsed")
    return []


__all__ = [
    "SourceRow",
    "parse_feed",
    "sniff_format",
    "parse_kml",
    "parse_json",
    "parse_html_table",
]
