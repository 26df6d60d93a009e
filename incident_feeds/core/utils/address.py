"""
Address canonicalization utilities.

This module consolidates address handling used by the source adapters and the
geocoder: normalization into a dedup/cache key, street and intersection title
casing, and the per-source display-address policies.

Usage:
    from incident_feeds.core.utils.address import normalize_address, prettify_street

    # Normalize for dedup and cache lookups
    normalize_address("  5th   Ave ")  # "5th ave"

    # Pretty-print an intersection
    prettify_street("MARKET ST\\\\3RD ST")  # "Market St / 3rd St"
"""

import re
from typing import Any, Iterable, Optional

from incident_feeds.core.config import settings
from incident_feeds.core.regions import SourceRegion

# Normalized address string used as the dedup and cache key
GeocodeQuery = str

# Compass directions kept upper-case in street names
UPPER_DIRECTIONS = {"N", "S", "E", "W", "NE", "NW", "SE", "SW"}

# Street type tokens and their display form
STREET_TOKENS = {
    "st": "St", "street": "Street",
    "ave": "Ave", "avenue": "Avenue",
    "blvd": "Blvd", "boulevard": "Boulevard",
    "rd": "Rd", "road": "Road",
    "dr": "Dr", "drive": "Drive",
    "ct": "Ct", "court": "Court",
    "ln": "Ln", "lane": "Lane",
    "ter": "Ter", "terrace": "Terrace",
    "pl": "Pl", "place": "Place",
    "pkwy": "Pkwy", "parkway": "Parkway",
    "hwy": "Hwy", "highway": "Highway",
    "way": "Way",
}

# Small words kept lower-case unless they start the street name
LOWER_SMALL_WORDS = {"of", "and", "the", "at", "de", "la", "del"}

_SIMPLE_WORD = re.compile(r"\b([a-z])([a-z0-9']*)")
_MC_PREFIX = re.compile(r"^mc[a-z]")


def normalize_address(address: Any) -> GeocodeQuery:
    """
    Normalize an address into a geocode query key.

    Trims, collapses internal whitespace and lowercases. Idempotent.

    Args:
        address: Raw address (None and non-strings are tolerated)

    Returns:
        Normalized address string, or empty string if input is None/empty

    Example:
        >>> normalize_address("5th   AVE ")
        '5th ave'
    """
    if address is None:
        return ""
    return " ".join(str(address).split()).lower()


def normalize_intersection(value: Any) -> str:
    """Backslashes to slashes, " / " spacing, single spaces."""
    text = str(value or "").strip()
    text = re.sub(r"\\+", "/", text)
    text = re.sub(r"\s*/\s*", " / ", text)
    return re.sub(r"\s{2,}", " ", text)


def title_case(value: Any) -> str:
    """
    Simple word-by-word title casing.

    Example:
        >>> title_case("ANTIOCH")
        'Antioch'
    """
    return _SIMPLE_WORD.sub(
        lambda m: m.group(1).upper() + m.group(2),
        str(value or "").lower(),
    )


def _cap_first(word: str) -> str:
    return word[:1].upper() + word[1:].lower() if word else word


def _title_case_word(word: str, idx: int) -> str:
    lower = word.lower()
    if word.upper() in UPPER_DIRECTIONS:
        return word.upper()
    if lower in STREET_TOKENS:
        return STREET_TOKENS[lower]
    if lower in LOWER_SMALL_WORDS and idx > 0:
        return lower
    if lower.startswith("o'"):
        return "O'" + _cap_first(lower[2:])
    if _MC_PREFIX.match(lower):
        return "Mc" + _cap_first(lower[2:])
    if "-" in word:
        return "-".join(_title_case_word(seg, i) for i, seg in enumerate(word.split("-")))
    return _cap_first(lower)


def title_case_street(street: str) -> str:
    """
    Street-aware title casing of a single street name.

    Example:
        >>> title_case_street("NE MARTIN LUTHER KING JR BLVD")
        'NE Martin Luther King Jr Blvd'
    """
    return " ".join(
        _title_case_word(word, idx) for idx, word in enumerate(street.split())
    )


def prettify_street(street: Any) -> str:
    """
    Title-case a street or an intersection.

    Intersections are split on "/" or "\\", each side cased independently
    and rejoined with " / ".

    Example:
        >>> prettify_street("mission st / 16TH ST")
        'Mission St / 16th St'
    """
    if street is None:
        return ""
    text = str(street).strip()
    if not text:
        return ""

    if re.search(r"[\\/]", text):
        sides = normalize_intersection(text).split("/")
        return " / ".join(
            title_case_street(side) for side in sides if side.strip()
        )

    return title_case_street(text)


def pick_display_city(
    city_name: Any,
    region: SourceRegion,
    precinct_labels: Optional[Iterable[str]] = None,
) -> str:
    """
    Choose the city shown in a display address.

    Feeds sometimes put a precinct or compass area ("EAST", "DOWNTOWN") in
    their city field; those, and blanks, become the region's canonical city.
    """
    raw = str(city_name or "").strip()
    if not raw:
        return region.city

    labels = precinct_labels if precinct_labels is not None else settings.PRECINCT_LABELS
    if raw.upper() in {label.upper() for label in labels}:
        return region.city

    return title_case(raw)


def canonicalize_display(
    street: Any,
    region_hint: Any,
    region: SourceRegion,
    precinct_labels: Optional[Iterable[str]] = None,
) -> str:
    """
    Build a display address from the feed's street and city fields.

    Args:
        street: Street or intersection text from the feed (may be empty)
        region_hint: City/precinct text from the feed (may be empty)
        region: The source's region
        precinct_labels: Labels that stand for the canonical city

    Returns:
        "<Street>, <City>, <REGION>", or "<City>, <REGION>" without a street

    Example:
        >>> canonicalize_display("BROADWAY\\\\5TH AVE N", "DOWNTOWN", NASHVILLE)
        'Broadway / 5th Ave N, Nashville, TN'
    """
    pretty = prettify_street(street)
    city = pick_display_city(region_hint, region, precinct_labels)
    if not pretty:
        return f"{city}, {region.region}"
    return f"{pretty}, {city}, {region.region}"


def with_city_state(address: Any, region: SourceRegion) -> str:
    """
    Enforce a fixed "<City>, <REGION>" suffix on an address lacking one.

    The suffix counts as present when the lowercase address contains the city
    name, the region abbreviation as a separate word or the region's full name.

    Example:
        >>> with_city_state("123 Main St", PORTLAND)
        '123 Main St, Portland, OR'
        >>> with_city_state(None, PORTLAND)
        'Portland, OR'
    """
    if address is None or not str(address).strip():
        return region.label

    clean = re.sub(r"\s+,", ",", str(address))
    clean = re.sub(r",\s+,", ",", clean).strip()
    lower = clean.lower()

    if (
        region.city.lower() in lower
        or re.search(rf"\s{re.escape(region.region.lower())}\b", lower)
        or region.region_name.lower() in lower
    ):
        return clean

    return f"{clean}, {region.label}"


def force_region_suffix(address: Any, region: SourceRegion) -> str:
    """
    Replace a trailing ", <other city>, <REGION>" with the canonical one,
    or append the canonical suffix. A city-level address with no street
    becomes the canonical label itself.

    Example:
        >>> force_region_suffix("500 Main St, East, TN", NASHVILLE)
        '500 Main St, Nashville, TN'
    """
    base = str(address or "").strip()
    if not base:
        return region.label

    abbrev = re.escape(region.region)

    # city-level "<City>, <REGION>" with no street stands for the whole region
    city_level = re.compile(rf"^[^,\d]+,\s*{abbrev}\.?\s*$", re.IGNORECASE)
    if city_level.match(base):
        return region.label

    with_city = re.compile(rf",\s*[^,]+,\s*{abbrev}\.?\s*$", re.IGNORECASE)
    region_only = re.compile(rf",\s*{abbrev}\.?\s*$", re.IGNORECASE)

    for pattern in (with_city, region_only):
        if pattern.search(base):
            return pattern.sub(f", {region.label}", base)

    return f"{base}, {region.label}"
