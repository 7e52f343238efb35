"""Field extraction and normalization for SPARQL result rows.

Every function here is total: missing or malformed input yields None (or the
documented sentinel) instead of raising, except ``parse_wkt_point`` which
raises CoordinateParseFailure so callers can log why a row was dropped.
"""

import math
import re
from datetime import datetime

from .constants import ENGLISH_WIKIPEDIA_PREFIX, MILES_TO_KM, UNKNOWN_DATE
from .errors import CoordinateParseFailure
from .geo import is_valid_coordinate
from .models import Point

# WKT literal as returned for P625: "Point(<lng> <lat>)", optionally prefixed
# with a globe IRI for non-Earth bodies
_WKT_POINT_RE = re.compile(
    r"^\s*(?:<(?P<globe>[^>]*)>\s*)?Point\(\s*(?P<lng>[^\s()]+)\s+(?P<lat>[^\s()]+)\s*\)\s*$",
    re.IGNORECASE,
)
_EARTH_GLOBE_IRI = "http://www.wikidata.org/entity/Q2"


def miles_to_km(miles: float) -> float:
    return miles * MILES_TO_KM


def km_to_miles(km: float) -> float:
    return km / MILES_TO_KM


def binding_value(row: dict, name: str) -> str | None:
    """Get the string value of a variable from a SPARQL JSON binding row."""
    cell = row.get(name)
    if not isinstance(cell, dict):
        return None
    value = cell.get("value")
    if value is None:
        return None
    value = str(value)
    return value if value.strip() else None


def parse_float(value: str | None) -> float | None:
    """Parse a finite float, or None."""
    if value is None:
        return None
    try:
        result = float(value)
    except (TypeError, ValueError):
        return None
    return result if math.isfinite(result) else None


def parse_wkt_point(text: str | None) -> Point:
    """Parse a WKT ``Point(<lng> <lat>)`` literal.

    Longitude comes first in the literal.

    Raises:
        CoordinateParseFailure: If the literal is missing, malformed, refers to
            another globe, or holds out-of-range values.
    """
    if not text:
        raise CoordinateParseFailure("no geometry literal")
    match = _WKT_POINT_RE.match(text)
    if not match:
        raise CoordinateParseFailure(f"unrecognized geometry literal {text!r}")
    globe = match.group("globe")
    if globe and globe != _EARTH_GLOBE_IRI:
        raise CoordinateParseFailure(f"coordinates on non-Earth globe {globe}")
    lng = parse_float(match.group("lng"))
    lat = parse_float(match.group("lat"))
    if lat is None or lng is None:
        raise CoordinateParseFailure(f"non-numeric coordinates in {text!r}")
    if not is_valid_coordinate(lat, lng):
        raise CoordinateParseFailure(f"coordinates out of range in {text!r}")
    return Point(lat=lat, lng=lng)


def point_from_fields(lat: str | None, lng: str | None) -> Point | None:
    """Build a Point from separately bound lat/lng values, or None."""
    lat_f = parse_float(lat)
    lng_f = parse_float(lng)
    if lat_f is None or lng_f is None:
        return None
    if not is_valid_coordinate(lat_f, lng_f):
        return None
    return Point(lat=lat_f, lng=lng_f)


def normalize_date(raw: str | None) -> str:
    """Normalize an xsd:dateTime/xsd:date string to YYYY-MM-DD.

    Values with a time component are parsed as timestamps and reduced to their
    date. Date-only values pass through. Anything unparseable (BCE dates,
    year-precision zero months) is returned verbatim.
    """
    if not raw:
        return UNKNOWN_DATE
    if "T" in raw:
        try:
            return datetime.fromisoformat(raw.replace("Z", "+00:00")).date().isoformat()
        except ValueError:
            return raw
    return raw


def extract_year(date_str: str | None) -> int | None:
    """Extract the year from a normalized date string."""
    if not date_str:
        return None
    match = re.match(r"^(-?\d{1,4})-\d{2}-\d{2}", date_str)
    if match:
        return int(match.group(1))
    match = re.search(r"\b(\d{4})\b", date_str)
    return int(match.group(1)) if match else None


def entity_id(uri: str | None) -> str | None:
    """Reduce an entity IRI like http://www.wikidata.org/entity/Q42 to 'Q42'."""
    if not uri:
        return None
    tail = uri.rstrip("/").rsplit("/", 1)[-1]
    return tail or None


def english_wikipedia_url(url: str | None) -> str | None:
    """Return ``url`` only if it points at the English Wikipedia."""
    if url and url.startswith(ENGLISH_WIKIPEDIA_PREFIX):
        return url
    return None
