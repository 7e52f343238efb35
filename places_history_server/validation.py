"""Validation of inbound search parameters."""

from __future__ import annotations

import math
from datetime import date
from typing import Any

from .constants import DEFAULT_START_YEAR, MAX_RADIUS_KM, MIN_RADIUS_KM
from .errors import ValidationError
from .helpers import km_to_miles
from .models import OutputMode, Point, SearchRequest


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and value.strip() == "")


def _to_float(value: Any) -> float | None:
    if isinstance(value, bool):
        return None
    try:
        result = float(value)
    except (TypeError, ValueError):
        return None
    return result if math.isfinite(result) else None


def _to_int(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value.is_integer() else None
    try:
        return int(str(value).strip())
    except ValueError:
        return None


def _to_flag(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    return str(value).strip().lower() == "true"


def parse_search_request(
    lat: Any,
    lng: Any,
    radius_km: Any = None,
    start_year: Any = None,
    end_year: Any = None,
    coordinates: Any = False,
    *,
    default_radius_km: float,
    coord_precision: int = 4,
    today: date | None = None,
) -> SearchRequest:
    """Validate raw parameters and build a SearchRequest.

    Coordinates are rounded to ``coord_precision`` decimal places so that the
    cache key and the distance computation use the same centre.

    Raises:
        ValidationError: On non-numeric values, out-of-range radius or
            coordinates, or an invalid year range.
    """
    current_year = (today or date.today()).year

    lat_f = _to_float(lat)
    lng_f = _to_float(lng)
    radius_f = default_radius_km if _is_blank(radius_km) else _to_float(radius_km)
    if lat_f is None or lng_f is None or radius_f is None:
        raise ValidationError("Invalid parameters. lat, lng, and r must be valid numbers.")
    if not -90.0 <= lat_f <= 90.0 or not -180.0 <= lng_f <= 180.0:
        raise ValidationError("Invalid parameters. lat must be in [-90, 90] and lng in [-180, 180].")

    start = DEFAULT_START_YEAR if _is_blank(start_year) else _to_int(start_year)
    end = current_year if _is_blank(end_year) else _to_int(end_year)
    if start is None or end is None:
        raise ValidationError(
            "Invalid year parameters. startYear and endYear must be valid numbers."
        )
    if start > end:
        raise ValidationError("startYear must be less than or equal to endYear.")
    if end > current_year:
        raise ValidationError("endYear cannot be in the future.")

    if radius_f < MIN_RADIUS_KM:
        raise ValidationError(f"Radius too small. Minimum allowed is {MIN_RADIUS_KM:g}km.")
    if radius_f > MAX_RADIUS_KM:
        raise ValidationError(
            f"Radius too large. Maximum allowed is {MAX_RADIUS_KM:g}km "
            f"({km_to_miles(MAX_RADIUS_KM):.0f} miles)."
        )

    mode: OutputMode = "coordinates" if _to_flag(coordinates) else "full"
    return SearchRequest(
        center=Point(lat=round(lat_f, coord_precision), lng=round(lng_f, coord_precision)),
        radius_km=radius_f,
        start_year=start,
        end_year=end,
        output_mode=mode,
    )
