"""Great-circle distance and bounding-box geometry.

The bounding box is only a coarse pre-filter for the upstream query. Inclusion
is always decided by ``distance_km``.
"""

from __future__ import annotations

import logging
import math

from haversine import Unit, haversine

from .constants import BBOX_BUFFER_DEGREES, EARTH_RADIUS_KM, KM_PER_DEGREE_LAT, POLAR_CAP_LAT
from .models import BoundingBox, Point

logger = logging.getLogger(__name__)


def is_valid_coordinate(lat: float, lng: float) -> bool:
    """Check that lat/lng are finite and inside WGS84 ranges."""
    if not (math.isfinite(lat) and math.isfinite(lng)):
        return False
    return -90.0 <= lat <= 90.0 and -180.0 <= lng <= 180.0


def distance_km(a: Point, b: Point) -> float:
    """Haversine distance in kilometres on a sphere of radius 6371 km.

    Callers must reject non-finite coordinates first.
    """
    # haversine() takes (lat, lng) tuples; the angle is scaled by our own radius
    angle = haversine((a.lat, a.lng), (b.lat, b.lng), unit=Unit.RADIANS)
    return angle * EARTH_RADIUS_KM


def bounding_box(center: Point, radius_km: float) -> BoundingBox:
    """Conservative lat/lng rectangle containing the circle around ``center``.

    Latitude delta is ``radius / 111.32``. Longitude delta also divides by
    ``cos(lat)`` taken at the poleward edge of the box, where the circle is
    widest in degrees of longitude. A 0.1 degree buffer is added on every side.

    The cosine model breaks down near the poles, so once the box reaches the
    polar cap (|lat| >= 89) it spans every longitude instead. The same happens
    when the box would cross the antimeridian. Latitude bounds are clamped to
    [-90, 90].
    """
    lat_delta = radius_km / KM_PER_DEGREE_LAT

    min_lat = center.lat - lat_delta - BBOX_BUFFER_DEGREES
    max_lat = center.lat + lat_delta + BBOX_BUFFER_DEGREES

    min_lng, max_lng = -180.0, 180.0
    if -POLAR_CAP_LAT < min_lat and max_lat < POLAR_CAP_LAT:
        poleward_lat = max(abs(min_lat), abs(max_lat))
        lng_delta = radius_km / (KM_PER_DEGREE_LAT * math.cos(math.radians(poleward_lat)))
        west = center.lng - lng_delta - BBOX_BUFFER_DEGREES
        east = center.lng + lng_delta + BBOX_BUFFER_DEGREES
        # A single rectangle cannot wrap the antimeridian
        if west >= -180.0 and east <= 180.0:
            min_lng, max_lng = west, east

    bbox = BoundingBox(
        min_lat=max(min_lat, -90.0),
        max_lat=min(max_lat, 90.0),
        min_lng=min_lng,
        max_lng=max_lng,
    )
    logger.debug(
        f"Bounding box for ({center.lat}, {center.lng}) r={radius_km}km: "
        f"lat [{bbox.min_lat:.4f}, {bbox.max_lat:.4f}] "
        f"lng [{bbox.min_lng:.4f}, {bbox.max_lng:.4f}]"
    )
    return bbox
