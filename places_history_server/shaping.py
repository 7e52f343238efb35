"""Convert resolved records into GeoJSON FeatureCollections.

Property names follow the map and results-list contract (``distance`` in km,
``wikipediaUrl``, ``imageUrl``). Geometry coordinates are [lng, lat].
"""

import logging
from collections.abc import Iterable

from .geo import is_valid_coordinate
from .models import OutputMode, Point, RawRecord

logger = logging.getLogger(__name__)


def _full_feature(record: RawRecord, point: Point) -> dict:
    return {
        "type": "Feature",
        "geometry": point.to_geojson(),
        "properties": {
            "id": record.id,
            "label": record.label,
            "description": record.description,
            "date": record.date,
            "distance": record.distance_km,
            "wikipediaUrl": record.wikipedia_url,
            "imageUrl": record.image_url,
        },
    }


def _coordinates_feature(record: RawRecord, point: Point) -> dict:
    geometry = point.to_geojson()
    return {
        "type": "Feature",
        "geometry": geometry,
        "properties": {"coordinates": list(geometry["coordinates"])},
    }


def shape(records: Iterable[RawRecord], mode: OutputMode = "full") -> dict:
    """Build a FeatureCollection, preserving the input order.

    Records that fail the final geometry check, or that were never given a
    distance, are left out rather than emitted with null fields.
    """
    build = _coordinates_feature if mode == "coordinates" else _full_feature
    features = []
    for record in records:
        point = record.point
        if point is None or not is_valid_coordinate(point.lat, point.lng):
            logger.warning(f"Excluding {record.id} from output: invalid geometry")
            continue
        if record.distance_km is None:
            logger.warning(f"Excluding {record.id} from output: no distance computed")
            continue
        features.append(build(record, point))

    return {"type": "FeatureCollection", "features": features}
