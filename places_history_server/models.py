"""Data models for search requests and historical event records."""

from dataclasses import dataclass
from typing import Literal

OutputMode = Literal["full", "coordinates"]


@dataclass(frozen=True)
class Point:
    """A WGS84 position. Always built by keyword, never from a bare tuple.

    WKT literals and GeoJSON put longitude first; ``to_geojson`` is the only
    place that order is produced.
    """

    lat: float
    lng: float

    def to_geojson(self) -> dict:
        return {"type": "Point", "coordinates": [self.lng, self.lat]}

    def to_dict(self) -> dict:
        return {"lat": self.lat, "lng": self.lng}


@dataclass(frozen=True)
class BoundingBox:
    min_lat: float
    max_lat: float
    min_lng: float
    max_lng: float

    def contains(self, point: Point) -> bool:
        return (
            self.min_lat <= point.lat <= self.max_lat
            and self.min_lng <= point.lng <= self.max_lng
        )

    def to_dict(self) -> dict:
        return {
            "min_lat": self.min_lat,
            "max_lat": self.max_lat,
            "min_lng": self.min_lng,
            "max_lng": self.max_lng,
        }


@dataclass(frozen=True)
class SearchRequest:
    center: Point
    radius_km: float
    start_year: int
    end_year: int
    output_mode: OutputMode = "full"

    def cache_key(self) -> tuple:
        """Key shared by both output modes."""
        return (
            self.center.lat,
            self.center.lng,
            self.radius_km,
            self.start_year,
            self.end_year,
        )

    def to_dict(self) -> dict:
        return {
            "center": self.center.to_dict(),
            "radius_km": self.radius_km,
            "start_year": self.start_year,
            "end_year": self.end_year,
            "output_mode": self.output_mode,
        }


@dataclass(frozen=True)
class RawRecord:
    """One upstream result row after parsing.

    ``point`` is None when the row carried no usable coordinates; such records
    are dropped before distance filtering. ``distance_km`` is attached by the
    resolver.
    """

    id: str
    label: str
    date: str
    point: Point | None
    description: str | None = None
    wikipedia_url: str | None = None
    image_url: str | None = None
    instance: str | None = None  # P31 hint, diagnostics only
    distance_km: float | None = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "label": self.label,
            "description": self.description,
            "date": self.date,
            "point": self.point.to_dict() if self.point else None,
            "distance_km": self.distance_km,
            "wikipedia_url": self.wikipedia_url,
            "image_url": self.image_url,
            "instance": self.instance,
        }
