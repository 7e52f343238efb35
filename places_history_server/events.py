"""Historical event search: validate, resolve through the cache, shape."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from . import state
from .constants import GENERIC_UPSTREAM_ERROR
from .diagnostics import probe_connection
from .errors import UpstreamError, ValidationError
from .resolver import resolve_events
from .shaping import shape
from .validation import parse_search_request

if TYPE_CHECKING:
    from .cache import EventCache
    from .client import SparqlClient
    from .models import RawRecord

logger = logging.getLogger(__name__)


def _search_events(
    lat: Any,
    lng: Any,
    radius_km: Any = None,
    start_year: Any = None,
    end_year: Any = None,
    coordinates: Any = False,
    client: SparqlClient | None = None,
    cache: EventCache | None = None,
) -> dict:
    """Find historical events within ``radius_km`` of (lat, lng).

    Returns a GeoJSON FeatureCollection sorted by ascending distance, or an
    error dict with ``status`` 400 (bad parameters) or 500 (upstream failure).
    Upstream error details are logged, never returned.
    """
    settings = state.get_settings()
    client = client or state.get_sparql_client()
    cache = cache or state.get_event_cache()

    try:
        request = parse_search_request(
            lat,
            lng,
            radius_km,
            start_year,
            end_year,
            coordinates,
            default_radius_km=settings.default_radius_km,
            coord_precision=settings.cache_coord_precision,
        )
    except ValidationError as e:
        logger.info(f"Rejected search: {e}")
        return {"error": str(e), "status": 400}

    logger.info(f"Event search: {request.to_dict()}")

    def compute() -> tuple[RawRecord, ...]:
        if settings.connection_probe_enabled:
            probe_connection(client)
        return resolve_events(request, client)

    try:
        records = cache.get_or_compute(request.cache_key(), compute)
    except UpstreamError as e:
        logger.error(
            f"Event search failed for {request.to_dict()}: {type(e).__name__}: {e} "
            f"(status={e.status_code}, detail={e.detail[:500]!r})"
        )
        return {"error": GENERIC_UPSTREAM_ERROR, "status": 500}

    result = shape(records, request.output_mode)
    logger.info(f"Returning {len(result['features'])} {request.output_mode} features")
    return result
