"""Tiered resolution of historical events around a point.

Runs the primary tier and, only if it yields nothing usable (no rows inside
the radius, or an upstream failure), the fallback tier. Every tier goes
through the same ``run_tier`` routine: build query, fetch, exact distance
filter, dedupe, sort, truncate.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import TYPE_CHECKING

from .constants import MAX_RESULTS
from .errors import UpstreamError
from .geo import bounding_box, distance_km, is_valid_coordinate
from .helpers import extract_year
from .queries import DEFAULT_TIERS, QueryTier
from .telemetry import get_tracer

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from .client import SparqlClient
    from .models import RawRecord, SearchRequest

logger = logging.getLogger(__name__)


def filter_by_distance(
    records: Iterable[RawRecord],
    request: SearchRequest,
    max_results: int = MAX_RESULTS,
) -> list[RawRecord]:
    """Keep records within the radius, nearest first, at most ``max_results``.

    The radius boundary is inclusive. Records without usable coordinates are
    skipped, as are records whose date falls outside the requested years.
    Records with no readable year are kept. When an entity appears more than
    once (several coordinates or instance-of rows) its nearest row is kept.
    """
    center = request.center
    nearest: dict[str, RawRecord] = {}

    for record in records:
        point = record.point
        if point is None or not is_valid_coordinate(point.lat, point.lng):
            logger.warning(f"Skipping {record.id} ({record.label!r}): invalid coordinates")
            continue

        year = extract_year(record.date)
        if year is not None and not request.start_year <= year <= request.end_year:
            logger.debug(f"Outside years: {record.id} ({record.label!r}) dated {record.date}")
            continue

        dist = distance_km(center, point)
        if dist > request.radius_km:
            logger.debug(f"Outside radius: {record.id} ({record.label!r}) at {dist:.1f}km")
            continue
        logger.debug(f"Inside radius: {record.id} ({record.label!r}) at {dist:.1f}km")

        existing = nearest.get(record.id)
        if existing is None or dist < existing.distance_km:
            nearest[record.id] = replace(record, distance_km=dist)

    results = sorted(nearest.values(), key=lambda r: (r.distance_km, r.id))
    return results[:max_results]


def run_tier(tier: QueryTier, request: SearchRequest, client: SparqlClient) -> list[RawRecord]:
    """Execute one tier end to end and return its filtered, ranked records."""
    tracer = get_tracer()
    with tracer.start_as_current_span("resolver.tier") as span:
        span.set_attribute("resolver.tier", tier.name)

        bbox = bounding_box(request.center, request.radius_km)
        logger.info(
            f"{tier.name} tier: center=({request.center.lat}, {request.center.lng}) "
            f"r={request.radius_km}km years={request.start_year}-{request.end_year} "
            f"bbox={bbox.to_dict()}"
        )
        records = client.fetch(tier.build(request, bbox), tier=tier.name)
        results = filter_by_distance(records, request)

        span.set_attribute("resolver.candidates", len(records))
        span.set_attribute("resolver.results", len(results))

    logger.info(f"{tier.name} tier: {len(results)} of {len(records)} records within radius")
    return results


def resolve_events(
    request: SearchRequest,
    client: SparqlClient,
    tiers: Sequence[QueryTier] = DEFAULT_TIERS,
) -> tuple[RawRecord, ...]:
    """Resolve events for ``request`` by trying up to two tiers in order.

    An empty result from the last tier is a valid outcome, not an error.

    Raises:
        UpstreamError: If the last tier fails.
        ValueError: If ``tiers`` is empty or longer than two.
    """
    if not 1 <= len(tiers) <= 2:
        raise ValueError(f"expected one or two tiers, got {len(tiers)}")

    for index, tier in enumerate(tiers):
        is_last = index == len(tiers) - 1
        try:
            results = run_tier(tier, request, client)
        except UpstreamError as e:
            if is_last:
                raise
            logger.warning(f"{tier.name} tier failed ({e}); trying {tiers[index + 1].name} tier")
            continue

        if results or is_last:
            return tuple(results)
        logger.info(f"{tier.name} tier found nothing; trying {tiers[index + 1].name} tier")

    return ()
