"""SPARQL query builders for the event search tiers.

Each tier selects entities with a coordinate location (P625) inside a bounding
box and with a resolved date inside the requested year range. The endpoint's
proximity service (wikibase:around) is not used. The box is a coarse
pre-filter; exact distance filtering happens in the resolver.

Tiers:
    primary    - broad date coverage (P585, P580, P571, P582), description,
                 instance-of hint. LIMIT 500.
    simplified - label/description optional, P585 or P580, image. LIMIT 100.
    fallback   - required P585, label, Wikipedia link only. LIMIT 50.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from .constants import (
    ENGLISH_WIKIPEDIA_PREFIX,
    FALLBACK_LIMIT,
    P_COORDINATE_LOCATION,
    P_END_TIME,
    P_IMAGE,
    P_INCEPTION,
    P_INSTANCE_OF,
    P_POINT_IN_TIME,
    P_START_TIME,
    PRIMARY_LIMIT,
    SIMPLIFIED_LIMIT,
)
from .models import BoundingBox, SearchRequest

PREFIXES = """PREFIX wdt: <http://www.wikidata.org/prop/direct/>
PREFIX wd: <http://www.wikidata.org/entity/>
PREFIX rdfs: <http://www.w3.org/2000/01/rdf-schema#>
PREFIX schema: <http://schema.org/>
PREFIX xsd: <http://www.w3.org/2001/XMLSchema#>"""


def _fmt(value: float) -> str:
    return f"{value:.6f}"


def _location_block(bbox: BoundingBox) -> str:
    """Bind ?location, ?lat and ?lng, restricted to the bounding box.

    WKT literals are "Point(<lng> <lat>)": the first number is longitude.
    Literals prefixed with a globe IRI (Moon, Mars, ...) fail STRSTARTS and
    are excluded.
    """
    return f"""  ?item wdt:{P_COORDINATE_LOCATION} ?location .
  FILTER(STRSTARTS(STR(?location), "Point("))
  BIND(xsd:decimal(STRBEFORE(STRAFTER(STR(?location), "Point("), " ")) AS ?lng)
  BIND(xsd:decimal(STRBEFORE(STRAFTER(STRAFTER(STR(?location), "Point("), " "), ")")) AS ?lat)
  FILTER(?lat >= {_fmt(bbox.min_lat)} && ?lat <= {_fmt(bbox.max_lat)})
  FILTER(?lng >= {_fmt(bbox.min_lng)} && ?lng <= {_fmt(bbox.max_lng)})"""


def _year_filter(request: SearchRequest) -> str:
    return f"""  FILTER(BOUND(?date))
  FILTER(YEAR(?date) >= {request.start_year} && YEAR(?date) <= {request.end_year})"""


def _wikipedia_block() -> str:
    return f"""  OPTIONAL {{
    ?wikipediaUrl schema:about ?item ;
                  schema:inLanguage "en" .
    FILTER(STRSTARTS(STR(?wikipediaUrl), "{ENGLISH_WIKIPEDIA_PREFIX}"))
  }}"""


def build_primary_query(request: SearchRequest, bbox: BoundingBox) -> str:
    """Broad query: coalesce four date properties, keep instance-of hints."""
    return f"""{PREFIXES}
SELECT ?item ?itemLabel ?itemDescription ?date ?location ?lat ?lng ?wikipediaUrl ?instance WHERE {{
{_location_block(bbox)}
  OPTIONAL {{ ?item wdt:{P_INSTANCE_OF} ?instance }}
  OPTIONAL {{ ?item wdt:{P_POINT_IN_TIME} ?pointInTime }}
  OPTIONAL {{ ?item wdt:{P_START_TIME} ?startTime }}
  OPTIONAL {{ ?item wdt:{P_INCEPTION} ?inception }}
  OPTIONAL {{ ?item wdt:{P_END_TIME} ?endTime }}
  BIND(COALESCE(?pointInTime, ?startTime, ?inception, ?endTime) AS ?date)
{_year_filter(request)}
  ?item rdfs:label ?itemLabel .
  FILTER(LANG(?itemLabel) = "en")
  OPTIONAL {{ ?item schema:description ?itemDescription . FILTER(LANG(?itemDescription) = "en") }}
{_wikipedia_block()}
}}
LIMIT {PRIMARY_LIMIT}"""


def build_simplified_query(request: SearchRequest, bbox: BoundingBox) -> str:
    """Lighter query: optional label, two date properties, direct image."""
    return f"""{PREFIXES}
SELECT ?item ?itemLabel ?itemDescription ?date ?location ?lat ?lng ?wikipediaUrl ?imageUrl WHERE {{
{_location_block(bbox)}
  FILTER(EXISTS {{ ?item wdt:{P_POINT_IN_TIME} [] }} || EXISTS {{ ?item wdt:{P_START_TIME} [] }})
  OPTIONAL {{ ?item wdt:{P_POINT_IN_TIME} ?pointInTime }}
  OPTIONAL {{ ?item wdt:{P_START_TIME} ?startTime }}
  BIND(COALESCE(?pointInTime, ?startTime) AS ?date)
{_year_filter(request)}
  OPTIONAL {{ ?item rdfs:label ?itemLabel . FILTER(LANG(?itemLabel) = "en") }}
  OPTIONAL {{ ?item schema:description ?itemDescription . FILTER(LANG(?itemDescription) = "en") }}
{_wikipedia_block()}
  OPTIONAL {{ ?item wdt:{P_IMAGE} ?imageUrl }}
}}
LIMIT {SIMPLIFIED_LIMIT}"""


def build_fallback_query(request: SearchRequest, bbox: BoundingBox) -> str:
    """Minimal query: a single required point-in-time date, no hints."""
    return f"""{PREFIXES}
SELECT ?item ?itemLabel ?date ?location ?lat ?lng ?wikipediaUrl WHERE {{
{_location_block(bbox)}
  ?item wdt:{P_POINT_IN_TIME} ?date .
{_year_filter(request)}
  ?item rdfs:label ?itemLabel .
  FILTER(LANG(?itemLabel) = "en")
{_wikipedia_block()}
}}
LIMIT {FALLBACK_LIMIT}"""


@dataclass(frozen=True)
class QueryTier:
    name: str
    build: Callable[[SearchRequest, BoundingBox], str]
    limit: int


PRIMARY_TIER = QueryTier("primary", build_primary_query, PRIMARY_LIMIT)
SIMPLIFIED_TIER = QueryTier("simplified", build_simplified_query, SIMPLIFIED_LIMIT)
FALLBACK_TIER = QueryTier("fallback", build_fallback_query, FALLBACK_LIMIT)

# Order tried by the resolver. At most two tiers run per request.
DEFAULT_TIERS: tuple[QueryTier, ...] = (PRIMARY_TIER, FALLBACK_TIER)

TIERS_BY_NAME = {t.name: t for t in (PRIMARY_TIER, SIMPLIFIED_TIER, FALLBACK_TIER)}


# Small connectivity probes, each LIMIT 3
PROBE_QUERIES: dict[str, tuple[str, str]] = {
    "basic": (
        "Basic connectivity test (no coordinates)",
        f"""{PREFIXES}
SELECT ?item ?itemLabel WHERE {{
  ?item wdt:{P_INSTANCE_OF} wd:Q5 .
  ?item rdfs:label ?itemLabel .
  FILTER(LANG(?itemLabel) = "en")
}}
LIMIT 3""",
    ),
    "coordinates": (
        "Coordinate extraction test",
        f"""{PREFIXES}
SELECT ?item ?itemLabel ?location ?lat ?lng WHERE {{
  ?item wdt:{P_COORDINATE_LOCATION} ?location .
  ?item wdt:{P_POINT_IN_TIME} ?date .
  ?item rdfs:label ?itemLabel .
  FILTER(LANG(?itemLabel) = "en")
  BIND(xsd:decimal(STRBEFORE(STRAFTER(STR(?location), "Point("), " ")) AS ?lng)
  BIND(xsd:decimal(STRBEFORE(STRAFTER(STRAFTER(STR(?location), "Point("), " "), ")")) AS ?lat)
}}
LIMIT 3""",
    ),
    "wikipedia": (
        "Wikipedia links test",
        f"""{PREFIXES}
SELECT ?item ?itemLabel ?wikipediaUrl WHERE {{
  ?item wdt:{P_POINT_IN_TIME} ?date .
  ?item rdfs:label ?itemLabel .
  FILTER(LANG(?itemLabel) = "en")
{_wikipedia_block()}
}}
LIMIT 3""",
    ),
    "time": (
        "Time properties test",
        f"""{PREFIXES}
SELECT ?item ?itemLabel ?date WHERE {{
  ?item wdt:{P_POINT_IN_TIME} ?date .
  ?item rdfs:label ?itemLabel .
  FILTER(LANG(?itemLabel) = "en")
}}
LIMIT 3""",
    ),
}
