"""Shared fixtures for Places History server tests."""

import json
import os
from unittest.mock import MagicMock

import pytest
import requests

# Set env vars BEFORE importing any places_history_server modules
# Set explicit test values so .env doesn't override them (load_dotenv won't override existing)
os.environ["SPARQL_ENDPOINT"] = "https://sparql.example.test/sparql"
os.environ["SPARQL_USER_AGENT"] = "Places-History-Tests/1.0"
os.environ["SPARQL_TIMEOUT_SECONDS"] = "30"
os.environ["DEFAULT_RADIUS_MILES"] = "5"
os.environ["CACHE_TTL_SECONDS"] = "3600"
os.environ["CACHE_COORD_PRECISION"] = "4"
os.environ["CONNECTION_PROBE_ENABLED"] = "false"
os.environ["PHOENIX_ENABLED"] = "false"

from places_history_server import initialize  # noqa: E402

initialize()

from places_history_server.cache import EventCache  # noqa: E402
from places_history_server.client import SparqlClient  # noqa: E402
from places_history_server.models import Point, RawRecord, SearchRequest  # noqa: E402
from places_history_server.state import Settings  # noqa: E402

NYC = Point(lat=40.7128, lng=-74.0060)


def make_response(status: int = 200, payload=None, text: str | None = None) -> requests.Response:
    """Build a real requests.Response carrying a JSON payload or raw text."""
    response = requests.Response()
    response.status_code = status
    response.reason = {200: "OK", 429: "Too Many Requests", 500: "Internal Server Error"}.get(
        status, "Error"
    )
    if text is not None:
        response._content = text.encode()
    else:
        response._content = json.dumps(payload if payload is not None else {}).encode()
    response.headers["Content-Type"] = "application/sparql-results+json"
    return response


def sparql_payload(*rows: dict) -> dict:
    return {"head": {"vars": []}, "results": {"bindings": list(rows)}}


def binding(
    qid: str,
    label: str,
    lat: float | None = None,
    lng: float | None = None,
    date: str | None = "1900-01-01T00:00:00Z",
    location: str | None = None,
    wikipedia: str | None = None,
    description: str | None = None,
) -> dict:
    """Build one SPARQL JSON result row."""
    row: dict = {
        "item": {"type": "uri", "value": f"http://www.wikidata.org/entity/{qid}"},
        "itemLabel": {"type": "literal", "xml:lang": "en", "value": label},
    }
    if lat is not None:
        row["lat"] = {"type": "literal", "value": str(lat)}
    if lng is not None:
        row["lng"] = {"type": "literal", "value": str(lng)}
    if location is None and lat is not None and lng is not None:
        location = f"Point({lng} {lat})"
    if location is not None:
        row["location"] = {"type": "literal", "value": location}
    if date is not None:
        row["date"] = {"type": "literal", "value": date}
    if wikipedia is not None:
        row["wikipediaUrl"] = {"type": "uri", "value": wikipedia}
    if description is not None:
        row["itemDescription"] = {"type": "literal", "value": description}
    return row


def record(
    qid: str,
    lat: float,
    lng: float,
    label: str | None = None,
    distance_km: float | None = None,
) -> RawRecord:
    return RawRecord(
        id=qid,
        label=label or qid,
        date="1900-01-01",
        point=Point(lat=lat, lng=lng),
        distance_km=distance_km,
    )


@pytest.fixture
def settings():
    """Settings pointing at a fake endpoint."""
    return Settings(endpoint="https://sparql.example.test/sparql", user_agent="Places-History-Tests/1.0")


@pytest.fixture
def mock_session():
    """A requests.Session stand-in; set .get.return_value or .get.side_effect."""
    session = MagicMock(spec=requests.Session)
    session.get.return_value = make_response(200, sparql_payload())
    return session


@pytest.fixture
def client(settings, mock_session):
    return SparqlClient(settings, session=mock_session)


@pytest.fixture
def cache():
    """A fresh, empty cache."""
    return EventCache(ttl_seconds=3600)


@pytest.fixture
def nyc_request():
    """80 km around New York City, 1500-2024."""
    return SearchRequest(center=NYC, radius_km=80, start_year=1500, end_year=2024)
