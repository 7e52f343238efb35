"""End-to-end tests for the event search operation."""

import datetime
from dataclasses import replace
from unittest.mock import MagicMock, patch

import pytest
import requests
from conftest import NYC, binding, make_response, sparql_payload

from places_history_server import state
from places_history_server.cache import EventCache
from places_history_server.client import SparqlClient
from places_history_server.events import _search_events
from places_history_server.geo import distance_km
from places_history_server.helpers import extract_year
from places_history_server.models import Point

NYC_ROWS = sparql_payload(
    binding(
        "Q9202",
        "Statue of Liberty",
        lat=40.6892,
        lng=-74.0445,
        date="1886-10-28T00:00:00Z",
        wikipedia="https://en.wikipedia.org/wiki/Statue_of_Liberty",
    ),
    binding("Q125006", "Brooklyn Bridge", location="Point(-73.9969 40.7061)", date="1883-05-24T00:00:00Z"),
    binding("Q11277", "Federal Hall", lat=40.7074, lng=-74.0104, date="1789-04-30T00:00:00Z"),
    # Inside the bounding box, outside the circle
    binding("Q49111", "Trenton", lat=40.2171, lng=-74.7429, date="1776-12-26T00:00:00Z"),
    binding("Q1", "Broken", location="not a point"),
)


@pytest.fixture
def session():
    s = MagicMock(spec=requests.Session)
    s.get.return_value = make_response(200, NYC_ROWS)
    return s


@pytest.fixture
def search(settings, session):
    """_search_events bound to a private client and cache."""
    client = SparqlClient(settings, session=session)
    cache = EventCache(ttl_seconds=3600)

    def run(*args, **kwargs):
        return _search_events(*args, client=client, cache=cache, **kwargs)

    run.cache = cache
    return run


class TestSearchEvents:
    """Tests for the full validate/resolve/shape pipeline."""

    def test_nyc_results_within_radius(self, search):
        result = search(40.7128, -74.0060, 80, 1500, 2024)
        assert result["type"] == "FeatureCollection"
        features = result["features"]
        assert [f["properties"]["id"] for f in features] == ["Q11277", "Q125006", "Q9202"]
        for feature in features:
            lng, lat = feature["geometry"]["coordinates"]
            assert distance_km(NYC, Point(lat=lat, lng=lng)) <= 80
            assert feature["properties"]["distance"] <= 80
            assert 1500 <= extract_year(feature["properties"]["date"]) <= 2024

    def test_sorted_by_distance(self, search):
        distances = [f["properties"]["distance"] for f in search(40.7128, -74.0060, 80, 1500, 2024)["features"]]
        assert distances == sorted(distances)

    def test_year_range_enforced_on_returned_rows(self, search):
        """Rows dated outside the requested years are dropped even if upstream returns them."""
        features = search(40.7128, -74.0060, 80, 1800, 1900)["features"]
        assert [f["properties"]["id"] for f in features] == ["Q125006", "Q9202"]

    def test_wkt_recovered_row_included(self, search):
        features = search(40.7128, -74.0060, 80, 1500, 2024)["features"]
        bridge = next(f for f in features if f["properties"]["id"] == "Q125006")
        assert bridge["geometry"]["coordinates"] == [-73.9969, 40.7061]
        assert bridge["properties"]["date"] == "1883-05-24"

    def test_single_upstream_call_when_primary_has_results(self, search, session):
        search(40.7128, -74.0060, 80, 1500, 2024)
        assert session.get.call_count == 1
        query = session.get.call_args.kwargs["params"]["query"]
        assert "LIMIT 500" in query

    def test_fallback_when_primary_empty(self, search, session):
        session.get.side_effect = [make_response(200, sparql_payload()), make_response(200, NYC_ROWS)]
        result = search(40.7128, -74.0060, 80, 1500, 2024)
        assert len(result["features"]) == 3
        queries = [c.kwargs["params"]["query"] for c in session.get.call_args_list]
        assert "LIMIT 500" in queries[0]
        assert "LIMIT 50" in queries[1] and "LIMIT 500" not in queries[1]

    def test_empty_result(self, search, session):
        session.get.return_value = make_response(200, sparql_payload())
        assert search(0.0, -160.0, 10) == {"type": "FeatureCollection", "features": []}
        assert session.get.call_count == 2


class TestValidationErrors:
    def test_small_radius_rejected_without_upstream_call(self, search, session):
        result = search(40.7128, -74.0060, 0.5)
        assert result == {"error": "Radius too small. Minimum allowed is 1km.", "status": 400}
        session.get.assert_not_called()

    def test_inverted_years(self, search, session):
        result = search(40.7128, -74.0060, 10, 2025, 2020)
        assert result["status"] == 400
        assert "startYear" in result["error"]
        session.get.assert_not_called()

    def test_future_end_year(self, search):
        next_year = datetime.date.today().year + 1
        assert search(40.7128, -74.0060, 10, 2000, next_year)["error"] == "endYear cannot be in the future."

    def test_non_numeric(self, search):
        assert search("north", -74.0, 10)["status"] == 400


class TestUpstreamErrors:
    def test_server_error_is_generic(self, search, session, caplog):
        """Upstream error text is logged but never returned."""
        session.get.return_value = make_response(500, text="java.lang.OutOfMemoryError: secret stack")
        with caplog.at_level("ERROR"):
            result = search(40.7128, -74.0060, 80)
        assert result == {"error": "Failed to fetch historical events", "status": 500}
        assert "secret" not in str(result)
        assert "OutOfMemoryError" in caplog.text

    def test_timeout(self, search, session):
        session.get.side_effect = requests.exceptions.Timeout("timed out")
        assert search(40.7128, -74.0060, 80)["status"] == 500
        assert session.get.call_count == 2

    def test_primary_error_recovered_by_fallback(self, search, session):
        session.get.side_effect = [make_response(429, text="slow down"), make_response(200, NYC_ROWS)]
        result = search(40.7128, -74.0060, 80, 1500, 2024)
        assert len(result["features"]) == 3

    def test_failures_not_cached(self, search, session):
        session.get.return_value = make_response(503, text="down")
        assert search(40.7128, -74.0060, 80, 1500, 2024)["status"] == 500
        session.get.return_value = make_response(200, NYC_ROWS)
        assert len(search(40.7128, -74.0060, 80, 1500, 2024)["features"]) == 3


class TestCaching:
    def test_repeat_served_from_cache(self, search, session):
        first = search(40.7128, -74.0060, 80, 1500, 2024)
        second = search(40.7128, -74.0060, 80, 1500, 2024)
        assert first == second
        assert session.get.call_count == 1
        assert search.cache.stats()["hits"] == 1

    def test_rounded_centres_share_entry(self, search, session):
        search(40.71281, -74.00601, 80, 1500, 2024)
        search(40.71279, -74.00599, 80, 1500, 2024)
        assert session.get.call_count == 1

    def test_coordinates_mode_shares_entry(self, search, session):
        full = search(40.7128, -74.0060, 80, 1500, 2024)
        coords = search(40.7128, -74.0060, 80, 1500, 2024, coordinates=True)
        assert session.get.call_count == 1
        assert [f["geometry"] for f in coords["features"]] == [f["geometry"] for f in full["features"]]
        assert coords["features"][0]["properties"] == {"coordinates": coords["features"][0]["geometry"]["coordinates"]}

    def test_different_radius_is_new_entry(self, search, session):
        search(40.7128, -74.0060, 80, 1500, 2024)
        search(40.7128, -74.0060, 40, 1500, 2024)
        assert session.get.call_count == 2


class TestConnectionProbe:
    def test_probe_runs_before_uncached_search(self, search, session, settings):
        probed = replace(settings, connection_probe_enabled=True)
        with patch.object(state, "settings", probed), patch("places_history_server.events.probe_connection") as probe:
            search(40.7128, -74.0060, 80, 1500, 2024)
            search(40.7128, -74.0060, 80, 1500, 2024)
        assert probe.call_count == 1

    def test_probe_disabled_by_default(self, search):
        with patch("places_history_server.events.probe_connection") as probe:
            search(40.7128, -74.0060, 80, 1500, 2024)
        probe.assert_not_called()
