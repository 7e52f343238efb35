"""Tests for the upstream connectivity probes."""

import pytest
import requests
from conftest import binding, make_response, sparql_payload

from places_history_server.diagnostics import _check_upstream, probe_connection


class TestCheckUpstream:
    """Tests for _check_upstream."""

    def test_invalid_test_type(self, client, mock_session):
        result = _check_upstream(client, "everything")
        assert result == {
            "error": "Invalid test type. Use: basic, coordinates, wikipedia, time",
            "status": 400,
        }
        mock_session.get.assert_not_called()

    @pytest.mark.parametrize("test", ["basic", "coordinates", "wikipedia", "time"])
    def test_success(self, client, mock_session, test):
        rows = [binding(f"Q{i}", f"Item {i}", lat=1.0, lng=2.0) for i in range(3)]
        mock_session.get.return_value = make_response(200, sparql_payload(*rows))

        result = _check_upstream(client, test)

        assert result["success"] is True
        assert result["test"] == test
        assert result["description"]
        assert result["status"] == 200
        assert result["result_count"] == 3
        assert result["sample_results"] == rows[:2]
        assert result["response_time_ms"] >= 0

    def test_http_error_reports_upstream_text(self, client, mock_session):
        """Unlike search, probes surface the upstream status and body."""
        mock_session.get.return_value = make_response(500, text="Query engine overloaded")
        result = _check_upstream(client)
        assert result["success"] is False
        assert result["status"] == 500
        assert result["status_text"] == "Internal Server Error"
        assert result["error"] == "Query engine overloaded"

    def test_transport_error(self, client, mock_session):
        mock_session.get.side_effect = requests.exceptions.ConnectionError("refused")
        result = _check_upstream(client)
        assert result["success"] is False
        assert "failed" in result["error"]

    def test_unexpected_format(self, client, mock_session):
        mock_session.get.return_value = make_response(200, text="<html></html>")
        result = _check_upstream(client, "time")
        assert result["success"] is False
        assert result["error"].startswith("Unexpected response format")


class TestProbeConnection:
    def test_reachable(self, client):
        assert probe_connection(client) is True

    def test_unreachable_never_raises(self, client, mock_session):
        mock_session.get.side_effect = requests.exceptions.Timeout("slow")
        assert probe_connection(client) is False
