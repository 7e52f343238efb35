"""Connectivity probes against the SPARQL endpoint.

These are for operators, so unlike the search path they report upstream
status and error text back to the caller.
"""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING

from .client import extract_bindings
from .errors import UpstreamError
from .queries import PROBE_QUERIES

if TYPE_CHECKING:
    from .client import SparqlClient

logger = logging.getLogger(__name__)


def _check_upstream(client: SparqlClient, test: str = "basic") -> dict:
    """Run one probe query and report how the endpoint responded.

    Args:
        client: Client to probe with
        test: One of "basic", "coordinates", "wikipedia", "time"

    Returns:
        Dictionary with success flag, test name, description, HTTP status,
        response_time_ms, result_count and up to two sample rows. Unknown test
        names return an error dict with status 400.
    """
    if test not in PROBE_QUERIES:
        return {
            "error": f"Invalid test type. Use: {', '.join(PROBE_QUERIES)}",
            "status": 400,
        }

    description, query = PROBE_QUERIES[test]
    logger.info(f"Upstream probe: {description}")

    started = time.monotonic()
    try:
        response = client.get(query)
    except UpstreamError as e:
        logger.warning(f"Upstream probe '{test}' failed: {e}")
        return {
            "success": False,
            "test": test,
            "description": description,
            "error": str(e),
            "response_time_ms": int((time.monotonic() - started) * 1000),
        }
    response_time_ms = int((time.monotonic() - started) * 1000)

    if not response.ok:
        logger.warning(f"Upstream probe '{test}' returned {response.status_code}")
        return {
            "success": False,
            "test": test,
            "description": description,
            "status": response.status_code,
            "status_text": response.reason,
            "response_time_ms": response_time_ms,
            "error": response.text[:1000],
        }

    try:
        rows = extract_bindings(response.json())
    except (ValueError, UpstreamError) as e:
        return {
            "success": False,
            "test": test,
            "description": description,
            "status": response.status_code,
            "response_time_ms": response_time_ms,
            "error": f"Unexpected response format: {e}",
        }

    return {
        "success": True,
        "test": test,
        "description": description,
        "status": response.status_code,
        "response_time_ms": response_time_ms,
        "result_count": len(rows),
        "sample_results": rows[:2],
    }


def probe_connection(client: SparqlClient) -> bool:
    """Run the basic probe and log the outcome. Never raises."""
    result = _check_upstream(client, "basic")
    if result.get("success"):
        logger.info(
            f"SPARQL endpoint reachable ({result['response_time_ms']}ms, "
            f"{result['result_count']} rows)"
        )
        return True
    logger.warning(f"SPARQL endpoint probe failed: {result.get('error')}")
    return False
