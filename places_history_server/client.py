"""HTTP client for the SPARQL endpoint.

Issues GET requests with ``format=json``, classifies failures into the
Upstream* errors and parses result rows into RawRecords. Rows whose
coordinates cannot be recovered are dropped here with a logged reason.
"""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING

import requests

from .constants import UNKNOWN_LABEL
from .errors import (
    CoordinateParseFailure,
    UpstreamMalformed,
    UpstreamRateLimited,
    UpstreamRequestError,
    UpstreamServerError,
    UpstreamTimeout,
)
from .helpers import (
    binding_value,
    english_wikipedia_url,
    entity_id,
    normalize_date,
    parse_wkt_point,
    point_from_fields,
)
from .models import RawRecord
from .telemetry import get_tracer

if TYPE_CHECKING:
    from .state import Settings

logger = logging.getLogger(__name__)

SPARQL_JSON = "application/sparql-results+json"


def parse_row(row: dict) -> RawRecord | None:
    """Convert one SPARQL binding row to a RawRecord.

    Coordinates come from the bound ?lat/?lng when both are numeric; otherwise
    they are recovered from the ?location WKT literal. Returns None (and logs)
    when neither works or the row has no entity.
    """
    record_id = entity_id(binding_value(row, "item"))
    label = binding_value(row, "itemLabel") or UNKNOWN_LABEL
    if record_id is None:
        logger.warning(f"Dropping row without an entity: {label!r}")
        return None

    point = point_from_fields(binding_value(row, "lat"), binding_value(row, "lng"))
    if point is None:
        try:
            point = parse_wkt_point(binding_value(row, "location"))
        except CoordinateParseFailure as e:
            logger.warning(f"Dropping {record_id} ({label!r}): {e}")
            return None
        logger.debug(f"Recovered coordinates for {record_id} from WKT: ({point.lat}, {point.lng})")

    image_url = binding_value(row, "imageUrl")
    if image_url and not image_url.startswith("http"):
        image_url = None

    return RawRecord(
        id=record_id,
        label=label,
        description=binding_value(row, "itemDescription"),
        date=normalize_date(binding_value(row, "date")),
        point=point,
        wikipedia_url=english_wikipedia_url(binding_value(row, "wikipediaUrl")),
        image_url=image_url,
        instance=entity_id(binding_value(row, "instance")),
    )


def extract_bindings(data: object) -> list[dict]:
    """Return ``results.bindings`` from a SPARQL JSON document.

    Raises:
        UpstreamMalformed: If the document does not have that shape.
    """
    if not isinstance(data, dict):
        raise UpstreamMalformed("SPARQL response is not a JSON object")
    results = data.get("results")
    if not isinstance(results, dict) or not isinstance(results.get("bindings"), list):
        raise UpstreamMalformed("SPARQL response has no results.bindings list")
    return [b for b in results["bindings"] if isinstance(b, dict)]


class SparqlClient:
    """Client bound to one endpoint configuration.

    Both ``settings`` and the HTTP session are passed in explicitly so tests
    and alternative endpoints need no global patching.
    """

    def __init__(self, settings: Settings, session: requests.Session | None = None):
        self.settings = settings
        self.session = session or requests.Session()

    @property
    def headers(self) -> dict:
        return {"User-Agent": self.settings.user_agent, "Accept": SPARQL_JSON}

    def get(self, query: str) -> requests.Response:
        """Send a query and return the raw response, whatever its status.

        ``timeout_seconds`` bounds the connect and each socket read, not the
        whole transfer, so a response that keeps trickling in can take longer
        than the timeout without raising.

        Raises:
            UpstreamTimeout: If the endpoint does not answer in time.
            UpstreamRequestError: On connection or other transport failures.
        """
        try:
            return self.session.get(
                self.settings.endpoint,
                params={"query": query, "format": "json"},
                headers=self.headers,
                timeout=self.settings.timeout_seconds,
            )
        except requests.exceptions.Timeout as e:
            raise UpstreamTimeout(
                f"SPARQL query timed out after {self.settings.timeout_seconds}s", detail=str(e)
            ) from e
        except requests.exceptions.RequestException as e:
            raise UpstreamRequestError("SPARQL request failed", detail=str(e)) from e

    def query(self, query: str) -> list[dict]:
        """Run a query and return its binding rows.

        Raises:
            UpstreamTimeout, UpstreamRateLimited, UpstreamServerError,
            UpstreamRequestError, UpstreamMalformed
        """
        response = self.get(query)
        status = response.status_code

        if status == 429:
            raise UpstreamRateLimited(
                "SPARQL endpoint rate limit exceeded", status_code=status, detail=response.text
            )
        if status >= 500:
            raise UpstreamServerError(
                f"SPARQL endpoint server error ({status})", status_code=status, detail=response.text
            )
        if not response.ok:
            raise UpstreamRequestError(
                f"SPARQL query failed ({status})", status_code=status, detail=response.text
            )

        try:
            data = response.json()
        except ValueError as e:
            raise UpstreamMalformed(
                "SPARQL response is not valid JSON", status_code=status, detail=response.text[:500]
            ) from e
        return extract_bindings(data)

    def fetch(self, query: str, tier: str = "adhoc") -> list[RawRecord]:
        """Run a query and parse every usable row into a RawRecord."""
        tracer = get_tracer()
        with tracer.start_as_current_span("upstream.query") as span:
            span.set_attribute("sparql.tier", tier)
            span.set_attribute("sparql.endpoint", self.settings.endpoint)

            started = time.monotonic()
            rows = self.query(query)
            elapsed_ms = int((time.monotonic() - started) * 1000)

            records = [r for r in (parse_row(row) for row in rows) if r is not None]
            dropped = len(rows) - len(records)

            span.set_attribute("sparql.row_count", len(rows))
            span.set_attribute("sparql.dropped_rows", dropped)

        logger.info(
            f"SPARQL {tier} query: {len(rows)} rows in {elapsed_ms}ms, "
            f"{len(records)} usable, {dropped} dropped"
        )
        return records
