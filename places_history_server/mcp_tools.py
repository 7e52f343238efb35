"""MCP tool definitions for the Places History server."""

from . import state
from .diagnostics import _check_upstream
from .events import _search_events
from .images import get_event_image_url, get_optimized_image_url, get_placeholder_image_url


def register_tools(mcp):
    """Register all MCP tools with the server."""

    # ============== EVENT SEARCH (1) ==============

    @mcp.tool()
    def search_events(
        lat: float,
        lng: float,
        radius_km: float | None = None,
        start_year: int | None = None,
        end_year: int | None = None,
        coordinates: bool = False,
    ) -> dict:
        """
        Find historical events located within a radius of a map point.

        Events come from Wikidata: entities with a coordinate location and a
        point-in-time, start, inception or end date inside the year range.
        Distances are great-circle kilometres from (lat, lng), and results are
        sorted nearest first (at most 50).

        Examples:
            search_events(40.7128, -74.0060, 80)  # Around New York City
            search_events(48.8566, 2.3522, 20, start_year=1789, end_year=1799)
            search_events(51.5074, -0.1278, coordinates=True)  # Markers only

        Args:
            lat: Latitude of the search centre in degrees
            lng: Longitude of the search centre in degrees
            radius_km: Search radius in km, 1 to 500 (default: 5 miles, ~8 km)
            start_year: Earliest event year (default 1500)
            end_year: Latest event year (default: current year, may not be in the future)
            coordinates: If true, return only point geometry for each event

        Returns:
            GeoJSON FeatureCollection. Full features carry id, label,
            description, date (YYYY-MM-DD), distance (km), wikipediaUrl and
            imageUrl. On failure: {"error": message, "status": 400 or 500}.
        """
        return _search_events(
            lat=lat,
            lng=lng,
            radius_km=radius_km,
            start_year=start_year,
            end_year=end_year,
            coordinates=coordinates,
        )

    # ============== PRESENTATION HELPERS (1) ==============

    @mcp.tool()
    def get_event_image(
        image_url: str | None = None,
        wikipedia_url: str | None = None,
        label: str | None = None,
        width: int = 300,
        height: int = 200,
    ) -> dict:
        """
        Resolve a displayable image for an event (best effort).

        Uses the event's direct image URL when present, otherwise the lead
        image of its English Wikipedia article.

        Args:
            image_url: Direct image URL from the event feature, if any
            wikipedia_url: English Wikipedia article URL from the event feature
            label: Event label, used for the placeholder image text
            width: Desired width in pixels
            height: Desired height in pixels

        Returns:
            Dictionary with image_url (sized variant, or null when nothing was
            found) and placeholder_url (only when a label was given)
        """
        found = get_event_image_url(image_url, wikipedia_url)
        return {
            "image_url": get_optimized_image_url(found, width, height) if found else None,
            "placeholder_url": get_placeholder_image_url(label, width, height) if label else None,
        }

    # ============== DIAGNOSTICS (2) ==============

    @mcp.tool()
    def check_upstream(test: str = "basic") -> dict:
        """
        Run a small probe query against the SPARQL endpoint.

        Args:
            test: "basic" (labels only), "coordinates" (P625 parsing),
                  "wikipedia" (article links) or "time" (P585 dates)

        Returns:
            Dictionary with success, status, response_time_ms, result_count
            and sample_results; upstream error text is included on failure
        """
        return _check_upstream(state.get_sparql_client(), test)

    @mcp.tool()
    def get_cache_stats() -> dict:
        """
        Get event cache statistics.

        Returns:
            Dictionary with live entries, hits, misses and ttl_seconds
        """
        return state.get_event_cache().stats()
