"""Places History Server - FastMCP server for finding historical events near a point.

Queries the Wikidata SPARQL endpoint for dated entities with coordinates inside
a bounding box, then filters them by exact great-circle distance.

Usage:
    places-history-server --endpoint https://query.wikidata.org/sparql
    DEFAULT_RADIUS_MILES=10 python -m places_history_server
"""

from fastmcp import FastMCP

from .mcp_resources import register_resources
from .mcp_tools import register_tools
from .state import configure
from .telemetry import initialize_tracing

# Initialize tracing FIRST (before creating server)
# This is a no-op if PHOENIX_ENABLED is not set to 'true'
initialize_tracing()

# Initialize FastMCP server
mcp = FastMCP("Places History Server")

# Register tools and resources
register_tools(mcp)
register_resources(mcp)

_initialized = False


def initialize():
    """Initialize the server: read configuration and build the shared client and cache.

    Called automatically on first use or can be called explicitly.
    Safe to call multiple times.
    """
    global _initialized
    if _initialized:
        return
    configure()
    _initialized = True


__all__ = ["mcp", "initialize"]
