"""MCP resource definitions for the Places History server."""

import json

from . import state
from .queries import TIERS_BY_NAME


def register_resources(mcp):
    """Register all MCP resources with the server."""

    @mcp.resource("places-history://config")
    def resource_config() -> str:
        """Get the active server configuration."""
        return json.dumps(state.get_settings().to_dict(), indent=2)

    @mcp.resource("places-history://cache")
    def resource_cache() -> str:
        """Get event cache statistics."""
        return json.dumps(state.get_event_cache().stats(), indent=2)

    @mcp.resource("places-history://tiers")
    def resource_tiers() -> str:
        """Get the available query tiers and their result caps."""
        return "\n".join(f"{name}: LIMIT {tier.limit}" for name, tier in TIERS_BY_NAME.items())
