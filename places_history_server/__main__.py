"""Entry point for running the Places History server as a module.

Usage:
    python -m places_history_server --endpoint https://query.wikidata.org/sparql
    places-history-server --default-radius-miles 10
"""

import argparse
import logging
import os


def main():
    """Main entry point for the Places History MCP server."""
    parser = argparse.ArgumentParser(
        description="Places History MCP Server - Find historical events near a map point",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  places-history-server
  places-history-server --default-radius-miles 25 --cache-ttl 600

Environment variables:
  SPARQL_ENDPOINT          SPARQL endpoint URL (default: Wikidata)
  SPARQL_USER_AGENT        User-Agent sent upstream
  SPARQL_TIMEOUT_SECONDS   Upstream timeout (default: 30)
  DEFAULT_RADIUS_MILES     Default search radius (default: 5)
  CACHE_TTL_SECONDS        Result cache lifetime (default: 3600)
  CACHE_COORD_PRECISION    Decimal places kept on lat/lng (default: 4)
  CONNECTION_PROBE_ENABLED Probe the endpoint before uncached searches
""",
    )
    parser.add_argument(
        "--endpoint",
        "-e",
        metavar="URL",
        help="SPARQL endpoint URL (or set SPARQL_ENDPOINT env var)",
    )
    parser.add_argument(
        "--default-radius-miles",
        "-r",
        metavar="MILES",
        type=float,
        help="Default search radius in miles (or set DEFAULT_RADIUS_MILES env var)",
    )
    parser.add_argument(
        "--cache-ttl",
        metavar="SECONDS",
        type=float,
        help="Result cache lifetime in seconds (or set CACHE_TTL_SECONDS env var)",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: INFO)",
    )
    args = parser.parse_args()

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    # CLI args override env vars
    if args.endpoint:
        os.environ["SPARQL_ENDPOINT"] = args.endpoint
    if args.default_radius_miles is not None:
        os.environ["DEFAULT_RADIUS_MILES"] = str(args.default_radius_miles)
    if args.cache_ttl is not None:
        os.environ["CACHE_TTL_SECONDS"] = str(args.cache_ttl)

    # Import and initialize AFTER setting env vars
    from . import initialize, mcp

    initialize()
    mcp.run()


if __name__ == "__main__":
    main()
