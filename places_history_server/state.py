"""Process-wide configuration and shared stores.

Everything here is set once by ``configure()`` at startup and then only read.
The upstream client receives ``settings`` explicitly rather than importing it.
"""

from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv

from .cache import EventCache
from .client import SparqlClient
from .helpers import miles_to_km

DEFAULT_ENDPOINT = "https://query.wikidata.org/sparql"
DEFAULT_USER_AGENT = "Places-History-Server/1.0"


@dataclass(frozen=True)
class Settings:
    endpoint: str = DEFAULT_ENDPOINT
    user_agent: str = DEFAULT_USER_AGENT
    timeout_seconds: float = 30.0
    default_radius_miles: float = 5.0
    cache_ttl_seconds: float = 3600.0
    cache_coord_precision: int = 4
    connection_probe_enabled: bool = False

    @property
    def default_radius_km(self) -> float:
        return miles_to_km(self.default_radius_miles)

    def to_dict(self) -> dict:
        return {
            "endpoint": self.endpoint,
            "user_agent": self.user_agent,
            "timeout_seconds": self.timeout_seconds,
            "default_radius_miles": self.default_radius_miles,
            "default_radius_km": round(self.default_radius_km, 3),
            "cache_ttl_seconds": self.cache_ttl_seconds,
            "cache_coord_precision": self.cache_coord_precision,
            "connection_probe_enabled": self.connection_probe_enabled,
        }


# Set by configure() at startup
settings: Settings | None = None
event_cache: EventCache | None = None
sparql_client: SparqlClient | None = None


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}") from None


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None


def _load_settings() -> Settings:
    """Read settings from environment variables."""
    settings = Settings(
        endpoint=os.getenv("SPARQL_ENDPOINT") or DEFAULT_ENDPOINT,
        user_agent=os.getenv("SPARQL_USER_AGENT") or DEFAULT_USER_AGENT,
        timeout_seconds=_env_float("SPARQL_TIMEOUT_SECONDS", 30.0),
        default_radius_miles=_env_float("DEFAULT_RADIUS_MILES", 5.0),
        cache_ttl_seconds=_env_float("CACHE_TTL_SECONDS", 3600.0),
        cache_coord_precision=_env_int("CACHE_COORD_PRECISION", 4),
        connection_probe_enabled=os.getenv("CONNECTION_PROBE_ENABLED", "false").lower() == "true",
    )
    if settings.timeout_seconds <= 0:
        raise ValueError("SPARQL_TIMEOUT_SECONDS must be positive")
    if settings.cache_ttl_seconds <= 0:
        raise ValueError("CACHE_TTL_SECONDS must be positive")
    if settings.cache_coord_precision < 0:
        raise ValueError("CACHE_COORD_PRECISION must not be negative")
    return settings


def configure() -> Settings:
    """Initialize configuration from environment. Called at startup.

    Loads .env file if present, then reads settings from the environment.
    Note: load_dotenv() does NOT override existing env vars by default.
    """
    global settings, event_cache, sparql_client
    load_dotenv()  # Load .env, won't override existing env vars
    settings = _load_settings()
    event_cache = EventCache(ttl_seconds=settings.cache_ttl_seconds)
    sparql_client = SparqlClient(settings)
    return settings


def get_settings() -> Settings:
    if settings is None:
        return configure()
    return settings


def get_event_cache() -> EventCache:
    if event_cache is None:
        configure()
    return event_cache


def get_sparql_client() -> SparqlClient:
    if sparql_client is None:
        configure()
    return sparql_client
