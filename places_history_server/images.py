"""Best-effort image lookup for event markers and cards.

Used by presentation code only; the resolver never calls into this module.
Every public function returns None or the input URL on failure instead of
raising.
"""

from __future__ import annotations

import logging
import re
from urllib.parse import quote, unquote

import requests

from . import state

logger = logging.getLogger(__name__)

WIKIPEDIA_SUMMARY_API = "https://en.wikipedia.org/api/rest_v1/page/summary/"
PLACEHOLDER_BASE = "https://via.placeholder.com"

# https://upload.wikimedia.org/wikipedia/commons/a/ab/File.jpg
_COMMONS_ORIGINAL_RE = re.compile(
    r"^(?P<base>https?://upload\.wikimedia\.org/wikipedia/[^/]+)/(?P<hash>[0-9a-f]/[0-9a-f]{2})/(?P<file>[^/?#]+)$"
)
_FILEPATH_MARKER = "/wiki/Special:FilePath/"


def _wikipedia_title(wikipedia_url: str) -> str | None:
    if "/wiki/" not in wikipedia_url:
        return None
    title = wikipedia_url.split("/wiki/", 1)[1].split("#", 1)[0].split("?", 1)[0]
    return unquote(title) or None


def _get_wikipedia_image_url(
    wikipedia_url: str,
    session: requests.Session | None = None,
    timeout: float = 10,
) -> str | None:
    """Fetch the lead image of an English Wikipedia article via the REST summary API."""
    title = _wikipedia_title(wikipedia_url)
    if not title:
        return None

    user_agent = state.get_settings().user_agent
    http = session or requests
    try:
        response = http.get(
            WIKIPEDIA_SUMMARY_API + quote(title, safe=""),
            headers={"User-Agent": user_agent, "Accept": "application/json"},
            timeout=timeout,
        )
        if not response.ok:
            return None
        data = response.json()
    except (requests.exceptions.RequestException, ValueError) as e:
        logger.debug(f"Wikipedia image lookup failed for '{title}': {e}")
        return None

    for key in ("thumbnail", "originalimage"):
        image = data.get(key) if isinstance(data, dict) else None
        if isinstance(image, dict) and image.get("source"):
            return image["source"]
    return None


def get_event_image_url(
    image_url: str | None = None,
    wikipedia_url: str | None = None,
    session: requests.Session | None = None,
) -> str | None:
    """Return the best available image for an event, or None.

    A direct http(s) image URL wins; otherwise the Wikipedia article's lead
    image is looked up.
    """
    if image_url and image_url.startswith("http"):
        return image_url
    if wikipedia_url:
        return _get_wikipedia_image_url(wikipedia_url, session=session)
    return None


def get_optimized_image_url(image_url: str, width: int = 300, height: int = 200) -> str:
    """Return a width-limited variant of a Wikimedia image URL.

    Commons originals are rewritten to their ``/thumb/`` rendition and
    Special:FilePath links get a ``width`` parameter. Other URLs, and URLs that
    are already thumbnails, are returned unchanged. Wikimedia scales by width
    only, so ``height`` is accepted for callers but not encoded.
    """
    match = _COMMONS_ORIGINAL_RE.match(image_url)
    if match:
        base, hash_path, filename = match.group("base", "hash", "file")
        thumb = f"{width}px-{filename}"
        if filename.lower().endswith(".svg"):
            thumb += ".png"
        return f"{base}/thumb/{hash_path}/{filename}/{thumb}"

    if _FILEPATH_MARKER in image_url and "width=" not in image_url:
        separator = "&" if "?" in image_url else "?"
        return f"{image_url}{separator}width={width}"

    return image_url


def get_placeholder_image_url(label: str, width: int = 300, height: int = 200) -> str:
    """Placeholder image URL with the event label as its text."""
    return f"{PLACEHOLDER_BASE}/{width}x{height}/4a5568/ffffff?text={quote(label)}"
