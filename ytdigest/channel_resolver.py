"""
Channel Resolver
================

Resolves a YouTube channel page reference (URL or @handle page) to the
canonical channel ID used by the public RSS feed.

Supports:
- Direct channel IDs (UC...), returned without a network call
- Channel pages exposing a JSON-embedded "channelId" field
- Channel pages exposing a canonical /channel/UC... link

No retry: a resolution failure only drops that channel from the run.
"""

import logging
import re
from typing import Optional

import requests
from bs4 import BeautifulSoup

logger = logging.getLogger(__name__)

HEADERS = {"User-Agent": "Mozilla/5.0"}

# Regex patterns
RE_CHANNEL_ID = re.compile(r"^UC[0-9A-Za-z_-]{20,}$")
RE_EMBEDDED_ID = re.compile(r'"channelId":"(UC[0-9A-Za-z_-]{20,})"')
RE_CANONICAL_PATH = re.compile(r"https://www\.youtube\.com/channel/(UC[0-9A-Za-z_-]{20,})")


class ResolutionError(RuntimeError):
    """Channel page could not be fetched or carries no channel ID."""
    pass


def _canonical_link_id(soup: BeautifulSoup) -> Optional[str]:
    """Channel ID from <link rel="canonical" href=".../channel/UC...">."""
    link = soup.find("link", rel="canonical")
    href = link.get("href") if link else None
    if href:
        m = RE_CANONICAL_PATH.search(href)
        if m:
            return m.group(1)
    return None


def extract_channel_id(html: str) -> Optional[str]:
    """
    Find the channel ID in a channel page body.

    Order:
    1. JSON-embedded "channelId":"UC..." field
    2. Canonical link tag
    3. Any canonical channel URL in the raw body
    """
    if not html:
        return None

    m = RE_EMBEDDED_ID.search(html)
    if m:
        return m.group(1)

    found = _canonical_link_id(BeautifulSoup(html, "html.parser"))
    if found:
        return found

    m = RE_CANONICAL_PATH.search(html)
    return m.group(1) if m else None


def resolve_channel(
    channel_url: str,
    session: Optional[requests.Session] = None,
    timeout: float = 30,
) -> str:
    """
    Resolve a channel reference to its channel ID.

    Args:
        channel_url: Channel page URL (or a bare UC... ID)
        session: Shared requests session (a fresh one is used if omitted)
        timeout: Per-request timeout in seconds

    Returns:
        Channel ID (UC...)

    Raises:
        ResolutionError if the page fetch fails or no ID is found
    """
    s = (channel_url or "").strip()
    if RE_CHANNEL_ID.match(s):
        return s

    http = session or requests.Session()
    try:
        r = http.get(s, headers=HEADERS, timeout=timeout)
    except requests.RequestException as e:
        raise ResolutionError(f"Channel page fetch failed: {s} ({e})") from e

    if not 200 <= r.status_code < 300:
        raise ResolutionError(f"Channel page fetch failed: {s} (HTTP {r.status_code})")

    channel_id = extract_channel_id(r.text)
    if not channel_id:
        raise ResolutionError(f"Could not resolve channel_id for {s}")

    logger.debug("Resolved %s -> %s", s, channel_id)
    return channel_id
