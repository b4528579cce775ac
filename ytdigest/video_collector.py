"""
Video Collector
===============

Fetch a channel's public RSS feed and turn its entries into VideoRecords.

Features:
- No API key needed (https://www.youtube.com/feeds/videos.xml)
- Tolerant parsing: entries missing a required field are reported, not raised
- Newest-first ordering, truncated to a per-channel cap
"""

import io
import logging
import urllib.parse as up
from dataclasses import dataclass, field
from typing import Iterator, List, Optional

import feedparser
import requests

from .models import Channel, VideoRecord

logger = logging.getLogger(__name__)

RSS_URL = "https://www.youtube.com/feeds/videos.xml?channel_id={channel_id}"
REQUIRED_FIELDS = ("title", "link", "published", "video_id")


class FeedFetchError(RuntimeError):
    """Feed could not be downloaded."""
    pass


@dataclass
class SkippedEntry:
    """A feed entry that could not become a VideoRecord."""
    index: int
    missing_fields: List[str]


@dataclass
class ParsedFeed:
    """Partial-success parse result."""
    records: List[VideoRecord] = field(default_factory=list)
    skipped: List[SkippedEntry] = field(default_factory=list)


def feed_url(channel_id: str) -> str:
    return RSS_URL.format(channel_id=up.quote(channel_id, safe=""))


def video_id_from_link(link: Optional[str]) -> Optional[str]:
    """Read the `v` query parameter of a watch URL."""
    if not link:
        return None
    q = up.parse_qs(up.urlparse(link).query)
    values = q.get("v")
    if not values:
        return None
    return values[0].strip() or None


def fetch_feed(channel_id: str, session: Optional[requests.Session] = None, timeout: float = 30) -> str:
    """
    Download the feed document for a channel.

    Raises:
        FeedFetchError on network failure or non-2xx status
    """
    url = feed_url(channel_id)
    http = session or requests.Session()
    try:
        r = http.get(url, timeout=timeout)
    except requests.RequestException as e:
        raise FeedFetchError(f"RSS fetch failed: {channel_id} ({e})") from e
    if not 200 <= r.status_code < 300:
        raise FeedFetchError(f"RSS fetch failed: {channel_id} (HTTP {r.status_code})")
    return r.text


def parse_feed(xml: str, channel_name: str) -> ParsedFeed:
    """
    Parse a feed document into VideoRecords.

    Every entry needs a title, a link, a published timestamp and a video ID
    derived from the link's `v` parameter. Incomplete entries are listed in
    `skipped` with the names of the missing fields.
    """
    result = ParsedFeed()
    # A file object keeps feedparser from treating the body as a URL or path
    feed = feedparser.parse(io.BytesIO((xml or "").encode("utf-8")))

    for i, entry in enumerate(feed.entries):
        title = (entry.get("title") or "").strip()
        link = (entry.get("link") or "").strip()
        published = (entry.get("published") or "").strip()
        video_id = video_id_from_link(link)

        values = {"title": title, "link": link, "published": published, "video_id": video_id}
        missing = [k for k in REQUIRED_FIELDS if not values[k]]
        if missing:
            result.skipped.append(SkippedEntry(index=i, missing_fields=missing))
            continue

        result.records.append(VideoRecord(
            video_id=video_id,
            title=title,
            url=link,
            published_at=published,
            channel_name=channel_name,
        ))

    return result


def collect_videos(
    channel: Channel,
    channel_id: str,
    max_videos: int = 3,
    session: Optional[requests.Session] = None,
    timeout: float = 30,
) -> Iterator[VideoRecord]:
    """
    Fetch and parse a channel feed.

    Args:
        channel: Channel the feed belongs to (its name is stamped on records)
        channel_id: Resolved channel ID
        max_videos: Keep at most this many, most recent first
        session: Shared requests session
        timeout: Per-request timeout in seconds

    Returns:
        Iterator over VideoRecords (consumed once)

    Raises:
        FeedFetchError if the feed cannot be downloaded
    """
    parsed = parse_feed(fetch_feed(channel_id, session=session, timeout=timeout), channel.name)

    if parsed.skipped:
        logger.debug(
            "%s: dropped %d incomplete feed entries (%s)",
            channel.name,
            len(parsed.skipped),
            "; ".join(f"#{s.index}: {','.join(s.missing_fields)}" for s in parsed.skipped),
        )

    # ISO 8601 strings sort chronologically
    records = sorted(parsed.records, key=lambda v: v.published_at, reverse=True)
    return iter(records[:max(0, max_videos)])
