"""
Recency filter and cross-channel deduplication.
"""

from datetime import datetime, timedelta, timezone
from typing import Dict, Iterable, List, Optional

from dateutil import parser as dtparser

from .models import VideoRecord


def parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    """Parse an ISO 8601 timestamp. Naive values are UTC. None if unparsable."""
    if not value or not isinstance(value, str):
        return None
    try:
        dt = dtparser.isoparse(value.strip())
    except (ValueError, OverflowError):
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def is_within_max_age(published_at: Optional[str], max_age_days: float, now: Optional[datetime] = None) -> bool:
    """True iff published_at is no older than max_age_days. Unparsable is stale."""
    published = parse_timestamp(published_at)
    if published is None:
        return False
    now = now or datetime.now(timezone.utc)
    try:
        cutoff = now - timedelta(days=max_age_days)
    except OverflowError:
        return True
    return published >= cutoff


def filter_recent(
    records: Iterable[VideoRecord],
    max_age_days: float,
    now: Optional[datetime] = None,
) -> List[VideoRecord]:
    now = now or datetime.now(timezone.utc)
    return [r for r in records if is_within_max_age(r.published_at, max_age_days, now)]


def dedupe_videos(records: Iterable[VideoRecord]) -> List[VideoRecord]:
    """
    Merge records from several channels by video ID.

    The last record seen for an ID wins. Output is newest first.
    """
    by_id: Dict[str, VideoRecord] = {}
    for r in records:
        by_id[r.video_id] = r
    return sorted(by_id.values(), key=lambda r: r.published_at, reverse=True)
