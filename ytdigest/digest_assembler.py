"""
Digest Assembler
================

Turn per-video outcomes into one GroupDigest per channel group.

- Items are ordered newest first
- Counts cover every considered video, not only the displayed ones
- The display cap drops the oldest items first
"""

from datetime import datetime, timezone
from typing import Iterable, List, Optional, Sequence, Tuple, Union

from .config import DigestConfig
from .models import (
    ChannelGroup,
    DigestCounts,
    DisplayItem,
    FailureKind,
    GroupDigest,
    ItemStatus,
    Report,
    Summary,
    TranscriptFailure,
    VideoRecord,
)

VideoOutcome = Union[Summary, TranscriptFailure]

NO_TRANSCRIPT_REASON = "This video has no transcript/captions available on YouTube."


def describe_failure(failure: TranscriptFailure) -> str:
    """Short, stable, human-readable reason for a skipped video."""
    kind = failure.kind
    if kind is FailureKind.NO_TRANSCRIPT:
        return NO_TRANSCRIPT_REASON
    if kind is FailureKind.TOO_SHORT:
        return "Transcript exists but is too short to summarize reliably."
    if kind is FailureKind.INVALID_JSON:
        return "Transcript provider returned an unexpected response."
    if kind is FailureKind.HTTP_ERROR:
        status = failure.status or 0
        if status == 429:
            return "Rate-limited temporarily. Will retry next run."
        if 500 <= status < 600:
            return f"Transcript provider temporarily unavailable ({status})."
        return f"Transcript provider rejected the request ({status})."
    if kind is FailureKind.FETCH_ERROR:
        detail = (failure.detail or "").lower()
        if "timeout" in detail or "timed out" in detail:
            return "Request timed out while fetching transcript."
        return "Network error while fetching transcript."
    return "Transcript unavailable."


def build_display_item(record: VideoRecord, outcome: VideoOutcome) -> DisplayItem:
    base = {
        "video_id": record.video_id,
        "title": record.title,
        "channel_name": record.channel_name,
        "url": record.url,
        "published_at": record.published_at,
    }
    if isinstance(outcome, Summary):
        return DisplayItem(status=ItemStatus.SUMMARIZED, summary=outcome, **base)
    return DisplayItem(status=ItemStatus.SKIPPED, reason=describe_failure(outcome), **base)


def assemble_group_digest(
    group: ChannelGroup,
    outcomes: Iterable[Tuple[VideoRecord, VideoOutcome]],
    cap: int,
) -> GroupDigest:
    """
    Build a group digest from (record, outcome) pairs.

    Args:
        group: The channel group
        outcomes: One pair per considered (deduplicated, recent) video
        cap: Maximum displayed items

    Returns:
        GroupDigest with counts over all considered videos
    """
    items: List[DisplayItem] = [build_display_item(r, o) for r, o in outcomes]
    items.sort(key=lambda i: i.published_at, reverse=True)

    summarized = sum(1 for i in items if i.status is ItemStatus.SUMMARIZED)
    displayed = items[:max(0, cap)]

    return GroupDigest(
        key=group.key,
        label=group.label,
        counts=DigestCounts(
            total_new=len(items),
            summarized_count=summarized,
            skipped_count=len(items) - summarized,
            not_shown_count=max(0, len(items) - len(displayed)),
        ),
        items=displayed,
    )


def assemble_report(
    digests: Sequence[GroupDigest],
    config: DigestConfig,
    now: Optional[datetime] = None,
) -> Report:
    """Wrap group digests (already in configuration order) into a Report."""
    now = now or datetime.now(timezone.utc)
    return Report(
        frequency=config.frequency.value,
        timezone=config.timezone,
        generated_at=now.isoformat(),
        sections=list(digests),
    )
