"""
Configuration for pytest tests.
"""

import json
from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest

from ytdigest.config import DigestConfig
from ytdigest.models import VideoRecord


@pytest.fixture
def now():
    """Fixed 'current time' for recency checks."""
    return datetime(2026, 10, 17, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def config():
    """Config with credentials and fast retries."""
    return DigestConfig(
        scrapingdog_api_key="test_scrapingdog_key",
        openai_api_key="test_openai_key",
        transcript_base_delay_ms=0,
    )


@pytest.fixture
def make_response():
    """Factory for fake requests.Response objects."""
    def _make(status=200, json_body=None, text=None):
        resp = MagicMock()
        resp.status_code = status
        if json_body is not None:
            resp.text = json.dumps(json_body)
            resp.json.return_value = json_body
        else:
            resp.text = text or ""
            resp.json.side_effect = ValueError("No JSON object could be decoded")
        return resp
    return _make


@pytest.fixture
def make_session():
    """Factory for a fake session whose get() returns/raises the given items in order."""
    def _make(*outcomes):
        session = MagicMock()
        session.get.side_effect = list(outcomes)
        return session
    return _make


@pytest.fixture
def feed_xml():
    """Factory building a YouTube-style Atom feed from entry dicts."""
    def _build(entries):
        blocks = []
        for e in entries:
            parts = ["<entry>"]
            if e.get("title") is not None:
                parts.append(f"<title>{e['title']}</title>")
            if e.get("link") is not None:
                parts.append(f'<link rel="alternate" href="{e["link"]}"/>')
            if e.get("published") is not None:
                parts.append(f"<published>{e['published']}</published>")
            parts.append("</entry>")
            blocks.append("".join(parts))
        return (
            '<?xml version="1.0" encoding="UTF-8"?>'
            '<feed xmlns:yt="http://www.youtube.com/xml/schemas/2015" xmlns="http://www.w3.org/2005/Atom">'
            "<title>Channel</title>"
            + "".join(blocks)
            + "</feed>"
        )
    return _build


@pytest.fixture
def make_video():
    """Factory for VideoRecords."""
    def _make(video_id, published_at="2026-10-16T12:00:00+00:00", channel_name="Channel A", title=None):
        return VideoRecord(
            video_id=video_id,
            title=title or f"Video {video_id}",
            url=f"https://www.youtube.com/watch?v={video_id}",
            published_at=published_at,
            channel_name=channel_name,
        )
    return _make


@pytest.fixture
def sample_report():
    """Two-section report with one summarized and one skipped item."""
    from ytdigest.models import DigestCounts, DisplayItem, GroupDigest, ItemStatus, Report, Summary

    summarized = DisplayItem(
        status=ItemStatus.SUMMARIZED,
        video_id="abc123",
        title="Markets <open> & close",
        channel_name="Channel A",
        url="https://www.youtube.com/watch?v=abc123",
        published_at="2026-10-16T10:00:00+00:00",
        summary=Summary(
            one_liner="Stocks moved on rate news.",
            key_points=["Rates held", "Tech rallied"],
            who_should_watch="Investors.",
        ),
    )
    skipped = DisplayItem(
        status=ItemStatus.SKIPPED,
        video_id="def456",
        title="Live stream",
        channel_name="Channel B",
        url="javascript:alert(1)",
        published_at="2026-10-15T10:00:00+00:00",
        reason="This video has no transcript/captions available on YouTube.",
    )
    return Report(
        frequency="daily",
        timezone="America/Los_Angeles",
        generated_at="2026-10-17T16:05:09+00:00",
        sections=[
            GroupDigest(
                key="general_news",
                label="General News",
                counts=DigestCounts(total_new=3, summarized_count=1, skipped_count=2, not_shown_count=1),
                items=[summarized, skipped],
            ),
            GroupDigest(key="ai_news", label="AI News"),
        ],
    )
