"""
Tests for email rendering.
"""

from ytdigest.email_builder import (
    build_email,
    build_html,
    build_subject,
    build_text,
    format_generated,
    safe_url,
    stats_line,
    thumbnail_url,
)


def test_subject_counts_displayed_items(sample_report):
    assert build_subject(sample_report) == "Your YouTube Digest — 2 videos"
    weekly = sample_report.model_copy(update={"frequency": "weekly"})
    assert build_subject(weekly) == "Weekly YouTube Digest — 2 videos"


def test_generated_time_uses_report_timezone(sample_report):
    # 16:05 UTC is 09:05 PDT
    assert format_generated(sample_report) == "10/17/2026, 9:05:09 AM"


def test_stats_line(sample_report):
    assert stats_line(sample_report.sections[0]) == "3 new • 1 summarized • 2 skipped • 1 not shown"


def test_safe_url():
    assert safe_url("https://youtube.com/x") == "https://youtube.com/x"
    assert safe_url("javascript:alert(1)") == "#"
    assert safe_url(None) == "#"


def test_thumbnail_url(sample_report):
    item = sample_report.sections[0].items[0]
    assert thumbnail_url(item) == "https://i.ytimg.com/vi/abc123/mqdefault.jpg"


def test_text_body(sample_report):
    text = build_text(sample_report)

    assert "GENERAL NEWS" in text
    assert "AI NEWS" in text
    assert "📌 Markets <open> & close" in text
    assert "• Rates held" in text
    assert "⚠️ Live stream (Not summarized)" in text
    assert "Reason: This video has no transcript/captions available on YouTube." in text
    assert text.index("GENERAL NEWS") < text.index("AI NEWS")


def test_html_escapes_and_neutralizes_links(sample_report):
    body = build_html(sample_report)

    assert "Markets &lt;open&gt; &amp; close" in body
    assert "<open>" not in body
    assert "javascript:" not in body
    assert 'href="#"' in body
    assert "Summarized" in body and "Not summarized" in body
    assert "<li" in body


def test_build_email_bundles_all_parts(sample_report):
    email = build_email(sample_report)
    assert email.subject.startswith("Your YouTube Digest")
    assert email.text.endswith("publicly available transcripts.\n")
    assert email.html.startswith("<!doctype html>")
