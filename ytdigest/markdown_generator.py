"""
Markdown Generator
==================

Write a Report as a Markdown file with YAML frontmatter.

Features:
- YAML frontmatter with run metadata and per-section counts
- Dated, slugified filename (2026-10-17-daily-youtube-digest.md)
- Obsidian-compatible format
"""

import json
from pathlib import Path
from typing import List

from slugify import slugify

from .filters import parse_timestamp
from .models import DisplayItem, ItemStatus, Report


def _item_lines(item: DisplayItem) -> List[str]:
    lines = [f"### [{item.title}]({item.url})", ""]
    lines.append(f"*{item.channel_name} · {item.published_at}*")
    lines.append("")

    if item.status is ItemStatus.SUMMARIZED and item.summary:
        lines.append(item.summary.one_liner)
        lines.append("")
        lines.extend(f"- {p}" for p in item.summary.key_points)
        if item.summary.key_points:
            lines.append("")
        lines.append(f"**Who should watch:** {item.summary.who_should_watch}")
    else:
        lines.append(f"_Not summarized: {item.reason or 'Transcript unavailable.'}_")

    lines.append("")
    return lines


def digest_filename(report: Report) -> str:
    generated = parse_timestamp(report.generated_at)
    date_str = generated.strftime("%Y-%m-%d") if generated else ""
    return slugify(f"{date_str} {report.frequency} youtube digest") + ".md"


def generate_markdown(out_dir: Path, report: Report) -> Path:
    """
    Create the Markdown digest for a run.

    Args:
        out_dir: Output directory (created if missing)
        report: Assembled report

    Returns:
        Path to created Markdown file
    """
    out_dir = Path(out_dir)
    out_dir.mkdir(parents=True, exist_ok=True)
    fpath = out_dir / digest_filename(report)

    # Build YAML frontmatter
    yaml_lines = ["---"]

    def y(k, v):
        """Add YAML field if value is not None."""
        if v is None:
            return
        yaml_lines.append(f"{k}: {json.dumps(v, ensure_ascii=False)}")

    y("frequency", report.frequency)
    y("timezone", report.timezone)
    y("generated_at", report.generated_at)
    y("total_shown", report.total_shown)
    yaml_lines.append("sections:")
    for s in report.sections:
        c = s.counts
        yaml_lines.append(
            f"  - {{key: {json.dumps(s.key, ensure_ascii=False)}, new: {c.total_new}, summarized: {c.summarized_count}, "
            f"skipped: {c.skipped_count}, not_shown: {c.not_shown_count}}}"
        )
    yaml_lines.append("---\n")

    # Build body
    body = ["# YouTube Digest", ""]
    for s in report.sections:
        c = s.counts
        body.append(f"## {s.label}")
        body.append("")
        body.append(f"{c.total_new} new • {c.summarized_count} summarized • "
                    f"{c.skipped_count} skipped • {c.not_shown_count} not shown")
        body.append("")
        if not s.items:
            body.append("_No new videos._")
            body.append("")
        for item in s.items:
            body.extend(_item_lines(item))

    fpath.write_text("\n".join(yaml_lines) + "\n".join(body), encoding="utf-8")

    return fpath
