"""
Email Builder
=============

Render a Report into a subject line, a plain-text body and a single-column,
mobile-safe HTML body. Sending is left to the caller.
"""

import html
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

from dateutil import tz

from .models import DisplayItem, GroupDigest, ItemStatus, Report
from .video_collector import video_id_from_link

DIVIDER = "━━━━━━━━━━━━━━━━━━━━━━"
FOOTER = "Neutral summaries generated from publicly available transcripts."
THUMB_URL = "https://i.ytimg.com/vi/{video_id}/mqdefault.jpg"


@dataclass
class RenderedEmail:
    subject: str
    text: str
    html: str


def _esc(value: Optional[str]) -> str:
    return html.escape(str(value or ""), quote=True)


def safe_url(url: Optional[str]) -> str:
    s = str(url or "").strip()
    return s if s.startswith(("http://", "https://")) else "#"


def thumbnail_url(item: DisplayItem) -> str:
    vid = item.video_id or video_id_from_link(item.url) or "dQw4w9WgXcQ"
    return THUMB_URL.format(video_id=vid)


def format_generated(report: Report) -> str:
    """Generation time in the report's timezone, e.g. '10/17/2026, 9:05:00 AM'."""
    try:
        when = datetime.fromisoformat(report.generated_at)
    except ValueError:
        return report.generated_at
    zone = tz.gettz(report.timezone)
    if zone is not None and when.tzinfo is not None:
        when = when.astimezone(zone)
    hour = when.hour % 12 or 12
    ampm = "AM" if when.hour < 12 else "PM"
    return f"{when.month}/{when.day}/{when.year}, {hour}:{when.minute:02d}:{when.second:02d} {ampm}"


def build_subject(report: Report) -> str:
    prefix = "Weekly YouTube Digest" if report.frequency == "weekly" else "Your YouTube Digest"
    return f"{prefix} — {report.total_shown} videos"


def stats_line(section: GroupDigest) -> str:
    c = section.counts
    return (f"{c.total_new} new • {c.summarized_count} summarized • "
            f"{c.skipped_count} skipped • {c.not_shown_count} not shown")


# ---------- Plain text ----------

def _text_item(item: DisplayItem) -> List[str]:
    lines = []
    if item.status is ItemStatus.SUMMARIZED:
        lines.append(f"📌 {item.title}")
    else:
        lines.append(f"⚠️ {item.title} (Not summarized)")
    lines.append(f"Channel: {item.channel_name}")
    lines.append(f"Watch: {item.url}")
    lines.append(f"Published: {item.published_at}")

    if item.status is ItemStatus.SUMMARIZED and item.summary:
        lines.append("")
        lines.append(f"Summary: {item.summary.one_liner}")
        if item.summary.key_points:
            lines.append("Key points:")
            lines.extend(f"• {p}" for p in item.summary.key_points)
    else:
        lines.append("No summary available.")
        lines.append(f"Reason: {item.reason or 'Transcript unavailable.'}")

    lines.extend(["", DIVIDER, ""])
    return lines


def build_text(report: Report) -> str:
    lines = [
        "YouTube Digest",
        f"Period: {report.frequency}",
        f"Generated: {format_generated(report)} ({report.timezone})",
        "",
    ]
    for section in report.sections:
        lines.append(section.label.upper())
        lines.append(f"({stats_line(section)})")
        lines.append("")
        for item in section.items:
            lines.extend(_text_item(item))
        lines.append("")
    lines.append(FOOTER)
    return "\n".join(lines) + "\n"


# ---------- HTML ----------

BADGE_SUMMARIZED = ('<span style="display:inline-block;font-size:12px;padding:6px 10px;border-radius:999px;'
                    'background:#E7F7EF;color:#0B6B3A;font-weight:700;">Summarized</span>')
BADGE_SKIPPED = ('<span style="display:inline-block;font-size:12px;padding:6px 10px;border-radius:999px;'
                 'background:#FFF3E6;color:#8A4B00;font-weight:700;">Not summarized</span>')


def render_card(item: DisplayItem) -> str:
    url = _esc(safe_url(item.url))
    summarized = item.status is ItemStatus.SUMMARIZED and item.summary is not None

    meta = " • ".join(_esc(v) for v in (item.channel_name, item.published_at) if v)
    one_liner = _esc(item.summary.one_liner) if summarized else "No summary available."

    extra = ""
    if summarized and item.summary.key_points:
        points = "".join(f'<li style="margin:0 0 6px 0;">{_esc(p)}</li>' for p in item.summary.key_points)
        extra = (f'<div style="margin-top:10px;font-weight:800;color:#111;">Key points:</div>'
                 f'<ul style="margin:8px 0 0 18px;padding:0;color:#222;line-height:1.45;">{points}</ul>')
    elif not summarized:
        extra = (f'<div style="margin-top:10px;color:#444;font-size:13px;">'
                 f'<span style="font-weight:800;">Reason:</span> {_esc(item.reason or "Transcript unavailable.")}</div>')

    return f"""
    <tr>
      <td style="padding:10px 18px;">
        <table role="presentation" width="100%" cellpadding="0" cellspacing="0" style="border:1px solid #E9E9E9;border-radius:14px;">
          <tr><td style="padding:0;"><a href="{url}"><img src="{_esc(thumbnail_url(item))}" alt="" style="width:100%;max-width:640px;height:auto;display:block;border:0;"></a></td></tr>
          <tr>
            <td style="padding:14px;font-family:Arial, sans-serif;">
              <div style="margin-bottom:10px;">{BADGE_SUMMARIZED if summarized else BADGE_SKIPPED}</div>
              <div style="font-size:18px;font-weight:900;margin:0 0 6px 0;"><a href="{url}" style="color:#111;">{_esc(item.title)}</a></div>
              <div style="color:#666;font-size:13px;margin:0 0 10px 0;">{meta}</div>
              <div style="color:#111;font-size:14px;line-height:1.5;"><span style="font-weight:900;">Summary:</span> {one_liner}</div>
              {extra}
              <div style="margin-top:12px;"><a href="{url}" style="color:#0B57D0;font-weight:900;">Watch →</a></div>
            </td>
          </tr>
        </table>
      </td>
    </tr>"""


def render_section(section: GroupDigest) -> str:
    cards = "".join(render_card(i) for i in section.items)
    return f"""
    <tr>
      <td style="padding:18px 18px 8px 18px;font-family:Arial, sans-serif;">
        <div style="font-size:14px;font-weight:800;letter-spacing:0.08em;color:#111;">{_esc(section.label.upper())}</div>
        <div style="margin-top:6px;font-size:13px;color:#666;">{_esc(stats_line(section))}</div>
      </td>
    </tr>{cards}"""


def build_html(report: Report) -> str:
    sections = "".join(render_section(s) for s in report.sections)
    return f"""<!doctype html>
<html>
  <head>
    <meta charset="utf-8" />
    <meta name="viewport" content="width=device-width,initial-scale=1" />
    <title>YouTube Digest</title>
  </head>
  <body style="margin:0;padding:0;background:#F6F7FB;">
    <table role="presentation" width="100%" cellpadding="0" cellspacing="0" style="background:#F6F7FB;">
      <tr>
        <td align="center" style="padding:0 10px;">
          <table role="presentation" width="640" cellpadding="0" cellspacing="0" style="max-width:640px;width:100%;background:#FFFFFF;">
            <tr>
              <td style="padding:22px 18px 10px 18px;font-family:Arial, sans-serif;">
                <div style="font-size:22px;font-weight:900;color:#111;">YouTube Digest</div>
                <div style="margin-top:10px;color:#666;font-size:13px;line-height:1.5;">
                  <div><b style="color:#111;">Period:</b> {_esc(report.frequency)}</div>
                  <div><b style="color:#111;">Generated:</b> {_esc(format_generated(report))} ({_esc(report.timezone)})</div>
                </div>
              </td>
            </tr>{sections}
            <tr>
              <td style="padding:18px 18px 26px 18px;font-family:Arial, sans-serif;color:#777;font-size:12px;">{FOOTER}</td>
            </tr>
          </table>
        </td>
      </tr>
    </table>
  </body>
</html>"""


def build_email(report: Report) -> RenderedEmail:
    return RenderedEmail(subject=build_subject(report), text=build_text(report), html=build_html(report))
