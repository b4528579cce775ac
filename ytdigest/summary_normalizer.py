"""
Summary Normalizer
==================

Clamp whatever the summarization model returned into a display-safe Summary.
Total: any input (None, wrong types, missing fields) yields a valid Summary.
"""

from typing import Any, List, Mapping

from .models import Summary

ONE_LINER_MAX = 220
WHO_SHOULD_WATCH_MAX = 180
DEFAULT_MAX_BULLETS = 5

FALLBACK_ONE_LINER = "Summary unavailable."
FALLBACK_WHO_SHOULD_WATCH = "Anyone who wants a neutral overview."


def _as_mapping(raw: Any) -> Mapping:
    if isinstance(raw, Mapping):
        return raw
    if hasattr(raw, "model_dump"):
        try:
            dumped = raw.model_dump()
        except Exception:
            return {}
        return dumped if isinstance(dumped, Mapping) else {}
    return {}


def _text(value: Any) -> str:
    if value is None:
        return ""
    try:
        return str(value).strip()
    except Exception:
        return ""


def normalize_summary(raw: Any, max_bullets: int = DEFAULT_MAX_BULLETS) -> Summary:
    """
    Normalize collaborator output of the shape
    {one_liner, key_points[], who_should_watch}.

    - one_liner: trimmed, fallback when empty, at most 220 chars
    - key_points: list only; items trimmed, empties dropped, at most max_bullets
    - who_should_watch: trimmed, fallback when empty, at most 180 chars
    """
    data = _as_mapping(raw)
    limit = max(0, int(max_bullets or 0))

    one_liner = _text(data.get("one_liner")) or FALLBACK_ONE_LINER
    who = _text(data.get("who_should_watch")) or FALLBACK_WHO_SHOULD_WATCH

    points_raw = data.get("key_points")
    key_points: List[str] = []
    if isinstance(points_raw, (list, tuple)):
        for p in points_raw:
            t = _text(p)
            if t:
                key_points.append(t)

    return Summary(
        one_liner=one_liner[:ONE_LINER_MAX],
        key_points=key_points[:limit],
        who_should_watch=who[:WHO_SHOULD_WATCH_MAX],
    )
