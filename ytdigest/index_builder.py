"""
Index Builder
=============

Write digest.json next to the rendered digest for a run.

Contains:
- Run metadata (frequency, timezone, generated_at)
- Total videos shown
- Per-section counts and displayed video IDs

Written atomically (temp file + fsync + replace). It describes one run only
and is never read back by the pipeline.
"""

import json
import os
from pathlib import Path
from typing import Dict

from .models import Report

INDEX_FILENAME = "digest.json"


def _atomic_write_json(target: Path, obj: dict) -> None:
    """Write JSON to a temp file, fsync, then move into place."""
    target.parent.mkdir(parents=True, exist_ok=True)
    temp = target.with_suffix(target.suffix + ".tmp")

    with temp.open("w", encoding="utf-8") as f:
        json.dump(obj, f, ensure_ascii=False, indent=2)
        f.flush()
        os.fsync(f.fileno())
    os.replace(temp, target)


def build_index(out_dir: Path, report: Report) -> Path:
    """
    Build digest.json for a report.

    Args:
        out_dir: Output directory
        report: Assembled report

    Returns:
        Path to created digest.json
    """
    info: Dict = {
        "frequency": report.frequency,
        "timezone": report.timezone,
        "generated_at": report.generated_at,
        "total_shown": report.total_shown,
        "sections": [
            {
                "key": s.key,
                "label": s.label,
                **s.counts.model_dump(),
                "video_ids": [i.video_id for i in s.items],
            }
            for s in report.sections
        ],
    }

    out = Path(out_dir) / INDEX_FILENAME
    _atomic_write_json(out, info)

    return out
