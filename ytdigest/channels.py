"""
Channel Groups
==============

Curated channel groups, one digest section per group. Built-in defaults live
here; a YAML file can replace them:

    groups:
      ai_news:
        label: AI News
        channels:
          - name: AI Search
            url: https://www.youtube.com/@theAIsearch
"""

from pathlib import Path
from typing import List, Optional, Union

import yaml

from .config import ConfigError
from .models import Channel, ChannelGroup


DEFAULT_GROUPS: List[ChannelGroup] = [
    ChannelGroup(
        key="general_news",
        label="General News",
        channels=(
            Channel(name="Breaking Points", url="https://www.youtube.com/@breakingpoints"),
            Channel(name="The Intercept", url="https://www.youtube.com/@theintercept"),
            Channel(name="The Young Turks", url="https://www.youtube.com/@TheYoungTurks"),
            Channel(name="Drop Site News", url="https://www.youtube.com/@DropSiteNews"),
            Channel(name="Diary of a CEO", url="https://www.youtube.com/@TheDiaryOfACEO"),
        ),
    ),
    ChannelGroup(
        key="ai_news",
        label="AI News",
        channels=(
            Channel(name="AIQUEST", url="https://www.youtube.com/@AIQuestAcademy"),
            Channel(name="AI Search", url="https://www.youtube.com/@theAIsearch"),
        ),
    ),
]


def load_channel_groups(path: Optional[Union[str, Path]] = None) -> List[ChannelGroup]:
    """
    Load channel groups from a YAML file, or return the defaults.

    Group order follows the file, which is also the order of the sections
    in the digest. Channels without a name are dropped.

    Raises:
        ConfigError if the file is missing or malformed
    """
    if path is None:
        return list(DEFAULT_GROUPS)

    p = Path(path)
    if not p.exists():
        raise ConfigError(f"Channels file not found at {p}")

    try:
        with p.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {p}: {e}") from e

    groups_raw = data.get("groups") if isinstance(data, dict) else None
    if not isinstance(groups_raw, dict):
        raise ConfigError(f"{p} must define a 'groups' mapping")

    groups: List[ChannelGroup] = []
    for key, body in groups_raw.items():
        body = body or {}
        if not isinstance(body, dict):
            raise ConfigError(f"{p}: group '{key}' must be a mapping")
        channels = tuple(
            Channel(name=str(c["name"]), url=str(c.get("url") or ""))
            for c in body.get("channels") or []
            if isinstance(c, dict) and c.get("name")
        )
        groups.append(ChannelGroup(key=str(key), label=str(body.get("label") or key), channels=channels))

    return groups
