"""
Data Model
==========

Pydantic models shared by every stage of the digest pipeline.

- Channel / ChannelGroup: static configuration, loaded once per run
- VideoRecord: one feed entry, identity is the video id
- TranscriptSuccess / TranscriptFailure: tagged transcript outcome
- Summary: normalized, display-safe summary
- DisplayItem / GroupDigest / Report: assembled output
"""

from enum import Enum
from typing import List, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field


# ---------- Configuration ----------

class Channel(BaseModel):
    """A channel reference inside a group."""
    model_config = ConfigDict(frozen=True)

    name: str
    url: str = ""

    @property
    def is_placeholder(self) -> bool:
        u = (self.url or "").strip()
        return not u or u.startswith("PASTE_")


class ChannelGroup(BaseModel):
    """Named collection of channels rendered as one digest section."""
    model_config = ConfigDict(frozen=True)

    key: str
    label: str
    channels: Tuple[Channel, ...] = ()


# ---------- Discovery ----------

class VideoRecord(BaseModel):
    """One video discovered in a channel feed."""
    model_config = ConfigDict(frozen=True)

    video_id: str
    title: str
    url: str
    published_at: str  # ISO 8601, as published by the feed
    channel_name: str


# ---------- Transcript outcome ----------

class FailureKind(str, Enum):
    NO_TRANSCRIPT = "no_transcript"
    TOO_SHORT = "too_short"
    INVALID_JSON = "invalid_json"
    HTTP_ERROR = "http_error"
    FETCH_ERROR = "fetch_error"
    UNKNOWN = "unknown_error"


class TranscriptSuccess(BaseModel):
    model_config = ConfigDict(frozen=True)

    text: str
    segment_count: int
    language: Optional[str] = None

    @property
    def ok(self) -> bool:
        return True


class TranscriptFailure(BaseModel):
    """A transcript could not be used. Carries enough data to explain why."""
    model_config = ConfigDict(frozen=True)

    kind: FailureKind
    provider: Optional[str] = None
    status: Optional[int] = None
    detail: Optional[str] = None

    @property
    def ok(self) -> bool:
        return False

    @property
    def reason_code(self) -> str:
        """Short, stable string form used in logs."""
        if self.kind is FailureKind.HTTP_ERROR:
            code = f"{self.provider}_http_{self.status}"
            return f"{code}:{self.detail}" if self.detail else code
        if self.kind is FailureKind.FETCH_ERROR:
            return f"{self.provider}_fetch_error:{self.detail or ''}"
        return self.kind.value


TranscriptResult = Union[TranscriptSuccess, TranscriptFailure]


# ---------- Summary + output ----------

class Summary(BaseModel):
    one_liner: str
    key_points: List[str] = Field(default_factory=list)
    who_should_watch: str


class ItemStatus(str, Enum):
    SUMMARIZED = "summarized"
    SKIPPED = "skipped"


class DisplayItem(BaseModel):
    """A video as it appears in the digest: summarized or skipped with a reason."""
    status: ItemStatus
    video_id: str
    title: str
    channel_name: str
    url: str
    published_at: str
    summary: Optional[Summary] = None
    reason: Optional[str] = None


class DigestCounts(BaseModel):
    total_new: int = 0
    summarized_count: int = 0
    skipped_count: int = 0
    not_shown_count: int = 0


class GroupDigest(BaseModel):
    key: str
    label: str
    counts: DigestCounts = Field(default_factory=DigestCounts)
    items: List[DisplayItem] = Field(default_factory=list)


class Report(BaseModel):
    frequency: str
    timezone: str
    generated_at: str  # ISO 8601, UTC
    sections: List[GroupDigest] = Field(default_factory=list)

    @property
    def total_shown(self) -> int:
        return sum(len(s.items) for s in self.sections)
