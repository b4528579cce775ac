"""
Transcript Fetcher
==================

Download YouTube video transcripts through the ScrapingDog transcript API.

Features:
- Bounded retry with exponential backoff + jitter on transient failures
- Classifies every outcome (no transcript, too short, provider errors)
- Never raises for operational failures: returns a TranscriptFailure value
- Only a missing API key is fatal (MissingCredentialError)

Provider payloads:
    { "transcripts": [ {"text", "start", "duration", "lang"}, ... ] }
    { "transcripts": ["This video has no transcripts"] }
"""

import logging
import random
import re
import time
from typing import Any, Callable, Optional

import requests

from .config import DigestConfig, MissingCredentialError
from .models import FailureKind, TranscriptFailure, TranscriptResult, TranscriptSuccess

logger = logging.getLogger(__name__)

PROVIDER = "scrapingdog"
API_URL = "https://api.scrapingdog.com/youtube/transcripts"

TRANSIENT_STATUSES = frozenset({429, 500, 502, 503, 504})
MIN_TRANSCRIPT_CHARS = 200
MAX_BACKOFF_MS = 8000
JITTER_MS = 250
SNIPPET_CHARS = 120
ERROR_MESSAGE_CHARS = 200

RE_WHITESPACE = re.compile(r"\s+")
RE_HTML = re.compile(r"<!doctype html>|<html", re.IGNORECASE)

# Common entities seen in provider transcripts
HTML_ENTITIES = (
    ("&amp;", "&"),
    ("&#39;", "'"),
    ("&quot;", '"'),
    ("&lt;", "<"),
    ("&gt;", ">"),
    ("&nbsp;", " "),
)


def is_transient_status(status: int) -> bool:
    return status in TRANSIENT_STATUSES


def backoff_delay_ms(base_delay_ms: int, attempt: int, rng: Optional[random.Random] = None) -> int:
    """
    Delay before the attempt following `attempt` (1-based).

    min(base * 2^(attempt-1), 8000) plus jitter in [0, 250).
    """
    rng = rng or random
    exp = min(base_delay_ms * (2 ** (attempt - 1)), MAX_BACKOFF_MS)
    return int(exp) + rng.randrange(JITTER_MS)


def collapse_whitespace(text: str) -> str:
    return RE_WHITESPACE.sub(" ", text or "").strip()


def decode_html_entities(text: str) -> str:
    for entity, char in HTML_ENTITIES:
        text = text.replace(entity, char)
    return collapse_whitespace(text)


def format_provider_error(provider: str, status: int, body: str) -> TranscriptFailure:
    """HTTP failure with a short snippet of the body. HTML bodies carry no snippet."""
    body = body or ""
    snippet = None
    if body and not RE_HTML.search(body):
        snippet = collapse_whitespace(body)[:SNIPPET_CHARS] or None
    return TranscriptFailure(kind=FailureKind.HTTP_ERROR, provider=provider, status=status, detail=snippet)


def _error_message(err: BaseException) -> str:
    msg = str(err) or type(err).__name__
    return collapse_whitespace(msg)[:ERROR_MESSAGE_CHARS]


def parse_transcript_payload(data: Any) -> TranscriptResult:
    """
    Classify a decoded JSON body.

    A missing or empty `transcripts` list, or one whose only element is a
    string, means the video has no transcript. Segment texts are joined in
    order; results under 200 characters are too short to summarize.
    """
    transcripts = data.get("transcripts") if isinstance(data, dict) else None

    if not isinstance(transcripts, list) or not transcripts:
        return TranscriptFailure(kind=FailureKind.NO_TRANSCRIPT)
    if len(transcripts) == 1 and isinstance(transcripts[0], str):
        return TranscriptFailure(kind=FailureKind.NO_TRANSCRIPT)
    if not isinstance(transcripts[0], dict):
        return TranscriptFailure(kind=FailureKind.NO_TRANSCRIPT)

    parts = []
    for seg in transcripts:
        text = seg.get("text") if isinstance(seg, dict) else None
        if text:
            parts.append(str(text))

    full_text = decode_html_entities(collapse_whitespace(" ".join(parts)))
    if len(full_text) < MIN_TRANSCRIPT_CHARS:
        return TranscriptFailure(kind=FailureKind.TOO_SHORT)

    lang = transcripts[0].get("lang")
    return TranscriptSuccess(
        text=full_text,
        segment_count=len(transcripts),
        language=lang.strip() if isinstance(lang, str) and lang.strip() else None,
    )


class TranscriptFetcher:
    """
    Fetch transcripts with bounded retry.

    Usage:
        fetcher = TranscriptFetcher.from_config(config)
        result = fetcher.fetch("dQw4w9WgXcQ")
        if result.ok: ...
    """

    def __init__(
        self,
        api_key: Optional[str],
        max_attempts: int = 3,
        base_delay_ms: int = 800,
        timeout: float = 30,
        session: Optional[requests.Session] = None,
        sleep: Callable[[float], None] = time.sleep,
        rng: Optional[random.Random] = None,
    ):
        if not api_key:
            raise MissingCredentialError("Missing SCRAPINGDOG_API_KEY")
        self.api_key = api_key
        self.max_attempts = max(1, int(max_attempts))
        self.base_delay_ms = base_delay_ms
        self.timeout = timeout
        self.session = session or requests.Session()
        self._sleep = sleep
        self._rng = rng or random.Random()

    @classmethod
    def from_config(cls, config: DigestConfig, **kwargs) -> "TranscriptFetcher":
        return cls(
            api_key=config.scrapingdog_api_key,
            max_attempts=config.transcript_max_attempts,
            base_delay_ms=config.transcript_base_delay_ms,
            timeout=config.http_timeout,
            **kwargs,
        )

    def _backoff(self, attempt: int) -> None:
        delay = backoff_delay_ms(self.base_delay_ms, attempt, self._rng)
        logger.debug("Backing off %d ms after attempt %d", delay, attempt)
        self._sleep(delay / 1000.0)

    def fetch(self, video_id: str) -> TranscriptResult:
        """
        Fetch and classify the transcript for one video.

        Returns:
            TranscriptSuccess or TranscriptFailure (never raises for
            network, HTTP or payload problems)
        """
        params = {"api_key": self.api_key, "v": video_id}
        headers = {"accept": "application/json"}

        for attempt in range(1, self.max_attempts + 1):
            last = attempt >= self.max_attempts
            try:
                r = self.session.get(API_URL, params=params, headers=headers, timeout=self.timeout)
            except requests.RequestException as e:
                logger.warning("%s attempt %d/%d for %s failed: %s",
                               PROVIDER, attempt, self.max_attempts, video_id, e)
                if not last:
                    self._backoff(attempt)
                    continue
                return TranscriptFailure(kind=FailureKind.FETCH_ERROR, provider=PROVIDER, detail=_error_message(e))

            if not 200 <= r.status_code < 300:
                status = r.status_code
                logger.warning("%s attempt %d/%d for %s: HTTP %d%s",
                               PROVIDER, attempt, self.max_attempts, video_id, status,
                               " (transient)" if is_transient_status(status) else "")
                if not last:
                    self._backoff(attempt)
                    continue
                return format_provider_error(PROVIDER, status, (r.text or "")[:300])

            try:
                data = r.json()
            except ValueError:
                # 200 with an HTML or empty body
                logger.warning("%s attempt %d/%d for %s: body is not JSON",
                               PROVIDER, attempt, self.max_attempts, video_id)
                if not last:
                    self._backoff(attempt)
                    continue
                return TranscriptFailure(kind=FailureKind.INVALID_JSON, provider=PROVIDER)

            result = parse_transcript_payload(data)
            if result.ok:
                logger.info("Fetched transcript for %s (%d segments)", video_id, result.segment_count)
            else:
                logger.info("No usable transcript for %s: %s", video_id, result.reason_code)
            return result

        return TranscriptFailure(kind=FailureKind.UNKNOWN, provider=PROVIDER)
