"""
Summarizer
==========

LLM-based neutral summaries of video transcripts.

Features:
- LangChain prompt | ChatOpenAI chain with a strict JSON schema response format
- Clips long transcripts for cost control
- Tolerates broken model output: parse failures and API errors become
  placeholder summaries instead of exceptions
"""

import json
import logging
from typing import Any, Optional

from langchain_core.prompts import ChatPromptTemplate

from .config import DigestConfig, MissingCredentialError
from .models import Summary
from .summary_normalizer import DEFAULT_MAX_BULLETS, normalize_summary

logger = logging.getLogger(__name__)

MAX_TRANSCRIPT_CHARS = 18000

SYSTEM_PROMPT = (
    "You write neutral, factual summaries of YouTube videos. "
    "No opinions. No persuasion. No speculation. No snark. "
    "Follow the schema exactly. Give at most {max_bullets} key points."
)

USER_PROMPT = """Summarize this video based on the transcript.

Video title: {title}
Channel: {channel_name}

Transcript:
{transcript}
"""

SUMMARY_PROMPT = ChatPromptTemplate.from_messages([
    ("system", SYSTEM_PROMPT),
    ("human", USER_PROMPT),
])

RESPONSE_FORMAT = {
    "type": "json_schema",
    "json_schema": {
        "name": "video_summary",
        "strict": True,
        "schema": {
            "type": "object",
            "additionalProperties": False,
            "required": ["one_liner", "key_points", "who_should_watch"],
            "properties": {
                "one_liner": {"type": "string", "description": "One-sentence neutral summary."},
                "key_points": {
                    "type": "array",
                    "description": "Key factual points from the video.",
                    "items": {"type": "string"},
                },
                "who_should_watch": {"type": "string", "description": "Who would find this useful."},
            },
        },
    },
}


def placeholder_summary(one_liner: str, who_should_watch: str) -> Summary:
    return normalize_summary({"one_liner": one_liner, "key_points": [], "who_should_watch": who_should_watch}, 0)


def _message_text(result: Any) -> str:
    """Text of a chat model result (AIMessage, plain string, or content blocks)."""
    content = getattr(result, "content", result)
    if isinstance(content, list):
        chunks = []
        for c in content:
            if isinstance(c, str):
                chunks.append(c)
            elif isinstance(c, dict) and isinstance(c.get("text"), str):
                chunks.append(c["text"])
        content = "\n".join(chunks)
    return content.strip() if isinstance(content, str) else ""


def safe_json_parse(text: str) -> Optional[dict]:
    """Parse JSON, falling back to the outermost {...} slice. None on failure."""
    if not text:
        return None
    try:
        parsed = json.loads(text)
    except ValueError:
        first, last = text.find("{"), text.rfind("}")
        if first < 0 or last <= first:
            return None
        try:
            parsed = json.loads(text[first:last + 1])
        except ValueError:
            return None
    return parsed if isinstance(parsed, dict) else None


class TranscriptSummarizer:
    """
    Summarize transcripts into Summary objects.

    Usage:
        summarizer = TranscriptSummarizer.from_config(config)
        summary = summarizer.summarize(title, channel_name, transcript_text)
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: str = "gpt-4o-mini",
        temperature: float = 0.2,
        max_bullets: int = DEFAULT_MAX_BULLETS,
        timeout: float = 60,
        llm: Any = None,
    ):
        if llm is None:
            if not api_key:
                raise MissingCredentialError("Missing OPENAI_API_KEY")
            from langchain_openai import ChatOpenAI

            llm = ChatOpenAI(
                model=model,
                temperature=temperature,
                api_key=api_key,
                timeout=timeout,
                max_retries=1,
            ).bind(response_format=RESPONSE_FORMAT)

        self.max_bullets = max_bullets
        self.chain = SUMMARY_PROMPT | llm

    @classmethod
    def from_config(cls, config: DigestConfig, **kwargs) -> "TranscriptSummarizer":
        return cls(
            api_key=config.openai_api_key,
            model=config.openai_model,
            max_bullets=config.max_bullets,
            timeout=config.http_timeout,
            **kwargs,
        )

    def summarize(self, title: str, channel_name: str, transcript_text: str) -> Summary:
        """
        Produce a normalized summary. Never raises for API or output problems.
        """
        clipped = str(transcript_text or "")[:MAX_TRANSCRIPT_CHARS]

        try:
            result = self.chain.invoke({
                "title": title,
                "channel_name": channel_name,
                "transcript": clipped,
                "max_bullets": self.max_bullets,
            })
        except Exception as e:
            logger.error("Summarization failed for '%s': %s: %s", title, type(e).__name__, e)
            detail = " ".join(str(e).split())[:120]
            return placeholder_summary(
                "Summary unavailable (OpenAI API error).",
                f"API error: {type(e).__name__} {detail}".strip(),
            )

        out = _message_text(result)
        if not out:
            logger.warning("Empty model output for '%s'", title)
            return placeholder_summary(
                "Summary unavailable (empty model output).",
                "Video overview unavailable due to an API output issue.",
            )

        parsed = safe_json_parse(out)
        if parsed is None:
            logger.warning("Unparseable model output for '%s': %.80s", title, out)
            return placeholder_summary(
                "Summary unavailable (unexpected output format).",
                "Video overview unavailable due to a formatting issue.",
            )

        return normalize_summary(parsed, self.max_bullets)
