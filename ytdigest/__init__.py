"""
YouTube Digest Core Modules
===========================

This package contains the channel-group digest pipeline: channel resolution,
feed listing, recency filtering, deduplication, transcript fetching,
summarization, digest assembly and rendering.
"""

__version__ = "1.0.0"

from .config import ConfigError, DigestConfig, FrequencyMode, MissingCredentialError
from .channels import load_channel_groups
from .channel_resolver import ResolutionError, resolve_channel
from .video_collector import FeedFetchError, collect_videos, parse_feed
from .filters import dedupe_videos, filter_recent, is_within_max_age
from .transcript_fetcher import TranscriptFetcher
from .summary_normalizer import normalize_summary
from .summarizer import TranscriptSummarizer
from .digest_assembler import assemble_group_digest, assemble_report, describe_failure
from .pipeline import DigestPipeline
from .email_builder import build_email
from .markdown_generator import generate_markdown
from .index_builder import build_index

__all__ = [
    "ConfigError",
    "DigestConfig",
    "FrequencyMode",
    "MissingCredentialError",
    "load_channel_groups",
    "ResolutionError",
    "resolve_channel",
    "FeedFetchError",
    "collect_videos",
    "parse_feed",
    "dedupe_videos",
    "filter_recent",
    "is_within_max_age",
    "TranscriptFetcher",
    "normalize_summary",
    "TranscriptSummarizer",
    "assemble_group_digest",
    "assemble_report",
    "describe_failure",
    "DigestPipeline",
    "build_email",
    "generate_markdown",
    "build_index",
]
