"""
Digest Configuration
====================

One explicit configuration object, built once at startup and passed to every
component. Values come from the environment (optionally loaded from a .env
file by the CLI) and all of them have defaults except the API credentials.

Frequency modes:
- daily  (default): short look-back window, small per-section cap
- weekly: longer look-back window, larger per-section cap
"""

import os
from enum import Enum
from typing import Dict, List, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field


class ConfigError(RuntimeError):
    """Invalid or incomplete configuration. Fatal for the run."""
    pass


class MissingCredentialError(ConfigError):
    """A required API credential is not set."""
    pass


class FrequencyMode(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"

    @classmethod
    def parse(cls, value: Optional[str]) -> "FrequencyMode":
        """Unknown or empty values fall back to daily."""
        v = (value or "").strip().lower()
        return cls.WEEKLY if v == cls.WEEKLY.value else cls.DAILY


class DigestConfig(BaseModel):
    """Run-wide settings. Immutable once constructed."""

    model_config = ConfigDict(frozen=True)

    frequency: FrequencyMode = FrequencyMode.DAILY
    timezone: str = "America/Los_Angeles"

    # Discovery
    max_videos_per_channel: int = Field(3, ge=0)
    max_age_days_daily: float = Field(2, ge=0)
    max_age_days_weekly: float = Field(9, ge=0)

    # Display
    cap_daily_per_section: int = Field(7, ge=0)
    cap_weekly_per_section: int = Field(15, ge=0)
    max_bullets: int = Field(5, ge=0)

    # Transcript provider
    scrapingdog_api_key: Optional[str] = None
    transcript_max_attempts: int = Field(3, ge=1)
    transcript_base_delay_ms: int = Field(800, ge=0)

    # Summarization collaborator
    openai_api_key: Optional[str] = None
    openai_model: str = "gpt-4o-mini"
    summarize: bool = True

    # Concurrency and deadlines (seconds)
    channel_workers: int = Field(4, ge=1)
    transcript_workers: int = Field(2, ge=1)
    http_timeout: float = Field(30, gt=0)
    video_timeout: float = Field(180, gt=0)
    run_timeout: float = Field(1800, gt=0)

    channels_file: Optional[str] = None

    @property
    def max_age_days(self) -> float:
        if self.frequency is FrequencyMode.WEEKLY:
            return self.max_age_days_weekly
        return self.max_age_days_daily

    @property
    def display_cap(self) -> int:
        if self.frequency is FrequencyMode.WEEKLY:
            return self.cap_weekly_per_section
        return self.cap_daily_per_section

    def require_credentials(self) -> None:
        """Raise MissingCredentialError naming every missing key."""
        missing: List[str] = []
        if not self.scrapingdog_api_key:
            missing.append("SCRAPINGDOG_API_KEY")
        if self.summarize and not self.openai_api_key:
            missing.append("OPENAI_API_KEY")
        if missing:
            raise MissingCredentialError(f"Missing {', '.join(missing)} in environment. Set it in .env file.")

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None, **overrides) -> "DigestConfig":
        """
        Build the configuration from environment variables.

        Args:
            environ: Mapping to read from (defaults to os.environ)
            **overrides: Field values that win over the environment (CLI flags)

        Raises:
            ConfigError if a numeric variable cannot be parsed
        """
        env = os.environ if environ is None else environ

        def _num(name: str, default, cast=int):
            raw = env.get(name)
            if raw is None or not str(raw).strip():
                return default
            try:
                return cast(str(raw).strip())
            except ValueError:
                raise ConfigError(f"{name} must be a number, got {raw!r}")

        values: Dict = {
            "frequency": FrequencyMode.parse(env.get("DIGEST_FREQUENCY")),
            "timezone": env.get("TIMEZONE") or "America/Los_Angeles",
            "max_videos_per_channel": _num("MAX_VIDEOS_PER_CHANNEL", 3),
            "max_age_days_daily": _num("MAX_AGE_DAYS_DAILY", 2, float),
            "max_age_days_weekly": _num("MAX_AGE_DAYS_WEEKLY", 9, float),
            "cap_daily_per_section": _num("CAP_DAILY_PER_SECTION", 7),
            "cap_weekly_per_section": _num("CAP_WEEKLY_PER_SECTION", 15),
            "max_bullets": _num("MAX_BULLETS", 5),
            "scrapingdog_api_key": env.get("SCRAPINGDOG_API_KEY") or None,
            "transcript_max_attempts": _num("SCRAPINGDOG_MAX_ATTEMPTS", 3),
            "transcript_base_delay_ms": _num("SCRAPINGDOG_BASE_DELAY_MS", 800),
            "openai_api_key": env.get("OPENAI_API_KEY") or None,
            "openai_model": env.get("OPENAI_MODEL") or "gpt-4o-mini",
            "channel_workers": _num("CHANNEL_WORKERS", 4),
            "transcript_workers": _num("TRANSCRIPT_WORKERS", 2),
            "http_timeout": _num("HTTP_TIMEOUT", 30, float),
            "video_timeout": _num("VIDEO_TIMEOUT", 180, float),
            "run_timeout": _num("RUN_TIMEOUT", 1800, float),
            "channels_file": env.get("CHANNELS_FILE") or None,
        }
        values.update({k: v for k, v in overrides.items() if v is not None})

        try:
            return cls(**values)
        except ValueError as e:
            # pydantic.ValidationError subclasses ValueError
            raise ConfigError(f"Invalid configuration:\n{e}") from e
