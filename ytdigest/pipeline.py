"""
Digest Pipeline
===============

End-to-end aggregation for a list of channel groups.

Flow per group:
    1. Resolve each channel and read its feed (bounded pool, failures isolated)
    2. Drop stale videos, merge channels, dedupe by video ID
    3. Fetch transcript -> summarize, one unit of work per video (bounded pool)
    4. Assemble the group digest once every outcome is known

Groups run one after another in configuration order under a run deadline.
"""

import logging
import time
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional, Sequence, Tuple

import requests
from tqdm import tqdm

from .channel_resolver import ResolutionError, resolve_channel
from .config import DigestConfig
from .digest_assembler import VideoOutcome, assemble_group_digest, assemble_report
from .filters import dedupe_videos, filter_recent
from .models import Channel, ChannelGroup, FailureKind, GroupDigest, Report, TranscriptFailure, VideoRecord
from .summarizer import TranscriptSummarizer
from .summary_normalizer import normalize_summary
from .transcript_fetcher import TranscriptFetcher
from .video_collector import FeedFetchError, collect_videos

logger = logging.getLogger(__name__)

DEADLINE_DETAIL = "deadline exceeded"


class DigestPipeline:
    """
    Usage:
        pipeline = DigestPipeline(config)
        report = pipeline.run(load_channel_groups(config.channels_file))

    Constructing the pipeline validates credentials: a missing transcript or
    OpenAI key raises MissingCredentialError before any network call.
    """

    def __init__(
        self,
        config: DigestConfig,
        session: Optional[requests.Session] = None,
        fetcher: Optional[TranscriptFetcher] = None,
        summarizer: Optional[TranscriptSummarizer] = None,
        resolver: Callable[..., str] = resolve_channel,
        show_progress: bool = False,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.config = config
        self.session = session or requests.Session()
        self.fetcher = fetcher or TranscriptFetcher.from_config(config, session=self.session)
        if summarizer is None and config.summarize:
            summarizer = TranscriptSummarizer.from_config(config)
        self.summarizer = summarizer
        self.resolver = resolver
        self.show_progress = show_progress
        self._clock = clock

    # ---------- Discovery ----------

    def channel_videos(self, channel: Channel, now: datetime) -> List[VideoRecord]:
        """Recent videos of one channel. Any fetch failure yields []."""
        try:
            channel_id = self.resolver(channel.url, session=self.session, timeout=self.config.http_timeout)
            videos = collect_videos(
                channel,
                channel_id,
                max_videos=self.config.max_videos_per_channel,
                session=self.session,
                timeout=self.config.http_timeout,
            )
            fresh = filter_recent(videos, self.config.max_age_days, now)
        except (ResolutionError, FeedFetchError, requests.RequestException) as e:
            logger.warning("Skipping channel %s: %s", channel.name, e)
            return []
        except Exception as e:
            logger.error("Skipping channel %s: %s: %s", channel.name, type(e).__name__, e)
            return []

        logger.info("%s: %d recent video(s)", channel.name, len(fresh))
        return fresh

    def collect_group_videos(self, group: ChannelGroup, now: Optional[datetime] = None) -> List[VideoRecord]:
        """Considered set of a group: recent, deduplicated, newest first."""
        now = now or datetime.now(timezone.utc)
        channels = [c for c in group.channels if not c.is_placeholder]
        if not channels:
            return []

        workers = min(self.config.channel_workers, len(channels))
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="channel") as pool:
            futures = [pool.submit(self.channel_videos, c, now) for c in channels]
            # Merge in configuration order so later channels win on duplicates
            per_channel = [f.result() for f in futures]

        return dedupe_videos(v for vids in per_channel for v in vids)

    # ---------- Per-video work ----------

    def process_video(self, record: VideoRecord) -> VideoOutcome:
        """Transcript fetch and summarization for one video."""
        result = self.fetcher.fetch(record.video_id)
        if not result.ok:
            return result
        if self.summarizer is None:
            return normalize_summary({"one_liner": result.text}, 0)
        return self.summarizer.summarize(record.title, record.channel_name, result.text)

    def _timed_out(self, group: ChannelGroup, video: VideoRecord) -> TranscriptFailure:
        logger.warning("%s: %s timed out", group.label, video.video_id)
        return TranscriptFailure(kind=FailureKind.UNKNOWN, detail=DEADLINE_DETAIL)

    def _finished(self, group: ChannelGroup, video: VideoRecord, future: Future, elapsed: float) -> VideoOutcome:
        try:
            outcome = future.result()
        except Exception as e:
            logger.error("%s: %s failed: %s: %s", group.label, video.video_id, type(e).__name__, e)
            return TranscriptFailure(kind=FailureKind.UNKNOWN, detail=f"{type(e).__name__}: {e}"[:200])
        if elapsed > self.config.video_timeout:
            return self._timed_out(group, video)
        return outcome

    def _process_all(
        self,
        group: ChannelGroup,
        videos: Sequence[VideoRecord],
        deadline: Optional[float],
    ) -> List[Tuple[VideoRecord, VideoOutcome]]:
        """
        Process videos on a bounded pool.

        Each video gets `video_timeout` seconds from the moment a worker picks
        it up. Videos still running past their own deadline, or not finished
        when the run deadline hits, become TranscriptFailure(UNKNOWN).
        """
        if not videos:
            return []

        limit = self.config.video_timeout
        started: Dict[int, float] = {}
        elapsed: Dict[int, float] = {}

        def work(i: int, video: VideoRecord) -> VideoOutcome:
            started[i] = self._clock()
            try:
                return self.process_video(video)
            finally:
                elapsed[i] = self._clock() - started[i]

        outcomes: Dict[int, VideoOutcome] = {}
        bar = tqdm(total=len(videos), desc=group.label, unit="video", disable=not self.show_progress)
        pool = ThreadPoolExecutor(max_workers=self.config.transcript_workers, thread_name_prefix="transcript")
        try:
            futures = {pool.submit(work, i, v): i for i, v in enumerate(videos)}
            for f in futures:
                f.add_done_callback(lambda _: bar.update(1))
            pending = set(futures)

            while pending:
                now = self._clock()
                for f in list(pending):
                    i = futures[f]
                    if f.done():
                        pending.discard(f)
                        outcomes[i] = self._finished(group, videos[i], f, elapsed.get(i, 0.0))
                    elif (i in started and now - started[i] >= limit) or (deadline is not None and now >= deadline):
                        pending.discard(f)
                        f.cancel()
                        outcomes[i] = self._timed_out(group, videos[i])
                if not pending:
                    break

                # Queued videos have no deadline yet; wake up at least once per limit
                waits = [started[futures[f]] + limit - now for f in pending if futures[f] in started]
                if len(waits) < len(pending):
                    waits.append(limit)
                if deadline is not None:
                    waits.append(deadline - now)
                wait(pending, timeout=max(0.0, min(waits)), return_when=FIRST_COMPLETED)
        finally:
            pool.shutdown(wait=False, cancel_futures=True)
            bar.close()

        return [(v, outcomes[i]) for i, v in enumerate(videos)]

    # ---------- Groups ----------

    def run_group(
        self,
        group: ChannelGroup,
        now: Optional[datetime] = None,
        deadline: Optional[float] = None,
    ) -> GroupDigest:
        videos = self.collect_group_videos(group, now)
        logger.info("%s: %d video(s) to process", group.label, len(videos))
        outcomes = self._process_all(group, videos, deadline)
        return assemble_group_digest(group, outcomes, self.config.display_cap)

    def run(self, groups: Sequence[ChannelGroup], now: Optional[datetime] = None) -> Report:
        """
        Build the full report. Sections follow the order of `groups`.

        Groups that would start after the run deadline get an empty digest.
        """
        now = now or datetime.now(timezone.utc)
        deadline = self._clock() + self.config.run_timeout

        digests: List[GroupDigest] = []
        for group in groups:
            if self._clock() >= deadline:
                logger.warning("Run deadline reached, %s left empty", group.label)
                digests.append(assemble_group_digest(group, [], self.config.display_cap))
                continue
            digests.append(self.run_group(group, now=now, deadline=deadline))

        return assemble_report(digests, self.config, now)
