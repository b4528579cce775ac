"""
Tests for the transcript fetcher (classification + retry/backoff).
"""

import random

import pytest
import requests

from ytdigest.config import MissingCredentialError
from ytdigest.digest_assembler import describe_failure
from ytdigest.models import FailureKind
from ytdigest.transcript_fetcher import (
    API_URL,
    TranscriptFetcher,
    backoff_delay_ms,
    decode_html_entities,
    parse_transcript_payload,
)


def segments(n=20, text="this is a fairly ordinary sentence", lang="en"):
    return [{"text": f"{text} {i}", "start": i * 2.0, "duration": 2.0, "lang": lang} for i in range(n)]


@pytest.fixture
def sleeps():
    return []


@pytest.fixture
def fetcher_for(make_session, sleeps):
    def _make(*outcomes, max_attempts=3, base_delay_ms=800):
        session = make_session(*outcomes)
        fetcher = TranscriptFetcher(
            api_key="test_key",
            max_attempts=max_attempts,
            base_delay_ms=base_delay_ms,
            session=session,
            sleep=sleeps.append,
            rng=random.Random(0),
        )
        return fetcher, session
    return _make


def test_success_joins_segments_in_order(fetcher_for, make_response):
    fetcher, session = fetcher_for(make_response(200, {"transcripts": segments(lang="de")}))
    result = fetcher.fetch("vid123")

    assert result.ok
    assert result.text.startswith("this is a fairly ordinary sentence 0 this is")
    assert result.text.endswith("sentence 19")
    assert result.segment_count == 20
    assert result.language == "de"

    _, kwargs = session.get.call_args
    assert session.get.call_args[0][0] == API_URL
    assert kwargs["params"] == {"api_key": "test_key", "v": "vid123"}


@pytest.mark.parametrize("lang,expected", [(5, None), ({"code": "en"}, None), ("   ", None), (" fr ", "fr")])
def test_odd_language_values_do_not_break_fetch(fetcher_for, make_response, lang, expected):
    fetcher, _ = fetcher_for(make_response(200, {"transcripts": segments(lang=lang)}))
    result = fetcher.fetch("vid123")

    assert result.ok
    assert result.language == expected


def test_retries_transient_503_then_succeeds(fetcher_for, make_response, sleeps):
    fetcher, session = fetcher_for(
        make_response(503, text="Service Unavailable"),
        make_response(503, text="Service Unavailable"),
        make_response(200, {"transcripts": segments()}),
    )
    result = fetcher.fetch("vid123")

    assert result.ok
    assert session.get.call_count == 3
    assert len(sleeps) == 2
    assert 0.8 <= sleeps[0] < 0.8 + 0.25
    assert 1.6 <= sleeps[1] < 1.6 + 0.25
    assert sleeps[0] <= sleeps[1]


def test_backoff_is_capped():
    rng = random.Random(1)
    for attempt in range(1, 12):
        delay = backoff_delay_ms(800, attempt, rng)
        assert delay < 8000 + 250
    assert 8000 <= backoff_delay_ms(800, 10, rng) < 8250
    assert 800 <= backoff_delay_ms(800, 1, rng) < 1050


def test_sentinel_string_is_no_transcript_without_retry(fetcher_for, make_response, sleeps):
    fetcher, session = fetcher_for(make_response(200, {"transcripts": ["This video has no transcripts"]}))
    result = fetcher.fetch("vid123")

    assert not result.ok
    assert result.kind is FailureKind.NO_TRANSCRIPT
    assert result.reason_code == "no_transcript"
    assert describe_failure(result) == "This video has no transcript/captions available on YouTube."
    assert session.get.call_count == 1
    assert sleeps == []


@pytest.mark.parametrize("body", [{}, {"transcripts": []}, {"transcripts": "nope"}, {"transcripts": [1, 2]}, []])
def test_missing_or_odd_transcripts_field_is_no_transcript(body):
    assert parse_transcript_payload(body).kind is FailureKind.NO_TRANSCRIPT


def test_short_transcript_is_too_short(fetcher_for, make_response):
    short = [{"text": "a" * 75, "lang": "en"}, {"text": "b" * 74, "lang": "en"}]
    fetcher, session = fetcher_for(make_response(200, {"transcripts": short}))
    result = fetcher.fetch("vid123")

    assert result.kind is FailureKind.TOO_SHORT
    assert session.get.call_count == 1


def test_invalid_json_retried_then_fails(fetcher_for, make_response, sleeps):
    fetcher, session = fetcher_for(
        make_response(200, text="<html>oops</html>"),
        make_response(200, text=""),
        max_attempts=2,
    )
    result = fetcher.fetch("vid123")

    assert result.kind is FailureKind.INVALID_JSON
    assert result.reason_code == "invalid_json"
    assert session.get.call_count == 2
    assert len(sleeps) == 1


def test_invalid_json_then_valid_body(fetcher_for, make_response):
    fetcher, _ = fetcher_for(
        make_response(200, text="not json"),
        make_response(200, {"transcripts": segments()}),
    )
    assert fetcher.fetch("vid123").ok


def test_http_error_after_attempts_carries_snippet(fetcher_for, make_response, sleeps):
    body = "Rate   limit\nexceeded " + "x" * 300
    fetcher, session = fetcher_for(*[make_response(429, text=body)] * 3)
    result = fetcher.fetch("vid123")

    assert result.kind is FailureKind.HTTP_ERROR
    assert result.status == 429
    assert result.detail.startswith("Rate limit exceeded x")
    assert len(result.detail) == 120
    assert result.reason_code.startswith("scrapingdog_http_429:Rate limit exceeded")
    assert session.get.call_count == 3
    assert len(sleeps) == 2
    assert describe_failure(result) == "Rate-limited temporarily. Will retry next run."


def test_html_error_body_collapses_to_status(fetcher_for, make_response):
    page = "<!DOCTYPE html><html><body>502 Bad Gateway</body></html>"
    fetcher, _ = fetcher_for(*[make_response(502, text=page)] * 3)
    result = fetcher.fetch("vid123")

    assert result.reason_code == "scrapingdog_http_502"
    assert result.detail is None
    assert describe_failure(result) == "Transcript provider temporarily unavailable (502)."


def test_non_transient_status_uses_attempt_budget(fetcher_for, make_response):
    fetcher, session = fetcher_for(
        make_response(404, text="not found"),
        make_response(200, {"transcripts": segments()}),
    )
    assert fetcher.fetch("vid123").ok
    assert session.get.call_count == 2


def test_network_errors_become_fetch_error(fetcher_for, sleeps):
    err = requests.ConnectionError("connection   reset\nby peer")
    fetcher, session = fetcher_for(err, err, err)
    result = fetcher.fetch("vid123")

    assert result.kind is FailureKind.FETCH_ERROR
    assert result.reason_code == "scrapingdog_fetch_error:connection reset by peer"
    assert session.get.call_count == 3
    assert len(sleeps) == 2
    assert describe_failure(result) == "Network error while fetching transcript."


def test_fetch_error_message_is_truncated(fetcher_for):
    fetcher, _ = fetcher_for(requests.Timeout("timed out " * 60), max_attempts=1)
    result = fetcher.fetch("vid123")

    assert len(result.detail) == 200
    assert describe_failure(result) == "Request timed out while fetching transcript."


def test_single_attempt_never_sleeps(fetcher_for, make_response, sleeps):
    fetcher, _ = fetcher_for(make_response(500, text="boom"), max_attempts=1)
    assert fetcher.fetch("vid123").status == 500
    assert sleeps == []


def test_missing_api_key_is_fatal():
    with pytest.raises(MissingCredentialError):
        TranscriptFetcher(api_key=None)
    with pytest.raises(MissingCredentialError):
        TranscriptFetcher(api_key="")


def test_from_config_uses_config_values(config):
    fetcher = TranscriptFetcher.from_config(config)
    assert fetcher.api_key == "test_scrapingdog_key"
    assert fetcher.max_attempts == 3
    assert fetcher.base_delay_ms == 0


def test_decode_html_entities():
    assert decode_html_entities("Tom &amp; Jerry&#39;s &quot;show&quot;&nbsp;&lt;live&gt;") == \
        "Tom & Jerry's \"show\" <live>"
