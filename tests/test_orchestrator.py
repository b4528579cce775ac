"""
Tests for the command line entry point.
"""

from unittest.mock import MagicMock, patch

import pytest

import orchestrator

ENV_KEYS = ("SCRAPINGDOG_API_KEY", "OPENAI_API_KEY", "DIGEST_FREQUENCY", "CHANNELS_FILE")


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    for key in ENV_KEYS:
        monkeypatch.delenv(key, raising=False)


def test_missing_credentials_exit_code(capsys):
    assert orchestrator.main([]) == 1
    assert "SCRAPINGDOG_API_KEY" in capsys.readouterr().out


def test_full_run_writes_outputs(monkeypatch, tmp_path, sample_report, capsys):
    monkeypatch.setenv("SCRAPINGDOG_API_KEY", "sd")
    out_dir = tmp_path / "digests"

    pipeline = MagicMock()
    pipeline.run.return_value = sample_report
    with patch.object(orchestrator, "DigestPipeline", return_value=pipeline) as factory:
        code = orchestrator.main(["--no-summarize", "--sequential", "--output", str(out_dir)])

    assert code == 0
    config = factory.call_args.args[0]
    assert config.summarize is False
    assert config.channel_workers == 1
    assert config.transcript_workers == 1

    assert (out_dir / "digest.html").exists()
    assert (out_dir / "digest.json").exists()
    assert (out_dir / "2026-10-17-daily-youtube-digest.md").exists()
    assert "Your YouTube Digest — 2 videos" in capsys.readouterr().out
