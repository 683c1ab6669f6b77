"""
Tests for the command line interface.
"""

import pytest

from longvideo.cli import build_request, parse_args, run
from longvideo.production.models import QualityTier, VideoStyle


def test_parse_defaults():
    args = parse_args(["--title", "Alpine"])
    assert args.duration == 30
    assert args.style == "cinematic"
    assert args.quality == "1080p"
    assert not args.estimate


def test_script_options_are_exclusive():
    with pytest.raises(SystemExit):
        parse_args(["-t", "x", "--script", "One.", "--script-file", "s.txt"])


def test_rejects_unknown_quality():
    with pytest.raises(SystemExit):
        parse_args(["-t", "x", "-q", "8k"])


def test_build_request_reads_script_file(tmp_path):
    script = tmp_path / "script.txt"
    script.write_text("The sun rises. A climber starts up the ridge.")
    args = parse_args([
        "-t", "Ridge", "--script-file", str(script), "-d", "10", "--style", "documentary", "-q", "720p",
    ])

    request = build_request(args)

    assert request.script.startswith("The sun rises.")
    assert request.total_duration == 10
    assert request.style == VideoStyle.DOCUMENTARY
    assert request.target_quality == QualityTier.HD


@pytest.mark.asyncio
async def test_estimate_only(tmp_path, monkeypatch, capsys):
    monkeypatch.chdir(tmp_path)
    args = parse_args(["-t", "Launch", "-d", "60", "-q", "4k", "--estimate"])

    assert await run(args) == 0

    output = capsys.readouterr().out
    assert "Clips: 12 in 3 batches" in output
    assert "total" in output
