"""Tests for terminal formatting."""

import pytest

from pptcrunch.core.types import CompressionOutcome, OutcomeStatus
from pptcrunch.formatting import TerminalFormatter


@pytest.mark.parametrize("size,expected", [
    (0, "0.00 B"),
    (1023, "1023.00 B"),
    (1024, "1.00 KB"),
    (1536 * 1024, "1.50 MB"),
    (3 * 1024 ** 3, "3.00 GB"),
    (2 * 1024 ** 4, "2.00 TB"),
    (-2048, "-2.00 KB"),
])
def test_format_size(size, expected):
    assert TerminalFormatter.format_size(size) == expected


def test_no_color_env(monkeypatch):
    monkeypatch.setenv("NO_COLOR", "1")
    assert TerminalFormatter().bold == ""


def test_print_outcome_compressed(capsys):
    outcome = CompressionOutcome(
        source_name="talk.mov",
        final_name="talk - Q24H265.mp4",
        status=OutcomeStatus.COMPRESSED,
        original_size=1000,
        final_size=250,
        used_hardware=False,
    )

    TerminalFormatter().print_outcome(outcome)

    err = capsys.readouterr().err
    assert "talk.mov -> talk - Q24H265.mp4" in err
    assert "75.0% saved" in err


def test_print_run_summary(capsys):
    TerminalFormatter().print_run_summary(2, 3, ["notes.txt"])

    captured = capsys.readouterr()
    assert "Processing complete: 2/3 files processed successfully" in captured.out
    assert "Skipped 1 unsupported file(s)" in captured.err
    assert "notes.txt" in captured.out


def test_print_capabilities_shows_10bit_h265(capsys, nvenc_report):
    TerminalFormatter().print_capabilities(nvenc_report)
    assert "Codecs: H.264, H.265 (10-bit)" in capsys.readouterr().out


def test_print_capabilities_h264_only(capsys, h264_only_report):
    TerminalFormatter().print_capabilities(h264_only_report)

    captured = capsys.readouterr()
    assert "Codecs: H.264\n" in captured.out
    assert "basic features only" in captured.out
