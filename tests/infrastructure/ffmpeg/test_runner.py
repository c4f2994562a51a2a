"""Tests for FFmpeg command building and execution."""

import io
import subprocess
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from pptcrunch.config import CrunchConfig
from pptcrunch.core.errors import ToolNotFoundError
from pptcrunch.core.quality import resolve_parameters
from pptcrunch.core.types import (
    CapabilityReport,
    Codec,
    ExecutionMode,
    HardwareAccel,
)
from pptcrunch.infrastructure.ffmpeg.runner import (
    FFmpegRunner,
    _kill_tree,
    build_encode_command,
    parse_encoder_list,
    parse_progress_time,
)


@pytest.fixture
def runner():
    config = CrunchConfig(ffmpeg="ffmpeg", ffprobe="ffprobe", encode_timeout=5)
    return FFmpegRunner(config, show_progress=False)


def fake_process(returncode=0, stderr="", pid=4321):
    process = MagicMock()
    process.pid = pid
    process.stderr = io.StringIO(stderr)
    process.wait.return_value = returncode
    return process


def test_parse_encoder_list():
    output = (
        "Encoders:\n"
        " V..... = Video\n"
        " ------\n"
        " V....D libx264              libx264 H.264\n"
        " V....D hevc_nvenc           NVIDIA NVENC hevc encoder\n"
        " A....D aac                  AAC\n"
    )
    assert parse_encoder_list(output) == {"libx264", "hevc_nvenc", "aac"}


def test_parse_progress_time():
    line = "frame=  250 fps= 50 q=28.0 size=    1024kB time=00:01:02.50 bitrate= 134.2kbits/s"
    assert parse_progress_time(line) == pytest.approx(62.5)
    assert parse_progress_time("time=01:00:00.00") == pytest.approx(3600.0)
    assert parse_progress_time("size=N/A time=N/A bitrate=N/A") is None
    assert parse_progress_time("Input #0, mov,mp4") is None


class TestBuildCommand:
    """Test the encode argument grammar."""

    def test_software_h265(self):
        params = resolve_parameters(2, Codec.H265, ExecutionMode.SOFTWARE)
        cmd = build_encode_command("ffmpeg", Path("in.mov"), Path("out.mp4"),
                                   params, "scale=1920:1080")
        assert cmd == [
            "ffmpeg", "-hide_banner", "-nostdin",
            "-i", "in.mov",
            "-vf", "scale=1920:1080",
            "-c:v", "libx265",
            "-crf", "24",
            "-preset", "medium",
            "-profile:v", "main",
            "-tag:v", "hvc1",
            "-c:a", "copy",
            "-y", "-stats", "out.mp4",
        ]

    def test_nvenc_advanced(self, nvenc_report):
        params = resolve_parameters(2, Codec.H264, ExecutionMode.HARDWARE, nvenc_report)
        cmd = build_encode_command("ffmpeg", Path("in.mov"), Path("out.mp4"),
                                   params, "scale=1280:720", has_audio=False)
        assert cmd == [
            "ffmpeg", "-hide_banner", "-nostdin",
            "-i", "in.mov",
            "-vf", "scale=1280:720",
            "-c:v", "h264_nvenc",
            "-rc", "vbr",
            "-cq", "22",
            "-b:v", "0",
            "-preset", "slow",
            "-tune", "hq",
            "-multipass", "2",
            "-profile:v", "high",
            "-bf", "3",
            "-refs", "4",
            "-an",
            "-y", "-stats", "out.mp4",
        ]

    def test_videotoolbox(self):
        report = CapabilityReport(hardware_available=True, supports_h264=True,
                                  supports_h265=True, accel=HardwareAccel.VIDEOTOOLBOX)
        params = resolve_parameters(1, Codec.H265, ExecutionMode.HARDWARE, report)
        cmd = build_encode_command("ffmpeg", Path("in.mov"), Path("out.mp4"),
                                   params, "scale=640:360")
        assert "-preset" not in cmd
        assert "-rc" not in cmd
        assert cmd[cmd.index("-q:v") + 1] == "45"
        assert cmd[cmd.index("-pix_fmt") + 1] == "yuv420p"
        assert cmd[cmd.index("-b:v") + 1] == "0"


class TestFFmpegRunner:
    """Test running FFmpeg."""

    @patch("subprocess.run")
    def test_check_available(self, mock_run, runner):
        mock_run.return_value.stdout = "ffmpeg version 6.1 Copyright (c) 2000-2023\nbuilt with gcc\n"
        assert runner.check_available() == "ffmpeg version 6.1 Copyright (c) 2000-2023"
        assert mock_run.call_count == 2

    @patch("subprocess.run", side_effect=FileNotFoundError("ffmpeg"))
    def test_check_available_missing(self, mock_run, runner):
        with pytest.raises(ToolNotFoundError) as exc:
            runner.check_available()
        assert exc.value.tool == "FFmpeg"

    @patch("subprocess.run")
    def test_list_encoders(self, mock_run, runner):
        mock_run.return_value.stdout = " V....D h264_nvenc   NVIDIA NVENC H.264 encoder\n"
        assert runner.list_encoders() == {"h264_nvenc"}

    @patch("subprocess.run", side_effect=subprocess.CalledProcessError(1, "ffmpeg"))
    def test_list_encoders_failure(self, mock_run, runner):
        assert runner.list_encoders() == set()

    @patch("subprocess.Popen")
    def test_run_encode_success(self, mock_popen, runner):
        mock_popen.return_value = fake_process(
            stderr="frame=1 time=00:00:01.00 bitrate=1\nframe=2 time=00:00:02.00\n"
        )
        assert runner.run_encode(["ffmpeg", "-i", "in.mov", "out.mp4"], duration=2.0)

        kwargs = mock_popen.call_args.kwargs
        assert kwargs["stdin"] == subprocess.DEVNULL
        assert kwargs["stderr"] == subprocess.PIPE
        mock_popen.return_value.wait.assert_called_once_with(timeout=5)

    @patch("subprocess.Popen")
    def test_run_encode_failure(self, mock_popen, runner):
        mock_popen.return_value = fake_process(returncode=1, stderr="Unknown encoder\n")
        assert not runner.run_encode(["ffmpeg", "out.mp4"])

    @patch("subprocess.Popen", side_effect=FileNotFoundError("ffmpeg"))
    def test_run_encode_start_failure(self, mock_popen, runner):
        assert not runner.run_encode(["ffmpeg", "out.mp4"])

    @patch("pptcrunch.infrastructure.ffmpeg.runner._kill_tree")
    @patch("subprocess.Popen")
    def test_run_encode_timeout(self, mock_popen, mock_kill, runner):
        """Test the process tree is killed when the timeout expires."""
        process = fake_process(pid=99)
        process.wait.side_effect = [subprocess.TimeoutExpired("ffmpeg", 5), -9]
        mock_popen.return_value = process

        assert not runner.run_encode(["ffmpeg", "out.mp4"])
        mock_kill.assert_called_once_with(99)


def test_kill_tree(mocker):
    psutil_mock = mocker.patch("pptcrunch.infrastructure.ffmpeg.runner.psutil")
    child = MagicMock()
    parent = MagicMock()
    parent.children.return_value = [child]
    psutil_mock.Process.return_value = parent

    _kill_tree(1234)

    psutil_mock.Process.assert_called_once_with(1234)
    parent.children.assert_called_once_with(recursive=True)
    child.kill.assert_called_once()
    parent.kill.assert_called_once()
    psutil_mock.wait_procs.assert_called_once()
