"""FFmpeg process management.

Builds encode command lines from resolved parameters and runs them with a
progress bar, a hard timeout and cleanup of the whole process tree.
"""

import re
import subprocess
import threading
from collections import deque
from pathlib import Path
from typing import Deque, List, Optional, Set

import psutil
from loguru import logger
from tqdm import tqdm

from ...config import CrunchConfig
from ...core.errors import EncodeError, ToolNotFoundError
from ...core.types import EncodingParameters

_ENCODER_LINE = re.compile(r"^\s*[VAS][A-Z.]{5}\s+(\S+)")
_TIME_PATTERN = re.compile(r"time=\s*(-?\d+):(\d{2}):(\d{2}(?:\.\d+)?)")
_STDERR_TAIL = 40


def parse_encoder_list(output: str) -> Set[str]:
    """Extract encoder names from ``ffmpeg -encoders`` output."""
    encoders = set()
    for line in output.splitlines():
        match = _ENCODER_LINE.match(line)
        if match and match.group(1) != "=":
            encoders.add(match.group(1))
    return encoders


def parse_progress_time(line: str) -> Optional[float]:
    """Parse the ``time=HH:MM:SS.xx`` stamp of an FFmpeg stats line.

    Returns:
        Elapsed output time in seconds, or None if the line has no stamp
    """
    match = _TIME_PATTERN.search(line)
    if not match:
        return None
    hours, minutes, seconds = match.groups()
    total = int(hours) * 3600 + int(minutes) * 60 + float(seconds)
    return max(total, 0.0)


def build_encode_command(
    ffmpeg: str,
    input_path: Path,
    output_path: Path,
    parameters: EncodingParameters,
    scale_filter: str,
    has_audio: bool = True
) -> List[str]:
    """Build an FFmpeg encode command.

    Args:
        ffmpeg: FFmpeg binary
        input_path: Source video
        output_path: Destination file
        parameters: Resolved encoder parameters
        scale_filter: Value for ``-vf``
        has_audio: Copy audio if True, drop it otherwise

    Returns:
        Command as argument list
    """
    cmd = [
        str(ffmpeg), "-hide_banner", "-nostdin",
        "-i", str(input_path),
        "-vf", scale_filter,
        "-c:v", parameters.encoder,
    ]

    if parameters.rate_control == "vbr":
        cmd.extend(["-rc", parameters.rate_control])
    cmd.extend([parameters.quality_flag, str(parameters.quality_value)])
    if parameters.rate_control in ("vbr", "cq"):
        # Constant quality without a bitrate ceiling
        cmd.extend(["-b:v", "0"])
    if parameters.preset and parameters.preset != "default":
        cmd.extend(["-preset", parameters.preset])
    if parameters.tune:
        cmd.extend(["-tune", parameters.tune])
    if parameters.multipass is not None:
        cmd.extend(["-multipass", str(parameters.multipass)])

    cmd.extend(["-profile:v", parameters.profile])
    if parameters.b_frames is not None:
        cmd.extend(["-bf", str(parameters.b_frames)])
    if parameters.reference_frames is not None:
        cmd.extend(["-refs", str(parameters.reference_frames)])
    if parameters.codec_tag:
        cmd.extend(["-tag:v", parameters.codec_tag])
    if parameters.encoder.endswith("_videotoolbox"):
        cmd.extend(["-pix_fmt", "yuv420p"])

    cmd.extend(["-c:a", "copy"] if has_audio else ["-an"])
    cmd.extend(["-y", "-stats", str(output_path)])
    return cmd


def _kill_tree(pid: int) -> None:
    """Kill a process and all of its descendants."""
    try:
        parent = psutil.Process(pid)
    except psutil.NoSuchProcess:
        return

    procs = parent.children(recursive=True)
    procs.append(parent)
    for proc in procs:
        try:
            proc.kill()
        except psutil.NoSuchProcess:
            continue
        except psutil.AccessDenied as e:
            logger.warning(f"Could not kill process {proc.pid}: {e}")
    psutil.wait_procs(procs, timeout=5)


class FFmpegRunner:
    """Runs FFmpeg and ffprobe for the rest of the application."""

    def __init__(self, config: Optional[CrunchConfig] = None,
                 show_progress: bool = True):
        """Initialize runner.

        Args:
            config: Optional runtime configuration with tool paths and timeouts
            show_progress: Draw a progress bar while encoding
        """
        self.config = config or CrunchConfig()
        self.show_progress = show_progress

    @property
    def ffmpeg(self) -> str:
        return str(self.config.ffmpeg)

    @property
    def ffprobe(self) -> str:
        return str(self.config.ffprobe)

    def _version_line(self, binary: str, name: str) -> str:
        try:
            result = subprocess.run(
                [binary, "-version"],
                capture_output=True,
                text=True,
                check=True,
                timeout=self.config.probe_timeout
            )
        except (subprocess.SubprocessError, OSError) as e:
            raise ToolNotFoundError(name, str(e)) from e

        lines = result.stdout.strip().splitlines()
        if not lines:
            raise ToolNotFoundError(name, "empty version output")
        return lines[0]

    def check_available(self) -> str:
        """Verify FFmpeg and ffprobe can be executed.

        Returns:
            FFmpeg version line

        Raises:
            ToolNotFoundError: If either tool is missing or broken
        """
        version = self._version_line(self.ffmpeg, "FFmpeg")
        self._version_line(self.ffprobe, "ffprobe")
        logger.debug(f"Using {self.ffmpeg}: {version}")
        return version

    def list_encoders(self) -> Set[str]:
        """Names of the encoders compiled into FFmpeg (empty on failure)."""
        try:
            result = subprocess.run(
                [self.ffmpeg, "-hide_banner", "-encoders"],
                capture_output=True,
                text=True,
                check=True,
                timeout=self.config.probe_timeout
            )
        except (subprocess.SubprocessError, OSError) as e:
            logger.debug(f"Could not list encoders: {e}")
            return set()
        return parse_encoder_list(result.stdout)

    def build_encode_command(self, input_path: Path, output_path: Path,
                             parameters: EncodingParameters, scale_filter: str,
                             has_audio: bool = True) -> List[str]:
        return build_encode_command(self.ffmpeg, input_path, output_path,
                                   parameters, scale_filter, has_audio)

    def run_encode(self, cmd: List[str], duration: Optional[float] = None,
                   description: str = "Encoding") -> bool:
        """Run an encode command to completion.

        Args:
            cmd: Command from ``build_encode_command``
            duration: Input duration in seconds, enables the progress bar
            description: Progress bar label

        Returns:
            True if FFmpeg exited successfully within the timeout
        """
        try:
            self._execute(cmd, duration, description)
            return True
        except EncodeError as e:
            logger.error(e.message)
            if e.details:
                logger.debug(e.details)
            return False

    def _execute(self, cmd: List[str], duration: Optional[float],
                 description: str) -> None:
        logger.debug(f"Running: {' '.join(cmd)}")
        try:
            process = subprocess.Popen(
                cmd,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.PIPE,
                text=True,
                encoding="utf-8",
                errors="replace",
                bufsize=1
            )
        except OSError as e:
            raise EncodeError(f"Failed to start FFmpeg: {e}", " ".join(cmd)) from e

        tail: Deque[str] = deque(maxlen=_STDERR_TAIL)
        progress = tqdm(
            total=round(duration, 2) if duration else None,
            desc=description,
            unit="s",
            leave=False,
            disable=not (self.show_progress and duration)
        )
        reader = threading.Thread(
            target=self._drain_stderr,
            args=(process, tail, progress),
            daemon=True
        )
        reader.start()

        try:
            returncode = process.wait(timeout=self.config.encode_timeout)
        except subprocess.TimeoutExpired:
            logger.warning(f"FFmpeg exceeded {self.config.encode_timeout:.0f}s, killing it")
            _kill_tree(process.pid)
            process.wait()
            reader.join(timeout=5)
            progress.close()
            raise EncodeError(
                f"Encode timed out after {self.config.encode_timeout:.0f} seconds",
                " ".join(cmd),
                "\n".join(tail)
            )

        reader.join(timeout=5)
        progress.close()
        if returncode != 0:
            raise EncodeError(
                f"FFmpeg exited with code {returncode}",
                " ".join(cmd),
                "\n".join(tail)
            )

    @staticmethod
    def _drain_stderr(process: subprocess.Popen, tail: Deque[str],
                      progress: tqdm) -> None:
        """Consume FFmpeg stderr so the pipe never blocks."""
        for line in process.stderr:
            line = line.strip()
            if not line:
                continue
            tail.append(line)
            seconds = parse_progress_time(line)
            if seconds is not None and progress.total:
                progress.n = min(round(seconds, 2), progress.total)
                progress.refresh()
        process.stderr.close()
