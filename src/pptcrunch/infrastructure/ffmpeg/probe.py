"""Media probing through ffprobe."""

import subprocess
from pathlib import Path
from typing import Any, Dict, Optional

import ffmpeg
from loguru import logger

from ...core.errors import MediaProbeError
from ...core.types import MediaInfo


def _duration(probe: Dict[str, Any], stream: Dict[str, Any]) -> Optional[float]:
    for value in (probe.get("format", {}).get("duration"), stream.get("duration")):
        try:
            duration = float(value)
        except (TypeError, ValueError):
            continue
        if duration > 0:
            return duration
    return None


def probe_media(path: Path, ffprobe: str = "ffprobe",
                timeout: Optional[float] = None) -> MediaInfo:
    """Read dimensions, duration and audio presence of a video.

    Args:
        path: Video file
        ffprobe: ffprobe binary
        timeout: Optional timeout in seconds

    Returns:
        Media information

    Raises:
        MediaProbeError: If ffprobe fails or the file has no video stream
    """
    try:
        probe = ffmpeg.probe(str(path), cmd=str(ffprobe), timeout=timeout)
    except ffmpeg.Error as e:
        stderr = e.stderr.decode(errors="replace") if e.stderr else str(e)
        raise MediaProbeError(f"Failed to probe {path.name}", stderr) from e
    except (subprocess.SubprocessError, OSError) as e:
        raise MediaProbeError(f"Failed to probe {path.name}", str(e)) from e

    streams = probe.get("streams", [])
    video_stream = next(
        (s for s in streams if s.get("codec_type") == "video"), None
    )
    if video_stream is None:
        raise MediaProbeError(f"No video stream found in {path.name}")

    try:
        width = int(video_stream["width"])
        height = int(video_stream["height"])
    except (KeyError, TypeError, ValueError) as e:
        raise MediaProbeError(f"Invalid video dimensions in {path.name}", str(e)) from e

    info = MediaInfo(
        width=width,
        height=height,
        duration=_duration(probe, video_stream),
        has_audio=any(s.get("codec_type") == "audio" for s in streams),
    )
    logger.debug(f"Probed {path.name}: {info}")
    return info
