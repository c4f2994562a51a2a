"""Default configuration values."""

import os
import shutil
from pathlib import Path

# Try to find ffmpeg/ffprobe in $HOME/ffmpeg first, fallback to system
HOME_FFMPEG_DIR = Path.home() / "ffmpeg"
if (HOME_FFMPEG_DIR / "ffmpeg").exists() and (HOME_FFMPEG_DIR / "ffprobe").exists():
    FFMPEG = HOME_FFMPEG_DIR / "ffmpeg"
    FFPROBE = HOME_FFMPEG_DIR / "ffprobe"
else:
    FFMPEG = Path(shutil.which("ffmpeg") or "ffmpeg")
    FFPROBE = Path(shutil.which("ffprobe") or "ffprobe")

FFMPEG = Path(os.getenv("PPTCRUNCH_FFMPEG", str(FFMPEG)))
FFPROBE = Path(os.getenv("PPTCRUNCH_FFPROBE", str(FFPROBE)))
NVIDIA_SMI = "nvidia-smi"

# Timeouts in seconds
ENCODE_TIMEOUT = 60 * 60  # per encode attempt
PROBE_TIMEOUT = 10

# Compression defaults
DEFAULT_MAX_WIDTH = 1920
DEFAULT_QUALITY_TIER = 2

# vbr tuning (tune/multipass) needs driver 416.34 or newer
MIN_ADVANCED_DRIVER = (416, 34)

# File handling
PRESENTATION_EXTENSIONS = (".pptx",)
VIDEO_EXTENSIONS = (
    ".mp4", ".mpeg4", ".mov", ".avi", ".mkv",
    ".webm", ".wmv", ".flv", ".m4v", ".mpg",
    ".mpeg", ".3gp", ".3g2", ".asf", ".ogv",
)
ARCHIVE_VIDEO_EXTENSIONS = (".mp4", ".mpeg4", ".mov")
ARCHIVE_MEDIA_DIR = "ppt/media"
ARCHIVE_OUTPUT_SUFFIX = "-shrunk"
OUTPUT_EXTENSION = ".mp4"

# Logging
LOG_LEVEL = "WARNING"
LOG_ROTATION = "10 MB"
LOG_RETENTION = "1 week"
