"""FFmpeg subprocess boundary."""

from pptcrunch.infrastructure.ffmpeg.runner import (
    FFmpegRunner,
    build_encode_command,
    parse_encoder_list,
    parse_progress_time,
)
from pptcrunch.infrastructure.ffmpeg.probe import probe_media

__all__ = [
    'FFmpegRunner',
    'build_encode_command',
    'parse_encoder_list',
    'parse_progress_time',
    'probe_media',
]
