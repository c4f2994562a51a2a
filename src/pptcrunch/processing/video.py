"""Standalone video processing."""

from pathlib import Path
from typing import Optional

from loguru import logger

from ..config import CompressionSettings, CrunchConfig
from ..config import default_config as defaults
from ..core.decision import failed_outcome, settle_outcome
from ..core.errors import CrunchError, MediaProbeError
from ..core.types import Codec, CompressionOutcome, MediaInfo
from ..encoding import FallbackOrchestrator
from ..formatting import TerminalFormatter
from ..infrastructure.ffmpeg import probe_media
from .files import validate_input_file


def video_output_path(path: Path, quality_value: int, codec: Codec) -> Path:
    """Output path next to the input, e.g. ``talk - Q24H265.mp4``."""
    return path.with_name(f"{path.stem} - Q{quality_value}{codec.tag}{defaults.OUTPUT_EXTENSION}")


def probe_or_none(path: Path, config: CrunchConfig) -> Optional[MediaInfo]:
    """Probe a video, returning None so callers can use an expression scale filter."""
    try:
        return probe_media(path, str(config.ffprobe), config.probe_timeout)
    except MediaProbeError as e:
        logger.warning(f"{e.message}, scaling without known dimensions")
        if e.details:
            logger.debug(e.details)
        return None


class VideoProcessor:
    """Compresses standalone video files next to their originals."""

    def __init__(self, orchestrator: FallbackOrchestrator,
                 config: Optional[CrunchConfig] = None,
                 formatter: Optional[TerminalFormatter] = None):
        """Initialize processor.

        Args:
            orchestrator: Encode fallback orchestrator
            config: Optional runtime configuration
            formatter: Optional terminal formatter
        """
        self.orchestrator = orchestrator
        self.config = config or CrunchConfig()
        self.fmt = formatter or TerminalFormatter()

    def process(self, path: Path, settings: CompressionSettings) -> CompressionOutcome:
        """Compress one video.

        The encoded file is kept only when it is smaller than the input.

        Args:
            path: Input video
            settings: Compression settings

        Returns:
            Terminal outcome for the file
        """
        self.fmt.print_header(f"Video: {path.name}")
        try:
            validate_input_file(path, defaults.VIDEO_EXTENSIONS)
            outcome = self._compress(path, settings)
        except (FileNotFoundError, PermissionError, ValueError) as e:
            outcome = failed_outcome(path, str(e))
        except (CrunchError, OSError) as e:
            logger.error(f"Error processing {path.name}: {e}")
            outcome = failed_outcome(path, f"error: {e}")

        self.fmt.print_outcome(outcome)
        return outcome

    def _compress(self, path: Path, settings: CompressionSettings) -> CompressionOutcome:
        first = self.orchestrator.plan(settings)[0]
        output = video_output_path(path, first.parameters.quality_value, first.codec)
        self.fmt.print_path("Input: ", path)
        self.fmt.print_path("Output:", output)

        media = probe_or_none(path, self.config)
        result = self.orchestrator.encode(path, output, settings, media)
        if not result.success:
            return failed_outcome(path)

        return settle_outcome(path, output, result.used_hardware, result.attempt.codec)
