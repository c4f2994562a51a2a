"""Hardware to software encode fallback."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from loguru import logger

from ..config import CompressionSettings
from ..core.quality import resolve_parameters
from ..core.scaling import scale_dimensions, scale_filter
from ..core.types import (
    CapabilityReport,
    Codec,
    EncodingParameters,
    ExecutionMode,
    MediaInfo,
)
from ..infrastructure.ffmpeg import FFmpegRunner


@dataclass(frozen=True)
class EncodeAttempt:
    """One planned encode.

    Attributes:
        mode: Hardware or software execution
        codec: Codec this attempt produces
        parameters: Resolved encoder parameters
    """
    mode: ExecutionMode
    codec: Codec
    parameters: EncodingParameters

    @property
    def is_hardware(self) -> bool:
        return self.mode is ExecutionMode.HARDWARE

    @property
    def label(self) -> str:
        where = "GPU" if self.is_hardware else "CPU"
        return f"{where} {self.codec.display_name}"


@dataclass
class EncodeResult:
    """Result of running the attempt chain for one file."""
    success: bool
    attempt: Optional[EncodeAttempt] = None
    tried: List[EncodeAttempt] = field(default_factory=list)

    @property
    def used_hardware(self) -> bool:
        return bool(self.attempt and self.attempt.is_hardware)


class FallbackOrchestrator:
    """Plans and runs encode attempts in order until one succeeds."""

    def __init__(self, runner: FFmpegRunner,
                 capabilities: Optional[CapabilityReport] = None):
        """Initialize orchestrator.

        Args:
            runner: FFmpeg runner executing the attempts
            capabilities: Hardware capability report, conservative if omitted
        """
        self.runner = runner
        self.capabilities = capabilities or CapabilityReport.none()

    def _hardware_codec(self, requested: Codec) -> Optional[Codec]:
        if self.capabilities.supports(requested):
            return requested
        if self.capabilities.supports(requested.alternate):
            logger.warning(
                f"{requested.display_name} is not supported in hardware, "
                f"using {requested.alternate.display_name} for the GPU attempt"
            )
            return requested.alternate
        return None

    def plan(self, settings: CompressionSettings) -> List[EncodeAttempt]:
        """Ordered encode attempts for the given settings.

        A hardware attempt comes first only when hardware was requested and
        can encode at least one codec. The software attempt always uses the
        requested codec.

        Args:
            settings: User compression settings

        Returns:
            Attempts in the order they should run
        """
        attempts = []
        if settings.use_hardware and self.capabilities.hardware_available:
            codec = self._hardware_codec(settings.codec)
            if codec is not None:
                attempts.append(EncodeAttempt(
                    mode=ExecutionMode.HARDWARE,
                    codec=codec,
                    parameters=resolve_parameters(
                        settings.quality_tier, codec,
                        ExecutionMode.HARDWARE, self.capabilities
                    )
                ))
        elif settings.use_hardware:
            logger.info("Hardware encoding requested but not available")

        attempts.append(EncodeAttempt(
            mode=ExecutionMode.SOFTWARE,
            codec=settings.codec,
            parameters=resolve_parameters(
                settings.quality_tier, settings.codec, ExecutionMode.SOFTWARE
            )
        ))
        return attempts

    def encode(self, input_path: Path, output_path: Path,
               settings: CompressionSettings,
               media: Optional[MediaInfo] = None) -> EncodeResult:
        """Encode a file, falling back through the planned attempts.

        Partial output of a failed attempt is removed before the next one.

        Args:
            input_path: Source video
            output_path: Destination file
            settings: User compression settings
            media: Probed media info, None if probing failed

        Returns:
            Encode result naming the attempt that succeeded
        """
        if media is not None:
            dimensions = scale_dimensions(media.width, media.height, settings.max_width)
            logger.debug(f"{input_path.name}: {media.width}x{media.height} -> "
                         f"{dimensions[0]}x{dimensions[1]}")
        else:
            dimensions = None
        vf = scale_filter(dimensions, settings.max_width)
        has_audio = media.has_audio if media is not None else True
        duration = media.duration if media is not None else None

        result = EncodeResult(success=False)
        for attempt in self.plan(settings):
            result.tried.append(attempt)
            cmd = self.runner.build_encode_command(
                input_path, output_path, attempt.parameters, vf, has_audio
            )
            logger.info(f"Encoding {input_path.name} with {attempt.parameters.encoder}")
            if self.runner.run_encode(cmd, duration, attempt.label) and output_path.exists():
                result.success = True
                result.attempt = attempt
                return result

            logger.warning(f"{attempt.label} encode of {input_path.name} failed")
            output_path.unlink(missing_ok=True)

        return result
