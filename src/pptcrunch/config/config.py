"""Configuration models for pptcrunch."""

import sys
from pathlib import Path
from typing import Optional

from loguru import logger
from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..core.types import Codec, QualityTier
from . import default_config as defaults


class CrunchConfig(BaseModel):
    """Runtime configuration: tool paths, timeouts and logging."""

    model_config = ConfigDict(
        arbitrary_types_allowed=True,
        validate_default=True,
        str_strip_whitespace=True,
        validate_assignment=True
    )

    # Paths
    ffmpeg: Path = Field(
        default_factory=lambda: defaults.FFMPEG,
        description="FFmpeg binary path"
    )
    ffprobe: Path = Field(
        default_factory=lambda: defaults.FFPROBE,
        description="FFprobe binary path"
    )
    nvidia_smi: str = Field(
        default=defaults.NVIDIA_SMI,
        description="NVIDIA diagnostic tool"
    )
    work_dir: Optional[Path] = Field(
        default=None,
        description="Parent directory for temporary working directories"
    )

    # Timeouts
    encode_timeout: float = Field(
        default=defaults.ENCODE_TIMEOUT,
        gt=0,
        description="Seconds before an encode attempt is killed"
    )
    probe_timeout: float = Field(
        default=defaults.PROBE_TIMEOUT,
        gt=0,
        description="Seconds allowed for capability probe commands"
    )

    # Logging
    log_level: str = Field(
        default=defaults.LOG_LEVEL,
        description="Logging level"
    )
    log_file: Optional[Path] = Field(
        default=None,
        description="Log file path"
    )

    @field_validator("log_level")
    @classmethod
    def _check_log_level(cls, value: str) -> str:
        value = value.upper()
        if value not in ("TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Unknown log level: {value}")
        return value

    def setup_logging(self) -> None:
        """Configure loguru sinks based on settings."""
        logger.remove()  # Remove default handler

        logger.add(
            sink=sys.stderr,
            level=self.log_level,
            format="<level>{level}</level> | "
                   "<cyan>{name}</cyan>:<cyan>{function}</cyan>:"
                   "<cyan>{line}</cyan> - <level>{message}</level>"
        )

        if self.log_file:
            logger.add(
                sink=str(self.log_file),
                level="DEBUG",
                rotation=defaults.LOG_ROTATION,
                retention=defaults.LOG_RETENTION
            )


class CompressionSettings(BaseModel):
    """User choices for a compression run."""

    model_config = ConfigDict(validate_assignment=True)

    use_hardware: bool = Field(
        default=False,
        description="Try hardware encoding before software"
    )
    codec: Codec = Field(
        default=Codec.H265,
        description="Requested output codec"
    )
    quality_tier: QualityTier = Field(
        default=QualityTier(defaults.DEFAULT_QUALITY_TIER),
        description="Quality tier (1 smallest, 2 balanced, 3 highest)"
    )
    max_width: Optional[int] = Field(
        default=defaults.DEFAULT_MAX_WIDTH,
        ge=2,
        description="Maximum output width in pixels, None for no limit"
    )

    def describe_width(self) -> str:
        return "No limit" if self.max_width is None else f"{self.max_width} pixels"
