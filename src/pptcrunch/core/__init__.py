"""Core encoding policy: types, parameter table, scaling and size decision."""

from .types import (
    CapabilityReport,
    Codec,
    CompressionOutcome,
    EncodingParameters,
    ExecutionMode,
    GPUProfile,
    HardwareAccel,
    MediaInfo,
    OutcomeStatus,
    QualityTier,
)
from .quality import resolve_parameters, normalize_tier
from .scaling import scale_dimensions, scale_filter
from .decision import should_keep_encoded, settle_outcome

__all__ = [
    "CapabilityReport",
    "Codec",
    "CompressionOutcome",
    "EncodingParameters",
    "ExecutionMode",
    "GPUProfile",
    "HardwareAccel",
    "MediaInfo",
    "OutcomeStatus",
    "QualityTier",
    "resolve_parameters",
    "normalize_tier",
    "scale_dimensions",
    "scale_filter",
    "should_keep_encoded",
    "settle_outcome",
]
