"""Encoding parameter selection.

Encoder knobs are looked up from a static table keyed by quality tier, codec
and execution mode. Hardware parameters are further refined by the capability
report (driver features, reference frame limits, encoder family).
"""

from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Mapping, Optional, Tuple

from loguru import logger

from .types import (
    CapabilityReport,
    Codec,
    EncodingParameters,
    ExecutionMode,
    HardwareAccel,
    QualityTier,
)

DEFAULT_TIER = QualityTier.BALANCED


@dataclass(frozen=True)
class _TierKnobs:
    crf: int
    software_preset: str
    cq: int
    hardware_preset: str
    vt_quality: int


@dataclass(frozen=True)
class _CodecKnobs:
    profile: str
    b_frames: Optional[int]
    reference_frames: Optional[int]
    codec_tag: Optional[str]


QUALITY_TABLE: Mapping[Tuple[QualityTier, Codec], _TierKnobs] = MappingProxyType({
    (QualityTier.SMALLEST, Codec.H264): _TierKnobs(26, "medium", 26, "slow", 45),
    (QualityTier.SMALLEST, Codec.H265): _TierKnobs(25, "medium", 28, "slow", 45),
    (QualityTier.BALANCED, Codec.H264): _TierKnobs(22, "medium", 22, "slow", 55),
    (QualityTier.BALANCED, Codec.H265): _TierKnobs(24, "medium", 26, "slow", 55),
    (QualityTier.HIGHEST, Codec.H264): _TierKnobs(20, "slow", 20, "slow", 65),
    (QualityTier.HIGHEST, Codec.H265): _TierKnobs(22, "slow", 23, "slow", 65),
})

CODEC_TABLE: Mapping[Tuple[Codec, ExecutionMode], _CodecKnobs] = MappingProxyType({
    (Codec.H264, ExecutionMode.HARDWARE): _CodecKnobs("high", 3, 4, None),
    (Codec.H264, ExecutionMode.SOFTWARE): _CodecKnobs("high", None, None, None),
    (Codec.H265, ExecutionMode.HARDWARE): _CodecKnobs("main", 3, 3, "hvc1"),
    (Codec.H265, ExecutionMode.SOFTWARE): _CodecKnobs("main", None, None, "hvc1"),
})

HARDWARE_RATE_CONTROL = "vbr"
ADVANCED_TUNE = "hq"
ADVANCED_MULTIPASS = 2


def normalize_tier(value: Any) -> QualityTier:
    """Map user input to a quality tier.

    Anything that is not exactly 1, 2 or 3 falls back to the balanced tier.

    Args:
        value: Tier as enum, int or numeric string

    Returns:
        Quality tier
    """
    if isinstance(value, QualityTier):
        return value
    if isinstance(value, str) and value.strip().isdigit():
        value = int(value.strip())
    if isinstance(value, int) and not isinstance(value, bool):
        try:
            return QualityTier(value)
        except ValueError:
            pass
    logger.debug(f"Unknown quality tier {value!r}, using {DEFAULT_TIER.short_name}")
    return DEFAULT_TIER


def tier_label(tier: QualityTier) -> str:
    return f"{int(tier)} ({tier.short_name}): {tier.description}"


def resolve_parameters(
    tier: Any,
    codec: Codec,
    mode: ExecutionMode,
    capabilities: Optional[CapabilityReport] = None
) -> EncodingParameters:
    """Resolve encoder parameters for one encode attempt.

    Args:
        tier: Quality tier (unknown values fall back to balanced)
        codec: Output codec
        mode: Hardware or software execution
        capabilities: Optional capability report refining hardware knobs

    Returns:
        Fully resolved encoding parameters
    """
    tier = normalize_tier(tier)
    knobs = QUALITY_TABLE[(tier, codec)]
    codec_knobs = CODEC_TABLE[(codec, mode)]

    if mode is ExecutionMode.SOFTWARE:
        return EncodingParameters(
            encoder=codec.software_encoder,
            quality_flag="-crf",
            quality_value=knobs.crf,
            preset=knobs.software_preset,
            rate_control="crf",
            profile=codec_knobs.profile,
            codec_tag=codec_knobs.codec_tag,
        )

    accel = capabilities.accel if capabilities else HardwareAccel.NVENC
    if accel is HardwareAccel.VIDEOTOOLBOX:
        # VideoToolbox has no preset, B-frame or reference frame controls
        return EncodingParameters(
            encoder=codec.videotoolbox_encoder,
            quality_flag="-q:v",
            quality_value=knobs.vt_quality,
            preset="default",
            rate_control="cq",
            profile=codec_knobs.profile,
            codec_tag=codec_knobs.codec_tag,
        )

    advanced = bool(capabilities and capabilities.driver_advanced_features)
    refs = codec_knobs.reference_frames
    if refs is not None and capabilities and capabilities.profile:
        refs = min(refs, capabilities.profile.max_refs)

    return EncodingParameters(
        encoder=codec.nvenc_encoder,
        quality_flag="-cq",
        quality_value=knobs.cq,
        preset=knobs.hardware_preset,
        rate_control=HARDWARE_RATE_CONTROL,
        profile=codec_knobs.profile,
        tune=ADVANCED_TUNE if advanced else None,
        multipass=ADVANCED_MULTIPASS if advanced else None,
        b_frames=codec_knobs.b_frames,
        reference_frames=refs,
        codec_tag=codec_knobs.codec_tag,
    )
