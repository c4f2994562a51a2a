"""Tests for encoding parameter selection."""

import pytest

from pptcrunch.core.quality import normalize_tier, resolve_parameters, tier_label
from pptcrunch.core.types import (
    CapabilityReport,
    Codec,
    ExecutionMode,
    HardwareAccel,
    QualityTier,
)


def test_software_h265_balanced():
    """Test balanced H.265 software parameters."""
    params = resolve_parameters(QualityTier.BALANCED, Codec.H265, ExecutionMode.SOFTWARE)
    assert params.encoder == "libx265"
    assert params.quality_flag == "-crf"
    assert params.quality_value == 24
    assert params.preset == "medium"
    assert params.rate_control == "crf"
    assert params.profile == "main"
    assert params.codec_tag == "hvc1"
    assert params.tune is None
    assert params.b_frames is None


def test_software_h264_highest():
    """Test highest quality H.264 software parameters."""
    params = resolve_parameters(3, Codec.H264, ExecutionMode.SOFTWARE)
    assert params.encoder == "libx264"
    assert params.quality_value == 20
    assert params.preset == "slow"
    assert params.profile == "high"
    assert params.codec_tag is None


@pytest.mark.parametrize("tier,codec,expected", [
    (1, Codec.H264, 26),
    (2, Codec.H264, 22),
    (3, Codec.H264, 20),
    (1, Codec.H265, 28),
    (2, Codec.H265, 26),
    (3, Codec.H265, 23),
])
def test_hardware_quality_values(tier, codec, expected):
    """Test NVENC constant quality values per tier."""
    params = resolve_parameters(tier, codec, ExecutionMode.HARDWARE)
    assert params.quality_flag == "-cq"
    assert params.quality_value == expected
    assert params.preset == "slow"
    assert params.rate_control == "vbr"


def test_hardware_advanced_driver(nvenc_report):
    """Test tune and multipass are set for recent drivers."""
    params = resolve_parameters(2, Codec.H264, ExecutionMode.HARDWARE, nvenc_report)
    assert params.encoder == "h264_nvenc"
    assert params.tune == "hq"
    assert params.multipass == 2
    assert params.b_frames == 3
    assert params.reference_frames == 4


def test_hardware_basic_driver_omits_refinements():
    """Test old drivers get plain vbr without tune or multipass."""
    report = CapabilityReport(hardware_available=True, supports_h264=True,
                              accel=HardwareAccel.NVENC)
    params = resolve_parameters(2, Codec.H264, ExecutionMode.HARDWARE, report)
    assert params.tune is None
    assert params.multipass is None
    assert params.rate_control == "vbr"


def test_hardware_refs_capped_by_profile(h264_only_report):
    """Test reference frames never exceed the GPU profile limit."""
    params = resolve_parameters(2, Codec.H264, ExecutionMode.HARDWARE, h264_only_report)
    assert params.reference_frames == 2


def test_hardware_h265_tag(nvenc_report):
    params = resolve_parameters(1, Codec.H265, ExecutionMode.HARDWARE, nvenc_report)
    assert params.encoder == "hevc_nvenc"
    assert params.codec_tag == "hvc1"
    assert params.reference_frames == 3


def test_videotoolbox_parameters():
    """Test VideoToolbox uses -q:v without NVENC knobs."""
    report = CapabilityReport(hardware_available=True, supports_h264=True,
                              supports_h265=True, accel=HardwareAccel.VIDEOTOOLBOX)
    params = resolve_parameters(3, Codec.H265, ExecutionMode.HARDWARE, report)
    assert params.encoder == "hevc_videotoolbox"
    assert params.quality_flag == "-q:v"
    assert params.quality_value == 65
    assert params.b_frames is None
    assert params.reference_frames is None
    assert params.tune is None


@pytest.mark.parametrize("tier", [0, 4, -1, 99, None, "high", 2.5, True, "7"])
def test_unknown_tier_falls_back_to_balanced(tier):
    """Test unknown tiers resolve to the balanced parameters."""
    for mode in ExecutionMode:
        for codec in Codec:
            assert resolve_parameters(tier, codec, mode) == resolve_parameters(2, codec, mode)


def test_normalize_tier():
    assert normalize_tier(QualityTier.HIGHEST) is QualityTier.HIGHEST
    assert normalize_tier(1) is QualityTier.SMALLEST
    assert normalize_tier(" 3 ") is QualityTier.HIGHEST
    assert normalize_tier("") is QualityTier.BALANCED


def test_resolve_is_deterministic(nvenc_report):
    first = resolve_parameters(1, Codec.H265, ExecutionMode.HARDWARE, nvenc_report)
    second = resolve_parameters(1, Codec.H265, ExecutionMode.HARDWARE, nvenc_report)
    assert first == second


def test_tier_label():
    assert tier_label(QualityTier.BALANCED).startswith("2 (balanced)")
