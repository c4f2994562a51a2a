"""Common types for video compression."""

from dataclasses import dataclass, field
from enum import Enum, IntEnum, auto
from typing import FrozenSet, Optional


class QualityTier(IntEnum):
    """User-selected quality tier."""
    SMALLEST = 1
    BALANCED = 2
    HIGHEST = 3

    @property
    def short_name(self) -> str:
        return self.name.lower()

    @property
    def description(self) -> str:
        return _TIER_DESCRIPTIONS[self]


_TIER_DESCRIPTIONS = {
    QualityTier.SMALLEST: "Smallest file with passable quality",
    QualityTier.BALANCED: "Balanced with good quality",
    QualityTier.HIGHEST: "Quality indistinguishable from source, bigger file",
}


class Codec(Enum):
    """Output video codec."""
    H264 = "h264"
    H265 = "h265"

    @property
    def software_encoder(self) -> str:
        return "libx264" if self is Codec.H264 else "libx265"

    @property
    def nvenc_encoder(self) -> str:
        return "h264_nvenc" if self is Codec.H264 else "hevc_nvenc"

    @property
    def videotoolbox_encoder(self) -> str:
        return "h264_videotoolbox" if self is Codec.H264 else "hevc_videotoolbox"

    @property
    def display_name(self) -> str:
        return "H.264" if self is Codec.H264 else "H.265"

    @property
    def tag(self) -> str:
        """Codec tag used in output filenames."""
        return self.name

    @property
    def alternate(self) -> "Codec":
        return Codec.H265 if self is Codec.H264 else Codec.H264


class ExecutionMode(Enum):
    """Where an encode runs."""
    HARDWARE = auto()
    SOFTWARE = auto()


class HardwareAccel(Enum):
    """Supported hardware encoder families."""
    NONE = auto()
    NVENC = auto()
    VIDEOTOOLBOX = auto()

    @property
    def label(self) -> str:
        return _ACCEL_LABELS[self]


_ACCEL_LABELS = {
    HardwareAccel.NONE: "None",
    HardwareAccel.NVENC: "NVIDIA NVENC",
    HardwareAccel.VIDEOTOOLBOX: "Apple VideoToolbox",
}


class OutcomeStatus(Enum):
    """Terminal state of a processed file."""
    COMPRESSED = "compressed"
    KEPT_ORIGINAL = "kept-original"
    FAILED = "failed"


@dataclass(frozen=True)
class EncodingParameters:
    """Fully resolved encoder knobs for a single encode attempt.

    Attributes:
        encoder: FFmpeg encoder name (e.g. libx265, hevc_nvenc)
        quality_flag: FFmpeg option carrying the quality value (-crf, -cq, -q:v)
        quality_value: Quality value for ``quality_flag``
        preset: Encoder speed preset
        rate_control: Rate control mode (crf, vbr, cq)
        profile: Codec profile
        tune: Optional tuning mode (hardware only, driver dependent)
        multipass: Optional multipass mode (hardware only, driver dependent)
        b_frames: Optional B-frame count
        reference_frames: Optional reference frame count
        codec_tag: Optional container codec tag (hvc1 for H.265)
    """
    encoder: str
    quality_flag: str
    quality_value: int
    preset: str
    rate_control: str
    profile: str
    tune: Optional[str] = None
    multipass: Optional[int] = None
    b_frames: Optional[int] = None
    reference_frames: Optional[int] = None
    codec_tag: Optional[str] = None


@dataclass(frozen=True)
class GPUProfile:
    """Coarse capability class for a GPU model family."""
    name: str
    supported_codecs: FrozenSet[Codec]
    h265_10bit: bool
    max_refs: int


@dataclass(frozen=True)
class CapabilityReport:
    """Snapshot of what the current environment can encode in hardware.

    Attributes:
        hardware_available: Whether a usable hardware encoder was found
        supports_h264: Whether H.264 can be encoded in hardware
        supports_h265: Whether H.265 can be encoded in hardware
        driver_advanced_features: Whether the driver supports tune/multipass
        accel: Hardware encoder family
        gpu_model: GPU model string as reported by the driver tool
        driver_version: Driver version string
        generation: Human readable GPU generation
        profile: Capability class of the GPU, if any
    """
    hardware_available: bool = False
    supports_h264: bool = False
    supports_h265: bool = False
    driver_advanced_features: bool = False
    accel: HardwareAccel = HardwareAccel.NONE
    gpu_model: str = ""
    driver_version: str = ""
    generation: str = ""
    profile: Optional[GPUProfile] = None

    @classmethod
    def none(cls) -> "CapabilityReport":
        """Conservative report: nothing is available."""
        return cls()

    def supports(self, codec: Codec) -> bool:
        if not self.hardware_available:
            return False
        return self.supports_h264 if codec is Codec.H264 else self.supports_h265


@dataclass(frozen=True)
class MediaInfo:
    """Probed properties of an input video."""
    width: int
    height: int
    duration: Optional[float] = None
    has_audio: bool = True


@dataclass
class CompressionOutcome:
    """Result of processing one video.

    Attributes:
        source_name: File name of the input video
        final_name: File name that ends up in use (encoded or original)
        original_size: Input size in bytes
        final_size: Size in bytes of the file that ends up in use
        used_hardware: Whether the successful attempt ran in hardware
        size_reduced: Whether the encoded file replaced the original
        reason: Short explanation of the outcome
        status: Terminal state
    """
    source_name: str
    final_name: str
    original_size: int
    final_size: int
    used_hardware: bool = False
    size_reduced: bool = False
    reason: str = ""
    status: OutcomeStatus = OutcomeStatus.FAILED
    codec: Optional[Codec] = field(default=None, compare=False)

    @property
    def saved_bytes(self) -> int:
        return self.original_size - self.final_size

    @property
    def method(self) -> str:
        if self.status is not OutcomeStatus.COMPRESSED:
            return "Original"
        return "GPU" if self.used_hardware else "CPU"
