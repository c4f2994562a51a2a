"""Hardware encoder detection.

Detects which hardware encoders can be used for this run. Currently supports:
- NVIDIA NVENC (queried through nvidia-smi and FFmpeg's encoder list)
- VideoToolbox on macOS

Probing never raises: when a tool is missing, fails or times out, the
conservative report (no hardware) is returned.
"""

import platform
import re
import subprocess
from typing import List, Optional, Set, Tuple

from loguru import logger

from ...config import CrunchConfig
from ...config import default_config as defaults
from ...core.types import CapabilityReport, Codec, GPUProfile, HardwareAccel
from ..ffmpeg.runner import FFmpegRunner

_BOTH = frozenset({Codec.H264, Codec.H265})

GPU_PROFILES = {
    "GTX_1060": GPUProfile("GTX_1060", _BOTH, h265_10bit=False, max_refs=3),
    "GTX_1660": GPUProfile("GTX_1660", _BOTH, h265_10bit=False, max_refs=3),
    "RTX_20xx": GPUProfile("RTX_20xx", _BOTH, h265_10bit=True, max_refs=4),
    "RTX_30xx": GPUProfile("RTX_30xx", _BOTH, h265_10bit=True, max_refs=4),
    "Default": GPUProfile("Default", frozenset({Codec.H264}), h265_10bit=False, max_refs=2),
}

_MODEL_PATTERNS = (
    re.compile(r"GTX(\d{3,4})"),
    re.compile(r"RTX(\d{3,4})"),
)
_DRIVER_PATTERN = re.compile(r"(\d+)\.(\d+)")

_GENERATIONS = {
    10: "GTX {} (Pascal)",
    16: "GTX {} (Turing)",
    20: "RTX {} (Turing)",
    30: "RTX {} (Ampere)",
    40: "RTX {} (Ada Lovelace)",
    50: "RTX {} (Blackwell)",
}


def _normalize_model(model: str) -> str:
    return model.upper().replace(" ", "")


def _model_number(model: str) -> Optional[int]:
    for pattern in _MODEL_PATTERNS:
        match = pattern.search(model)
        if match:
            return int(match.group(1))
    return None


def classify_gpu(model: str) -> GPUProfile:
    """Map a GPU model name to a capability profile.

    Unrecognized models get the minimal ``Default`` profile.

    Args:
        model: GPU model as reported by nvidia-smi (e.g. "NVIDIA GeForce RTX 3070")

    Returns:
        GPU capability profile
    """
    key = _normalize_model(model)
    number = _model_number(key)

    if number is not None and number >= 1000:
        generation = number // 100
        if "GTX" in key and generation == 10:
            return GPU_PROFILES["GTX_1060"]
        if "GTX" in key and generation == 16:
            return GPU_PROFILES["GTX_1660"]
        if "RTX" in key and generation == 20:
            return GPU_PROFILES["RTX_20xx"]
        if "RTX" in key and generation >= 30:
            return GPU_PROFILES["RTX_30xx"]

    if "TITANRTX" in key:
        return GPU_PROFILES["RTX_20xx"]

    return GPU_PROFILES["Default"]


def describe_generation(model: str) -> str:
    """Human readable generation name for a GPU model."""
    key = _normalize_model(model)
    number = _model_number(key)
    if number is not None:
        generation = number // 100
        if generation in _GENERATIONS:
            return _GENERATIONS[generation].format(number)
        if generation >= 60:
            return f"RTX {number} (Future Gen)"
        return f"GPU {number} (Unknown Gen)"

    if "TITAN" in key:
        if "RTX" in key:
            return "Titan RTX (Turing)"
        if "TITANV" in key:
            return "Titan V (Volta)"
        if "TITANX" in key:
            return "Titan X (Pascal)"
        return "Titan (Pascal+)"

    if "QUADRO" in key or ("RTX" in key and ("PRO" in key or re.search(r"RTXA\d", key))):
        return "Professional (Workstation)"

    return "Unknown Generation"


def parse_driver_version(text: str) -> Optional[Tuple[int, int]]:
    """Extract (major, minor) from a driver version string like "472.12"."""
    match = _DRIVER_PATTERN.search(text or "")
    if not match:
        return None
    return int(match.group(1)), int(match.group(2))


def driver_supports_advanced(version: str) -> bool:
    """Whether the NVIDIA driver supports tune/multipass vbr refinements."""
    parsed = parse_driver_version(version)
    if parsed is None:
        return False
    return parsed >= defaults.MIN_ADVANCED_DRIVER


class HardwareManager:
    """Manages hardware encoder detection.

    The detection result is cached to avoid repeated system calls.
    """

    def __init__(self, config: Optional[CrunchConfig] = None,
                 runner: Optional[FFmpegRunner] = None):
        """Initialize hardware manager.

        Args:
            config: Optional runtime configuration with tool paths
            runner: FFmpeg runner used to list compiled-in encoders
        """
        self._config = config or CrunchConfig()
        self._runner = runner or FFmpegRunner(self._config)
        self._report: Optional[CapabilityReport] = None

    def probe(self) -> CapabilityReport:
        """Detect hardware encoding capabilities.

        Returns:
            Capability report, conservative if anything goes wrong
        """
        if self._report is not None:
            logger.debug(f"Using cached capability report: {self._report.accel.name}")
            return self._report

        try:
            self._report = self._detect()
        except Exception as e:
            logger.warning(f"Hardware detection failed: {e}")
            self._report = CapabilityReport.none()
        return self._report

    def _detect(self) -> CapabilityReport:
        encoders = self._runner.list_encoders()

        gpu = self._query_nvidia_gpu()
        if gpu is not None:
            report = self._nvenc_report(gpu[0], gpu[1], encoders)
            if report.hardware_available:
                return report
            logger.info(f"NVIDIA GPU {gpu[0]} found but NVENC is unusable")
            fallback = report
        else:
            fallback = CapabilityReport.none()

        if platform.system() == "Darwin":
            report = self._videotoolbox_report(encoders)
            if report.hardware_available:
                return report

        logger.info("No supported hardware encoder found")
        return fallback

    def _nvenc_report(self, model: str, driver: str, encoders: Set[str]) -> CapabilityReport:
        profile = classify_gpu(model)
        supports_h264 = "h264_nvenc" in encoders and Codec.H264 in profile.supported_codecs
        supports_h265 = (
            ("hevc_nvenc" in encoders or "h265_nvenc" in encoders)
            and Codec.H265 in profile.supported_codecs
        )
        advanced = driver_supports_advanced(driver)
        logger.debug(
            f"NVIDIA GPU: model={model} driver={driver} profile={profile.name} "
            f"h264={supports_h264} h265={supports_h265} advanced={advanced}"
        )
        return CapabilityReport(
            hardware_available=supports_h264 or supports_h265,
            supports_h264=supports_h264,
            supports_h265=supports_h265,
            driver_advanced_features=advanced,
            accel=HardwareAccel.NVENC,
            gpu_model=model,
            driver_version=driver,
            generation=describe_generation(model),
            profile=profile,
        )

    def _videotoolbox_report(self, encoders: Set[str]) -> CapabilityReport:
        supports_h264 = "h264_videotoolbox" in encoders
        supports_h265 = "hevc_videotoolbox" in encoders
        machine = platform.machine().lower()
        generation = "Apple silicon" if machine in ("arm64", "aarch64") else "Intel macOS"
        return CapabilityReport(
            hardware_available=supports_h264 or supports_h265,
            supports_h264=supports_h264,
            supports_h265=supports_h265,
            accel=HardwareAccel.VIDEOTOOLBOX,
            generation=generation,
        )

    def _query_nvidia_gpu(self) -> Optional[Tuple[str, str]]:
        """Query GPU model and driver version from nvidia-smi.

        Returns:
            Tuple of (model, driver version) or None if no GPU is reported
        """
        output = self._run([
            self._config.nvidia_smi,
            "--query-gpu=name,driver_version",
            "--format=csv,noheader,nounits"
        ])
        if not output or not output.strip():
            return None

        first = output.strip().splitlines()[0]
        parts = [part.strip() for part in first.split(",")]
        if len(parts) < 2 or not parts[0]:
            logger.debug(f"Unparsable nvidia-smi output: {first}")
            return None
        return parts[0], parts[1]

    def _run(self, cmd: List[str]) -> Optional[str]:
        """Run a probe command, returning stdout or None on any failure."""
        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                check=True,
                timeout=self._config.probe_timeout
            )
            return result.stdout
        except FileNotFoundError:
            logger.debug(f"{cmd[0]} not found")
        except subprocess.SubprocessError as e:
            logger.debug(f"Probe command failed: {e}")
        except OSError as e:
            logger.debug(f"Could not run {cmd[0]}: {e}")
        return None
