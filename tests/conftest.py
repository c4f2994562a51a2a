"""Common test fixtures and utilities."""
import zipfile
from pathlib import Path
from typing import Dict, Iterable, Optional

import pytest

from pptcrunch.config import CompressionSettings, CrunchConfig
from pptcrunch.core.types import CapabilityReport, Codec, HardwareAccel, MediaInfo
from pptcrunch.infrastructure.ffmpeg.runner import build_encode_command
from pptcrunch.infrastructure.hardware.acceleration import GPU_PROFILES

CONTENT_TYPES = (
    '<?xml version="1.0" encoding="UTF-8" standalone="yes"?>\n'
    '<Types xmlns="http://schemas.openxmlformats.org/package/2006/content-types">'
    '<Default Extension="rels" ContentType="application/vnd.openxmlformats-package.relationships+xml"/>'
    '<Default Extension="xml" ContentType="application/xml"/>'
    '<Default Extension="mov" ContentType="video/quicktime"/>'
    '<Default Extension="png" ContentType="image/png"/>'
    '</Types>'
)

SLIDE_RELS = (
    '<?xml version="1.0" encoding="UTF-8" standalone="yes"?>\n'
    '<Relationships xmlns="http://schemas.openxmlformats.org/package/2006/relationships">'
    '<Relationship Id="rId1" Type="http://schemas.openxmlformats.org/officeDocument/2006/relationships/video" '
    'Target="../media/media1.mov"/>'
    '<Relationship Id="rId2" Type="http://schemas.microsoft.com/office/2007/relationships/media" '
    'Target="../media/media1.mov"/>'
    '<Relationship Id="rId3" Type="http://schemas.openxmlformats.org/officeDocument/2006/relationships/image" '
    'Target="../media/image1.png"/>'
    '</Relationships>'
)

SLIDE = (
    '<?xml version="1.0" encoding="UTF-8" standalone="yes"?>\n'
    '<p:sld xmlns:p="http://schemas.openxmlformats.org/presentationml/2006/main">'
    '<p:cSld><p:spTree><p:pic><p:nvPicPr><p:cNvPr id="4" name="media1.mov"/>'
    '</p:nvPicPr></p:pic></p:spTree></p:cSld></p:sld>'
)


class FakeRunner:
    """Stands in for FFmpegRunner; writes an output file of a fixed size."""

    def __init__(self, results: Iterable[bool] = (True,), output_size: int = 100):
        self.results = list(results)
        self.output_size = output_size
        self.commands = []

    def build_encode_command(self, input_path, output_path, parameters,
                             scale_filter, has_audio=True):
        return build_encode_command("ffmpeg", input_path, output_path,
                                    parameters, scale_filter, has_audio)

    def run_encode(self, cmd, duration=None, description="Encoding"):
        self.commands.append(cmd)
        ok = self.results.pop(0) if self.results else True
        # Failed encodes may leave partial output behind
        Path(cmd[-1]).write_bytes(b"\0" * self.output_size)
        return ok


@pytest.fixture
def fake_runner():
    """Factory for runners that fake FFmpeg encodes."""
    return FakeRunner


@pytest.fixture
def temp_dir(tmp_path):
    """Create a temporary directory for tests."""
    return tmp_path


@pytest.fixture
def mock_video_file(temp_dir):
    """Create a mock video file for testing."""
    video_file = temp_dir / "talk.mov"
    video_file.write_bytes(b"\1" * 1000)
    return video_file


@pytest.fixture
def crunch_config(temp_dir):
    """Runtime configuration pointing at placeholder tools."""
    work_dir = temp_dir / "work"
    work_dir.mkdir()
    return CrunchConfig(ffmpeg=Path("ffmpeg"), ffprobe=Path("ffprobe"), work_dir=work_dir)


@pytest.fixture
def software_settings():
    return CompressionSettings(use_hardware=False, codec=Codec.H265)


@pytest.fixture
def hardware_settings():
    return CompressionSettings(use_hardware=True, codec=Codec.H265)


@pytest.fixture
def nvenc_report():
    """Capability report for a modern NVIDIA GPU."""
    return CapabilityReport(
        hardware_available=True,
        supports_h264=True,
        supports_h265=True,
        driver_advanced_features=True,
        accel=HardwareAccel.NVENC,
        gpu_model="NVIDIA GeForce RTX 3070",
        driver_version="535.54",
        generation="RTX 3070 (Ampere)",
        profile=GPU_PROFILES["RTX_30xx"],
    )


@pytest.fixture
def h264_only_report():
    """Capability report for a GPU that only encodes H.264."""
    return CapabilityReport(
        hardware_available=True,
        supports_h264=True,
        supports_h265=False,
        driver_advanced_features=False,
        accel=HardwareAccel.NVENC,
        gpu_model="Quadro P400",
        driver_version="390.12",
        profile=GPU_PROFILES["Default"],
    )


@pytest.fixture
def media_info():
    return MediaInfo(width=3840, height=2160, duration=12.5, has_audio=True)


@pytest.fixture
def make_pptx(temp_dir):
    """Factory building a small presentation archive."""

    def _make(name: str = "deck.pptx", media: Optional[Dict[str, bytes]] = None) -> Path:
        if media is None:
            media = {"media1.mov": b"\1" * 1000, "image1.png": b"\2" * 50}
        path = temp_dir / name
        with zipfile.ZipFile(path, "w") as archive:
            archive.writestr("[Content_Types].xml", CONTENT_TYPES)
            archive.writestr("ppt/slides/slide1.xml", SLIDE)
            archive.writestr("ppt/slides/_rels/slide1.xml.rels", SLIDE_RELS)
            for media_name, content in media.items():
                archive.writestr(f"ppt/media/{media_name}", content)
            archive.writestr("docProps/app.xml", "<Properties/>")
        return path

    return _make
