"""Tests for configuration models."""

import sys

import pytest
from loguru import logger
from pydantic import ValidationError

from pptcrunch.config import CompressionSettings, CrunchConfig
from pptcrunch.core.types import Codec, QualityTier


@pytest.fixture
def restore_logger():
    yield
    logger.remove()
    logger.add(sys.stderr)


def test_config_defaults():
    config = CrunchConfig()
    assert config.log_level == "WARNING"
    assert config.encode_timeout > 0
    assert config.work_dir is None


def test_config_normalizes_log_level():
    assert CrunchConfig(log_level="debug").log_level == "DEBUG"


def test_config_rejects_unknown_log_level():
    with pytest.raises(ValidationError):
        CrunchConfig(log_level="LOUD")


def test_config_rejects_non_positive_timeout():
    with pytest.raises(ValidationError):
        CrunchConfig(encode_timeout=0)


def test_setup_logging_writes_file(temp_dir, restore_logger):
    log_file = temp_dir / "run.log"
    config = CrunchConfig(log_level="WARNING", log_file=log_file)

    config.setup_logging()
    logger.debug("detail for the file")
    logger.remove()

    assert "detail for the file" in log_file.read_text(encoding="utf-8")


def test_settings_defaults():
    settings = CompressionSettings()
    assert not settings.use_hardware
    assert settings.codec is Codec.H265
    assert settings.quality_tier is QualityTier.BALANCED
    assert settings.max_width == 1920


def test_settings_width_limits():
    assert CompressionSettings(max_width=None).describe_width() == "No limit"
    assert CompressionSettings(max_width=1280).describe_width() == "1280 pixels"
    with pytest.raises(ValidationError):
        CompressionSettings(max_width=1)
