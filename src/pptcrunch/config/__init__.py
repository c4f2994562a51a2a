"""Configuration module for pptcrunch settings and defaults."""

from .config import CompressionSettings, CrunchConfig
from . import default_config

__all__ = ["CompressionSettings", "CrunchConfig", "default_config"]
