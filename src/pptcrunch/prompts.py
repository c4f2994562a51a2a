"""Interactive collection of compression settings."""

from typing import Optional

import click
from loguru import logger

from .config import CompressionSettings
from .config import default_config as defaults
from .core.quality import DEFAULT_TIER, normalize_tier
from .core.types import CapabilityReport, Codec, QualityTier
from .formatting import TerminalFormatter

_CODEC_CHOICES = {"1": Codec.H264, "2": Codec.H265}


def _ask_hardware(report: CapabilityReport, no_hardware: bool, assume_yes: bool,
                  fmt: TerminalFormatter) -> bool:
    if not report.hardware_available:
        fmt.print_warning("Hardware acceleration not available - using CPU encoding")
        return False
    if no_hardware:
        return False
    if assume_yes:
        return True
    return click.confirm(
        f"Use {report.accel.label} hardware acceleration for faster encoding?",
        default=True
    )


def _ask_codec(preset: Optional[Codec], assume_yes: bool) -> Codec:
    if preset is not None:
        return preset
    if assume_yes:
        return Codec.H265

    click.echo()
    click.echo("Video codec options:")
    click.echo("  1. H.264 (better compatibility, works on older systems)")
    click.echo("  2. H.265 (smaller files, better compression, newer standard)")
    choice = click.prompt(
        "Enter your choice",
        type=click.Choice(sorted(_CODEC_CHOICES)),
        default="2",
        show_choices=False
    )
    return _CODEC_CHOICES[choice]


def _ask_quality(preset: Optional[int], assume_yes: bool) -> QualityTier:
    if preset is not None:
        return normalize_tier(preset)
    if assume_yes:
        return DEFAULT_TIER

    click.echo()
    click.echo("Quality level options:")
    for tier in QualityTier:
        click.echo(f"  {int(tier)}. {tier.description}")
    answer = click.prompt("Enter your choice (1-3)", default=str(int(DEFAULT_TIER)))
    tier = normalize_tier(answer)
    if answer.strip() != str(int(tier)):
        logger.info(f"Invalid quality choice {answer!r}, using {tier.short_name}")
    return tier


def _parse_width(value: Optional[int]) -> Optional[int]:
    """Widths below 2 mean no limit."""
    if value is None or value < 2:
        return None
    return value


def _ask_max_width(preset: Optional[int], assume_yes: bool) -> Optional[int]:
    if preset is not None:
        return _parse_width(preset)
    if assume_yes:
        return defaults.DEFAULT_MAX_WIDTH

    click.echo()
    reduce = click.confirm(
        f"Reduce high-resolution videos to maximum {defaults.DEFAULT_MAX_WIDTH} pixels wide?",
        default=True
    )
    if reduce:
        return defaults.DEFAULT_MAX_WIDTH

    answer = click.prompt(
        "Enter maximum video width in pixels (blank for no limit)",
        default="",
        show_default=False
    )
    answer = answer.strip()
    if not answer.isdigit():
        return None
    return _parse_width(int(answer))


def collect_settings(
    report: CapabilityReport,
    codec: Optional[Codec] = None,
    quality: Optional[int] = None,
    max_width: Optional[int] = None,
    no_hardware: bool = False,
    assume_yes: bool = False,
    formatter: Optional[TerminalFormatter] = None
) -> CompressionSettings:
    """Ask the user for compression settings.

    Values given on the command line are used without asking. With
    ``assume_yes`` every remaining question takes its default answer.

    Args:
        report: Hardware capability report
        codec: Preselected codec
        quality: Preselected quality tier
        max_width: Preselected maximum width, below 2 for no limit
        no_hardware: Never use hardware encoding
        assume_yes: Accept defaults without prompting
        formatter: Optional terminal formatter

    Returns:
        Compression settings
    """
    fmt = formatter or TerminalFormatter()
    fmt.print_header("Video Compression Settings")

    use_hardware = _ask_hardware(report, no_hardware, assume_yes, fmt)
    if use_hardware and not report.supports_h265:
        fmt.print_warning("Your hardware encoder does not support H.265 - GPU encodes will use H.264")

    chosen = _ask_codec(codec, assume_yes)
    if use_hardware and chosen is Codec.H265 and not report.supports_h265:
        fmt.print_warning("H.265 not supported by your hardware encoder. "
                          "The GPU attempt will use H.264, CPU fallback stays H.265.")

    settings = CompressionSettings(
        use_hardware=use_hardware,
        codec=chosen,
        quality_tier=_ask_quality(quality, assume_yes),
        max_width=_ask_max_width(max_width, assume_yes),
    )
    fmt.print_settings(settings)
    return settings
