"""Keep-smaller decision for encoded files."""

from pathlib import Path
from typing import Optional

from loguru import logger

from .types import Codec, CompressionOutcome, OutcomeStatus

REASON_COMPRESSED = "compressed"
REASON_NOT_SMALLER = "not smaller"
REASON_FAILED = "encode failed"


def should_keep_encoded(original_size: int, final_size: int) -> bool:
    """Return True if the encoded file should replace the original."""
    return final_size < original_size


def failed_outcome(source: Path, reason: str = REASON_FAILED) -> CompressionOutcome:
    """Outcome for a file whose encode did not produce usable output."""
    size = source.stat().st_size if source.exists() else 0
    return CompressionOutcome(
        source_name=source.name,
        final_name=source.name,
        original_size=size,
        final_size=size,
        reason=reason,
        status=OutcomeStatus.FAILED,
    )


def settle_outcome(
    source: Path,
    encoded: Path,
    used_hardware: bool,
    codec: Optional[Codec] = None
) -> CompressionOutcome:
    """Apply the size decision to an encoded artifact.

    The encoded file is kept only if it is smaller than the source. Otherwise
    it is deleted and the source is left untouched.

    Args:
        source: Original file
        encoded: Encoded output file
        used_hardware: Whether the encode ran in hardware
        codec: Codec of the encoded file

    Returns:
        Compression outcome
    """
    original_size = source.stat().st_size
    if not encoded.exists():
        return failed_outcome(source)

    encoded_size = encoded.stat().st_size
    if should_keep_encoded(original_size, encoded_size):
        return CompressionOutcome(
            source_name=source.name,
            final_name=encoded.name,
            original_size=original_size,
            final_size=encoded_size,
            used_hardware=used_hardware,
            size_reduced=True,
            reason=REASON_COMPRESSED,
            status=OutcomeStatus.COMPRESSED,
            codec=codec,
        )

    logger.debug(f"Discarding {encoded}: {encoded_size} >= {original_size} bytes")
    encoded.unlink()
    return CompressionOutcome(
        source_name=source.name,
        final_name=source.name,
        original_size=original_size,
        final_size=original_size,
        used_hardware=used_hardware,
        size_reduced=False,
        reason=REASON_NOT_SMALLER,
        status=OutcomeStatus.KEPT_ORIGINAL,
        codec=codec,
    )
