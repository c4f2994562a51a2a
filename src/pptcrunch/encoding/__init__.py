"""Encode attempt planning and execution."""

from .fallback import EncodeAttempt, EncodeResult, FallbackOrchestrator

__all__ = [
    'EncodeAttempt',
    'EncodeResult',
    'FallbackOrchestrator'
]
