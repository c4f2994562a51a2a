"""Hardware acceleration package."""

from pptcrunch.infrastructure.hardware.acceleration import (
    HardwareManager,
    classify_gpu,
    describe_generation,
    driver_supports_advanced,
)

__all__ = [
    'HardwareManager',
    'classify_gpu',
    'describe_generation',
    'driver_supports_advanced',
]
