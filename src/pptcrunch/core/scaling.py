"""Output dimension selection."""

from typing import Optional, Tuple


def make_even(value: int) -> int:
    """Round down to the nearest even integer.

    The result is never below 2, so a 1-pixel dimension grows to 2. FFmpeg
    rejects a 0-pixel scale target.
    """
    return max(2, value - (value % 2))


def scale_dimensions(width: int, height: int,
                     max_width: Optional[int]) -> Tuple[int, int]:
    """Compute output dimensions for a maximum width.

    Videos are only ever scaled down and aspect ratio is preserved. Both
    dimensions are rounded down to even numbers since the H.264/H.265
    encoders require them.

    Args:
        width: Original width in pixels
        height: Original height in pixels
        max_width: Maximum output width, None for no limit

    Returns:
        Tuple of (width, height)
    """
    if max_width is None or width <= max_width:
        return make_even(width), make_even(height)

    new_height = round(height * max_width / width)
    return make_even(max_width), make_even(new_height)


def scale_filter(dimensions: Optional[Tuple[int, int]],
                 max_width: Optional[int]) -> str:
    """Build the FFmpeg scale filter.

    Args:
        dimensions: Output dimensions if the input was probed
        max_width: Maximum output width, None for no limit

    Returns:
        Value for the ``-vf`` option
    """
    if dimensions is not None:
        return f"scale={dimensions[0]}:{dimensions[1]}"
    if max_width is None:
        return "scale=trunc(iw/2)*2:trunc(ih/2)*2"
    # Input size unknown, let FFmpeg decide per frame
    return (
        f"scale='if(gt(iw,{max_width}),{max_width},iw)'"
        f":'if(gt(iw,{max_width}),trunc(ih*{max_width}/iw/2)*2,ih)',"
        "scale=trunc(iw/2)*2:trunc(ih/2)*2"
    )
