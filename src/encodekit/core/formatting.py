"""Formatting helpers for time values.

FFmpeg's internal time base is microseconds, so seconds passed on the command
line are rendered with at most six fractional digits.
"""

from __future__ import annotations

import math


def format_seconds(seconds: float) -> str:
    """Render seconds for an FFmpeg time option.

    Values are rounded to the microsecond, trailing zeros are stripped and at
    least one fractional digit is kept, so output never uses exponent
    notation and never varies between calls.

    Examples:
        >>> format_seconds(5)
        '5.0'
        >>> format_seconds(2.5)
        '2.5'
        >>> format_seconds(12.3456789)
        '12.345679'
    """
    text = f"{float(seconds):.6f}".rstrip("0")
    if text.endswith("."):
        text += "0"
    return text


def format_number(value: float) -> str:
    """Render a numeric attribute (e.g. a frame rate) for FFmpeg.

    Integral values are printed without a fractional part.
    """
    if float(value).is_integer():
        return str(int(value))
    return format_seconds(value)


def format_timestamp(seconds: float) -> str:
    """Format seconds as HH:MM:SS.ss for human-readable log output.

    Examples:
        >>> format_timestamp(3725.5)
        '01:02:05.50'
        >>> format_timestamp(59.999)
        '00:01:00.00'
    """
    if not math.isfinite(seconds) or seconds < 0:
        seconds = 0.0
    # Round once so 59.999 carries into the minute instead of showing 60.00
    centis = round(seconds * 100)
    minutes, centis = divmod(centis, 6000)
    hours, minutes = divmod(minutes, 60)
    return f"{hours:02d}:{minutes:02d}:{centis // 100:02d}.{centis % 100:02d}"
