"""Pure parsing functions for ffprobe JSON output.

These functions transform ffprobe JSON data into SourceProbe objects.
All functions are pure (no I/O, no side effects) for easy testing.
"""

import logging
from pathlib import Path
from typing import Any

from encodekit.probe.models import SourceProbe, StreamInfo

logger = logging.getLogger(__name__)

_KNOWN_KINDS = frozenset({"video", "audio", "subtitle", "data", "attachment"})


def parse_float(value: Any, field_name: str) -> float | None:
    """Parse an ffprobe numeric string into a non-negative float.

    Args:
        value: Raw value (ffprobe reports most numbers as strings).
        field_name: Field name for warning messages.

    Returns:
        Parsed value, or None if missing, "N/A" or invalid.
    """
    if value is None or value == "N/A":
        return None
    try:
        result = float(value)
    except (TypeError, ValueError):
        logger.warning("Invalid %s in ffprobe output: %r", field_name, value)
        return None
    if result < 0:
        logger.warning("Invalid negative %s in ffprobe output: %r", field_name, value)
        return None
    return result


def parse_int(value: Any, field_name: str) -> int | None:
    """Parse an ffprobe integer field, returning None when invalid."""
    if value is None:
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        logger.warning("Invalid %s in ffprobe output: %r", field_name, value)
        return None


def parse_frame_rate(value: str | None) -> float | None:
    """Parse an ffprobe rational frame rate like "30000/1001".

    Returns:
        Frames per second, or None for missing or degenerate ("0/0") rates.
    """
    if not value:
        return None
    numerator, _, denominator = value.partition("/")
    try:
        num = float(numerator)
        den = float(denominator) if denominator else 1.0
    except ValueError:
        return None
    if num <= 0 or den <= 0:
        return None
    return num / den


def parse_stream(stream: dict[str, Any]) -> StreamInfo:
    """Convert one ffprobe stream entry into StreamInfo."""
    kind = stream.get("codec_type") or "data"
    if kind not in _KNOWN_KINDS:
        kind = "data"

    return StreamInfo(
        index=parse_int(stream.get("index"), "index") or 0,
        kind=kind,
        codec=stream.get("codec_name"),
        width=parse_int(stream.get("width"), "width"),
        height=parse_int(stream.get("height"), "height"),
        frame_rate=parse_frame_rate(
            stream.get("avg_frame_rate") or stream.get("r_frame_rate")
        )
        if kind == "video"
        else None,
        channels=parse_int(stream.get("channels"), "channels"),
        sample_rate=parse_int(stream.get("sample_rate"), "sample_rate"),
    )


def parse_ffprobe_output(path: Path, data: dict[str, Any]) -> SourceProbe:
    """Build a SourceProbe from ``ffprobe -show_format -show_streams`` JSON.

    Args:
        path: The probed source path.
        data: Parsed ffprobe JSON.

    Returns:
        SourceProbe describing the source.
    """
    fmt = data.get("format") or {}
    streams = tuple(parse_stream(s) for s in data.get("streams") or [])

    duration = parse_float(fmt.get("duration"), "duration")
    if duration is None:
        # Some containers only report per-stream durations
        stream_durations = [
            d
            for d in (
                parse_float(s.get("duration"), "duration")
                for s in data.get("streams") or []
            )
            if d is not None
        ]
        if stream_durations:
            duration = max(stream_durations)

    return SourceProbe(
        path=path,
        container=fmt.get("format_name"),
        duration=duration,
        streams=streams,
    )
