"""Recover encodekit-controlled options from an FFmpeg argument vector.

The inverse of the parts of :mod:`encodekit.command.synthesizer` that carry
scalar values: seek offset, duration, thread counts, format and the stream
and metadata switches. Codec attribute blocks are not recovered.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from encodekit.core.paths import FILE_PROTOCOL_PREFIX
from encodekit.spec.models import ThreadCount, ToolDefault


@dataclass(frozen=True)
class KnownFlags:
    """Options read back from an argument vector."""

    offset: float | None = None
    duration: float | None = None
    filter_threads: ThreadCount = ToolDefault.TOOL_DEFAULT
    decoding_threads: ThreadCount = ToolDefault.TOOL_DEFAULT
    encoding_threads: ThreadCount = ToolDefault.TOOL_DEFAULT
    format: str | None = None
    video_disabled: bool = False
    audio_disabled: bool = False
    map_metadata: bool = False
    source: str | None = None
    target: str | None = None


def _strip_protocol(path: str) -> str:
    if path.startswith(FILE_PROTOCOL_PREFIX + "-"):
        return path[len(FILE_PROTOCOL_PREFIX) :]
    return path


def extract_known_flags(arguments: Sequence[str]) -> KnownFlags:
    """Read encodekit-controlled options out of ``arguments``.

    Args:
        arguments: Argument vector without the executable, as stored in
            InvocationPlan.arguments.

    Returns:
        KnownFlags with every recognized value. ``-threads`` before ``-i``
        is read as the decoding thread count, after ``-i`` as the encoding
        thread count.
    """
    values: dict[str, object] = {}
    seen_input = False
    index = 0
    last = len(arguments) - 1

    while index <= last:
        arg = arguments[index]
        value = arguments[index + 1] if index < last else None

        if arg == "-ss" and value is not None:
            values["offset"] = float(value)
        elif arg == "-t" and value is not None:
            values["duration"] = float(value)
        elif arg == "-filter_threads" and value is not None:
            values["filter_threads"] = int(value)
        elif arg == "-threads" and value is not None:
            key = "encoding_threads" if seen_input else "decoding_threads"
            values[key] = int(value)
        elif arg == "-f" and value is not None:
            values["format"] = value
        elif arg == "-map_metadata" and value is not None:
            values["map_metadata"] = value == "0"
        elif arg == "-i" and value is not None:
            values["source"] = _strip_protocol(value)
            seen_input = True
        elif arg == "-vn":
            values["video_disabled"] = True
            index += 1
            continue
        elif arg == "-an":
            values["audio_disabled"] = True
            index += 1
            continue
        elif index == last and seen_input:
            values["target"] = _strip_protocol(arg)
            index += 1
            continue
        elif arg.startswith("-") and value is not None and not value.startswith("-"):
            # Unknown option with a value; skip both
            index += 2
            continue
        else:
            index += 1
            continue
        index += 2

    return KnownFlags(**values)  # type: ignore[arg-type]
