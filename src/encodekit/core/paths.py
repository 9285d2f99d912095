"""Path rendering for FFmpeg-family command lines."""

from __future__ import annotations

from pathlib import Path

# Prefix that makes FFmpeg and ffprobe treat the rest as a plain file path
FILE_PROTOCOL_PREFIX = "file:"


def defuse_path(path: Path | str) -> str:
    """Render a path so FFmpeg or ffprobe cannot mistake it for an option.

    Neither tool has a ``--`` end-of-options marker for positional paths, and
    a bare ``-`` means stdin/stdout. Paths starting with ``-`` are therefore
    prefixed with the ``file:`` protocol, which the tools strip before opening.
    """
    text = str(path)
    if text.startswith("-"):
        return FILE_PROTOCOL_PREFIX + text
    return text
