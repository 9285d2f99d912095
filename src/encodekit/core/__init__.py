"""Core utilities package.

This package contains small helpers with no encodekit dependencies, used
across the codebase for subprocess invocation and time formatting.
"""

from encodekit.core.formatting import format_number, format_seconds, format_timestamp
from encodekit.core.subprocess_utils import run_command

__all__ = [
    "format_number",
    "format_seconds",
    "format_timestamp",
    "run_command",
]
