"""Execution of synthesized FFmpeg invocations.

This package supervises external processes and resolves tool paths.
"""

from encodekit.executor.supervisor import (
    EncodingRun,
    ProgressCallback,
    RunState,
    RunSuccess,
    run,
)
from encodekit.executor.tools import (
    check_tool_availability,
    get_tool_path,
    resolve_tool,
)

__all__ = [
    "EncodingRun",
    "ProgressCallback",
    "RunState",
    "RunSuccess",
    "check_tool_availability",
    "get_tool_path",
    "resolve_tool",
    "run",
]
