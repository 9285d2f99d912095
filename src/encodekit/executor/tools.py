"""External tool path resolution.

Tools are resolved in this order:
1. Configured path (config file, ENCODEKIT_*_PATH or direct override)
2. System PATH lookup

Discovery failure is not an error here: :func:`resolve_tool` falls back to
the bare tool name so a missing executable surfaces as LaunchFailedError
when the process is started.
"""

from __future__ import annotations

import logging
import os
import shutil
from pathlib import Path

from encodekit.config.models import ToolPathsConfig

logger = logging.getLogger(__name__)

SUPPORTED_TOOLS = ("ffmpeg", "ffprobe")


def _is_executable(path: Path) -> bool:
    return path.is_file() and os.access(path, os.X_OK)


def get_tool_path(tool_name: str, tools: ToolPathsConfig | None = None) -> Path | None:
    """Get path to a tool, or None if not available.

    Args:
        tool_name: "ffmpeg" or "ffprobe".
        tools: Configured tool paths. None means PATH lookup only.

    Returns:
        Path to the executable, or None if it cannot be found.
    """
    if tool_name not in SUPPORTED_TOOLS:
        raise ValueError(f"Unknown tool: {tool_name}")

    configured = getattr(tools, tool_name, None) if tools is not None else None
    if configured is not None:
        configured = Path(configured).expanduser()
        if _is_executable(configured):
            return configured
        logger.warning(
            "Configured %s path is not an executable file: %s", tool_name, configured
        )

    found = shutil.which(tool_name)
    if found:
        return Path(found)

    logger.debug("%s not found in PATH", tool_name)
    return None


def resolve_tool(tool_name: str, tools: ToolPathsConfig | None = None) -> Path:
    """Get path to a tool, falling back to the bare name when not found."""
    path = get_tool_path(tool_name, tools)
    if path is None:
        return Path(tool_name)
    return path


def check_tool_availability(tools: ToolPathsConfig | None = None) -> dict[str, bool]:
    """Check which external tools are available.

    Returns:
        Dict mapping tool name to availability.
    """
    return {name: get_tool_path(name, tools) is not None for name in SUPPORTED_TOOLS}
