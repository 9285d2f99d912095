"""Bounded, capture-everything subprocess calls.

Used for short tool invocations such as ffprobe. Encodes are long-running
and go through :class:`encodekit.executor.supervisor.EncodingRun` instead.
"""

from __future__ import annotations

import logging
import subprocess  # nosec B404 - subprocess is required for ffprobe invocation
import time
from collections.abc import Sequence
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)


def _abbreviate(argv: Sequence[str], keep: int = 3) -> str:
    shown = " ".join(argv[:keep])
    return shown + " ..." if len(argv) > keep else shown


def run_command(
    args: Sequence[str | Path],
    timeout: float = 120,
    errors: str = "replace",
    **kwargs: Any,
) -> tuple[str, str, int]:
    """Run a tool to completion and capture its output.

    The child gets no stdin and no shell. Output is decoded as UTF-8 with
    ``errors`` handling, so undecodable bytes never raise.

    Args:
        args: Executable followed by its arguments.
        timeout: Seconds before the child is killed.
        errors: Codec error handler for decoding.
        **kwargs: Passed through to subprocess.run.

    Returns:
        (stdout, stderr, returncode)

    Raises:
        subprocess.TimeoutExpired: The child overran ``timeout``; it has
            already been killed and reaped.
        OSError: The executable could not be started.
    """
    argv = [str(arg) for arg in args]
    tool = Path(argv[0]).name if argv else "unknown"
    logger.debug("Running %s", " ".join(argv), extra={"command": tool})

    started = time.monotonic()
    try:
        completed = subprocess.run(  # nosec B603 - argv list, no shell
            argv,
            stdin=subprocess.DEVNULL,
            capture_output=True,
            text=True,
            encoding="utf-8",
            errors=errors,
            timeout=timeout,
            **kwargs,
        )
    except subprocess.TimeoutExpired:
        logger.warning(
            "%s timed out after %ss",
            _abbreviate(argv),
            timeout,
            extra={"command": tool, "timeout_seconds": timeout},
        )
        raise

    logger.debug(
        "%s exited with %d",
        tool,
        completed.returncode,
        extra={
            "command": tool,
            "elapsed_seconds": round(time.monotonic() - started, 3),
        },
    )
    return completed.stdout or "", completed.stderr or "", completed.returncode
