"""Handler setup for applications embedding encodekit.

encodekit never configures logging on import. Applications that want its
text or JSON layout call configure_logging() once at startup.
"""

from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import TYPE_CHECKING

from encodekit.logging.context import RunContextFilter
from encodekit.logging.handlers import JSONFormatter

if TYPE_CHECKING:
    from encodekit.config.models import LoggingConfig

# run_tag renders as "[run:3f9a1c2b] " inside a run and "" outside
TEXT_FORMAT = "%(asctime)s - %(run_tag)s%(name)s - %(levelname)s - %(message)s"
TEXT_DATE_FORMAT = "%Y-%m-%dT%H:%M:%S%z"


def _build_formatter(config: LoggingConfig) -> logging.Formatter:
    if config.format.casefold() == "json":
        return JSONFormatter()
    return logging.Formatter(TEXT_FORMAT, datefmt=TEXT_DATE_FORMAT)


def _open_file_handler(config: LoggingConfig) -> logging.Handler | None:
    """Create the rotating file handler, or None if the file is unusable."""
    assert config.file is not None
    path = Path(config.file).expanduser()
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        return RotatingFileHandler(
            path,
            maxBytes=config.max_bytes,
            backupCount=config.backup_count,
            encoding="utf-8",
        )
    except OSError as e:
        # No logger is usable yet
        sys.stderr.write(f"Warning: Could not open log file {path}: {e}\n")
        return None


def configure_logging(config: LoggingConfig) -> None:
    """Replace the root logger's handlers according to ``config``.

    Records go to the log file when one is configured and can be opened,
    and to stderr otherwise or when ``include_stderr`` is set. Every handler
    carries the run context filter.
    """
    level = logging.getLevelName(config.level.upper())
    if not isinstance(level, int):
        level = logging.INFO

    handlers: list[logging.Handler] = []
    if config.file:
        file_handler = _open_file_handler(config)
        if file_handler is not None:
            handlers.append(file_handler)
    if config.include_stderr or not handlers:
        handlers.append(logging.StreamHandler(sys.stderr))

    formatter = _build_formatter(config)
    context_filter = RunContextFilter()
    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
        handler.addFilter(context_filter)

    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(level)
    for handler in handlers:
        root.addHandler(handler)
