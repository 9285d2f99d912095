"""Structured logging module for encodekit.

Provides configurable logging with JSON format support and file rotation.
Includes run context support for concurrent supervised runs.
"""

from encodekit.logging.config import configure_logging
from encodekit.logging.context import (
    RunContextFilter,
    clear_run_context,
    get_run_context,
    run_context,
    set_run_context,
)
from encodekit.logging.handlers import JSONFormatter

__all__ = [
    "JSONFormatter",
    "RunContextFilter",
    "clear_run_context",
    "configure_logging",
    "get_run_context",
    "run_context",
    "set_run_context",
]
