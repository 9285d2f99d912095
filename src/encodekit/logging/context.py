"""Run context for structured logging.

Provides context propagation for supervised runs using contextvars, enabling
automatic injection of run_id and source path into log records. The
supervisor copies the context into its reader and watcher threads, so lines
logged there carry the same run identity as the caller.
"""

from __future__ import annotations

import contextvars
import logging
from contextlib import contextmanager
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Generator

_run_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "run_id", default=None
)
_source_path: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "source_path", default=None
)


def set_run_context(run_id: str, source_path: Path | str | None = None) -> None:
    """Set the current run context.

    Args:
        run_id: Short run identifier (e.g. "3f9a1c2b").
        source_path: Source file being encoded, or None.
    """
    _run_id.set(run_id)
    _source_path.set(str(source_path) if source_path is not None else None)


def clear_run_context() -> None:
    """Clear the current run context."""
    _run_id.set(None)
    _source_path.set(None)


@contextmanager
def run_context(
    run_id: str,
    source_path: Path | str | None = None,
) -> Generator[None, None, None]:
    """Context manager that scopes log records to one run.

    Example:
        with run_context("3f9a1c2b", "/media/in.mkv"):
            logger.info("Launching ffmpeg")  # record carries run_id
    """
    old_run_id = _run_id.get()
    old_source_path = _source_path.get()
    try:
        set_run_context(run_id, source_path)
        yield
    finally:
        _run_id.set(old_run_id)
        _source_path.set(old_source_path)


def get_run_context() -> tuple[str | None, str | None]:
    """Get current run context as (run_id, source_path)."""
    return _run_id.get(), _source_path.get()


class RunContextFilter(logging.Filter):
    """Logging filter that injects run context into log records.

    Adds run_id and source_path attributes to each LogRecord. For text
    format, also adds a compact run_tag like ``[run:3f9a1c2b] ``.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        run_id, source_path = get_run_context()

        record.run_id = run_id
        record.source_path = source_path
        record.run_tag = f"[run:{run_id}] " if run_id else ""

        return True  # Never filter out records
