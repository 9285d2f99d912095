"""JSON log output for encodekit.

One JSON object per line, suitable for log shippers. Fields passed through
``extra={...}`` and the run context land under ``context``.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any

# Attributes every LogRecord has, derived from a blank record so the set
# tracks the running Python version (taskName appeared in 3.12).
_RECORD_ATTRS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", (), None)))

# Set by logging.Formatter or RunContextFilter, never caller context
_DERIVED_ATTRS = frozenset({"message", "asctime", "run_tag"})

_RUN_CONTEXT_ATTRS = ("run_id", "source_path")


class JSONFormatter(logging.Formatter):
    """Render log records as single-line JSON.

    Output keys: ``timestamp`` (ISO-8601, UTC), ``level``, ``message``,
    ``logger`` (omitted for root), ``context`` (omitted when empty) and
    ``exception`` (only with exc_info).
    """

    def format(self, record: logging.LogRecord) -> str:
        created = datetime.fromtimestamp(record.created, tz=timezone.utc)
        entry: dict[str, Any] = {
            "timestamp": created.isoformat(),
            "level": record.levelname,
            "message": record.getMessage(),
        }
        if record.name and record.name != "root":
            entry["logger"] = record.name

        context = self._extract_context(record)
        if context:
            entry["context"] = context

        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(entry, default=str)

    @staticmethod
    def _extract_context(record: logging.LogRecord) -> dict[str, Any]:
        context: dict[str, Any] = {}
        for key, value in vars(record).items():
            if key in _RECORD_ATTRS or key in _DERIVED_ATTRS or key.startswith("_"):
                continue
            if key in _RUN_CONTEXT_ATTRS and not value:
                continue
            context[key] = value
        return context
