"""Typed access to ENCODEKIT_* environment variables.

EnvReader takes an optional mapping so tests can inject an environment
instead of patching os.environ.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Callable, Mapping
from pathlib import Path
from typing import TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

_TRUTHY = frozenset({"1", "true", "yes", "on"})


class EnvReader:
    """Read environment variables with type conversion.

    Unset variables yield the default. Values that fail conversion are
    logged at warning level and also yield the default, so a typo in the
    environment never prevents a run.

    Example:
        reader = EnvReader(env={"ENCODEKIT_GRACE_PERIOD": "2"})
        reader.get_float("ENCODEKIT_GRACE_PERIOD", 5.0)  # 2.0

    Args:
        env: Mapping to read instead of os.environ.
    """

    def __init__(self, env: Mapping[str, str] | None = None) -> None:
        self._env: Mapping[str, str] = os.environ if env is None else env

    def _convert(
        self, var: str, default: T | None, convert: Callable[[str], T], kind: str
    ) -> T | None:
        raw = self._env.get(var)
        if raw is None:
            return default
        try:
            return convert(raw)
        except ValueError:
            logger.warning("Invalid %s value for %s: %s", kind, var, raw)
            return default

    def get_str(self, var: str, default: str | None = None) -> str | None:
        return self._env.get(var, default)

    def get_int(self, var: str, default: int | None = None) -> int | None:
        return self._convert(var, default, int, "integer")

    def get_float(self, var: str, default: float | None = None) -> float | None:
        return self._convert(var, default, float, "float")

    def get_bool(self, var: str, default: bool | None = None) -> bool | None:
        """Read a flag; "1", "true", "yes" and "on" (any case) are True."""
        raw = self._env.get(var)
        if raw is None:
            return default
        return raw.strip().casefold() in _TRUTHY

    def get_path(
        self, var: str, must_exist: bool = True, default: Path | None = None
    ) -> Path | None:
        """Read a filesystem path, expanding ``~``.

        Args:
            var: Variable name.
            must_exist: Reject (with a warning) paths that do not exist.
            default: Returned when unset or rejected.
        """
        raw = self._env.get(var)
        if raw is None:
            return default
        path = Path(raw).expanduser()
        if must_exist and not path.exists():
            logger.warning("%s points to non-existent path: %s", var, raw)
            return default
        return path
