"""Compiled FFmpeg invocation."""

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class InvocationPlan:
    """A concrete external-process invocation for one encoding job.

    Immutable once produced; each plan corresponds to exactly one process
    launch.
    """

    executable: Path
    arguments: tuple[str, ...]
    """Arguments after the executable, in the order they are passed."""

    source: Path
    target: Path

    expected_duration: float | None = None
    """Seconds of output the run should produce, if known. Drives the
    completion fraction of progress events."""

    @property
    def command(self) -> list[str]:
        """Full argument vector including the executable."""
        return [str(self.executable), *self.arguments]

    def describe(self) -> str:
        """Render the command for log output (not for shell execution)."""
        return " ".join(self.command)
