"""Exception hierarchy for encodekit.

Errors fall into three families so callers can react appropriately:

- ConfigError: caller-fixable problems detected before any process launch.
- SynthesisError: reserved for future flag constraints.
- RunError: failures of a supervised FFmpeg run.

Every exception inherits from EncodekitError, allowing callers to catch all
library errors with a single except clause if desired.
"""

from __future__ import annotations

from collections.abc import Sequence


class EncodekitError(Exception):
    """Base exception for all encodekit errors."""


# =============================================================================
# Configuration errors
# =============================================================================


class ConfigError(EncodekitError):
    """Base class for invalid encoding configurations."""


class NoStreamSelectedError(ConfigError):
    """Raised when neither audio nor video output is requested."""

    def __init__(self) -> None:
        super().__init__(
            "Encoding spec selects no streams: audio and video cannot both be absent"
        )


class InvalidDurationError(ConfigError):
    """Raised when the duration is negative or not a finite number.

    Attributes:
        duration: The rejected duration value.
    """

    def __init__(self, duration: float) -> None:
        self.duration = duration
        super().__init__(
            f"Invalid duration {duration!r}: must be a non-negative number of seconds"
        )


class InvalidOffsetError(ConfigError):
    """Raised when the offset is negative or not a finite number.

    Attributes:
        offset: The rejected offset value.
    """

    def __init__(self, offset: float) -> None:
        self.offset = offset
        super().__init__(
            f"Invalid offset {offset!r}: must be a non-negative number of seconds"
        )


class InvalidThreadCountError(ConfigError):
    """Raised when a thread-count field is below the tool-default sentinel.

    Attributes:
        field: Name of the offending field (e.g. "decoding_threads").
        value: The rejected value.
    """

    def __init__(self, field: str, value: int) -> None:
        self.field = field
        self.value = value
        super().__init__(
            f"Invalid {field} {value}: must be -1 (tool default) or non-negative"
        )


class SpecFormatError(ConfigError):
    """Raised when a serialized encoding spec has the wrong shape."""


class ConfigFileError(EncodekitError):
    """Raised when an encodekit configuration file cannot be loaded."""


# =============================================================================
# Synthesis errors
# =============================================================================


class SynthesisError(EncodekitError):
    """Raised when a validated spec cannot be compiled into a command.

    Not raised by the current synthesizer; validated specs always compile.
    """


# =============================================================================
# Probe errors
# =============================================================================


class ProbeError(EncodekitError):
    """Raised when a source file cannot be probed."""


# =============================================================================
# Run errors
# =============================================================================


class RunError(EncodekitError):
    """Base class for failures of a supervised FFmpeg run.

    Attributes:
        diagnostic_lines: Last non-progress lines written by the tool.
    """

    def __init__(self, message: str, diagnostic_lines: Sequence[str] = ()) -> None:
        self.diagnostic_lines: tuple[str, ...] = tuple(diagnostic_lines)
        super().__init__(message)


class LaunchFailedError(RunError):
    """Raised when the external tool cannot be started.

    Attributes:
        executable: The executable that failed to launch.
        reason: Underlying OS error message.
    """

    def __init__(self, executable: str, reason: str) -> None:
        self.executable = executable
        self.reason = reason
        super().__init__(f"Failed to launch {executable}: {reason}")


class ExternalToolFailedError(RunError):
    """Raised when the external tool fails or reports a fatal error.

    Attributes:
        exit_code: Process exit code (may be 0 when a fatal marker was seen).
        fatal_message: The fatal diagnostic line that was detected, if any.
    """

    def __init__(
        self,
        exit_code: int,
        diagnostic_lines: Sequence[str] = (),
        fatal_message: str | None = None,
    ) -> None:
        self.exit_code = exit_code
        self.fatal_message = fatal_message
        if fatal_message:
            message = f"FFmpeg reported a fatal error (exit code {exit_code}): "
            message += fatal_message
        else:
            message = f"FFmpeg exited with code {exit_code}"
            if diagnostic_lines:
                message += f": {diagnostic_lines[-1]}"
        super().__init__(message, diagnostic_lines)


class RunCancelledError(RunError):
    """Raised when a run was cancelled before it finished."""

    def __init__(self, diagnostic_lines: Sequence[str] = ()) -> None:
        super().__init__("Encoding run was cancelled", diagnostic_lines)


class RunTimedOutError(RunError):
    """Raised when a run exceeded its deadline.

    Attributes:
        deadline: The deadline in seconds that elapsed.
    """

    def __init__(self, deadline: float, diagnostic_lines: Sequence[str] = ()) -> None:
        self.deadline = deadline
        super().__init__(
            f"Encoding run timed out after {deadline} seconds", diagnostic_lines
        )
