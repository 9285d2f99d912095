"""Configuration data models.

This module defines dataclasses for encodekit configuration options.
"""

from dataclasses import dataclass, field
from pathlib import Path


@dataclass
class ToolPathsConfig:
    """Configuration for external tool paths.

    All paths are optional. If not specified, tools are looked up in PATH.
    """

    ffmpeg: Path | None = None
    ffprobe: Path | None = None


@dataclass
class SupervisorConfig:
    """Configuration for supervised FFmpeg runs."""

    # Seconds to wait after SIGTERM before escalating to SIGKILL
    grace_period: float = 5.0

    # How often the watcher re-checks process state, in seconds
    poll_interval: float = 0.25

    # Non-progress stderr lines kept for error reports
    diagnostic_lines: int = 20

    # Seconds to wait for the stderr reader after the process exits
    stderr_drain_timeout: float = 5.0

    # Default deadline in seconds for runs that do not pass one (None = none)
    default_deadline: float | None = None

    def __post_init__(self) -> None:
        """Validate configuration."""
        if self.grace_period < 0:
            raise ValueError(
                f"grace_period must be non-negative, got {self.grace_period}"
            )
        if self.poll_interval <= 0:
            raise ValueError(
                f"poll_interval must be positive, got {self.poll_interval}"
            )
        if self.diagnostic_lines < 1:
            raise ValueError(
                f"diagnostic_lines must be at least 1, got {self.diagnostic_lines}"
            )
        if self.stderr_drain_timeout < 0:
            raise ValueError(
                "stderr_drain_timeout must be non-negative, "
                f"got {self.stderr_drain_timeout}"
            )
        if self.default_deadline is not None and self.default_deadline <= 0:
            raise ValueError(
                f"default_deadline must be positive, got {self.default_deadline}"
            )


@dataclass
class ProbeConfig:
    """Configuration for source probing."""

    # ffprobe timeout in seconds
    timeout: float = 60.0

    def __post_init__(self) -> None:
        """Validate configuration."""
        if self.timeout <= 0:
            raise ValueError(f"timeout must be positive, got {self.timeout}")


@dataclass
class LoggingConfig:
    """Configuration for structured logging."""

    # Log level: debug, info, warning, error
    level: str = "info"

    # Log file path (None = stderr only)
    file: Path | None = None

    # Log format: text or json
    format: str = "text"

    # Also log to stderr when file is set
    include_stderr: bool = False

    # Rotation threshold in bytes (default 10MB)
    max_bytes: int = 10_485_760

    # Number of rotated files to keep
    backup_count: int = 5

    def __post_init__(self) -> None:
        """Validate configuration."""
        valid_levels = {"debug", "info", "warning", "error"}
        if self.level.lower() not in valid_levels:
            raise ValueError(f"level must be one of {valid_levels}, got {self.level}")
        valid_formats = {"text", "json"}
        if self.format.lower() not in valid_formats:
            raise ValueError(
                f"format must be one of {valid_formats}, got {self.format}"
            )


@dataclass
class EncodekitConfig:
    """Top-level encodekit configuration."""

    tools: ToolPathsConfig = field(default_factory=ToolPathsConfig)
    supervisor: SupervisorConfig = field(default_factory=SupervisorConfig)
    probe: ProbeConfig = field(default_factory=ProbeConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
