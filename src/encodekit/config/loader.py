"""Configuration loader with precedence handling.

Configuration is loaded with the following precedence (highest to lowest):
1. Arguments passed directly to get_config()
2. Environment variables (ENCODEKIT_*)
3. Config file (~/.encodekit/config.toml)
4. Default values

Environment variables:
- ENCODEKIT_CONFIG_PATH: Path to config file (overrides default location)
- ENCODEKIT_FFMPEG_PATH: Path to ffmpeg executable
- ENCODEKIT_FFPROBE_PATH: Path to ffprobe executable
- ENCODEKIT_GRACE_PERIOD: Seconds between terminate and kill on cancellation
- ENCODEKIT_DIAGNOSTIC_LINES: Stderr lines kept for error reports
- ENCODEKIT_DEFAULT_DEADLINE: Default run deadline in seconds
- ENCODEKIT_PROBE_TIMEOUT: ffprobe timeout in seconds
- ENCODEKIT_LOG_LEVEL: debug, info, warning or error
- ENCODEKIT_LOG_FORMAT: text or json
- ENCODEKIT_LOG_FILE: Log file path
"""

from __future__ import annotations

import logging
import threading
import tomllib
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from encodekit.config.env import EnvReader
from encodekit.config.models import (
    EncodekitConfig,
    LoggingConfig,
    ProbeConfig,
    SupervisorConfig,
    ToolPathsConfig,
)
from encodekit.exceptions import ConfigFileError

logger = logging.getLogger(__name__)

# Default config location
DEFAULT_CONFIG_DIR = Path.home() / ".encodekit"
DEFAULT_CONFIG_FILE = DEFAULT_CONFIG_DIR / "config.toml"

# path -> (parsed TOML, mtime); entries are replaced when the mtime changes
_config_cache: dict[Path, tuple[dict[str, Any], float]] = {}
_config_cache_lock = threading.Lock()


def get_default_config_path(env: Mapping[str, str] | None = None) -> Path:
    """Get the default config file path.

    Can be overridden by ENCODEKIT_CONFIG_PATH environment variable.
    """
    env_path = EnvReader(env).get_str("ENCODEKIT_CONFIG_PATH")
    if env_path:
        return Path(env_path).expanduser()
    return DEFAULT_CONFIG_FILE


def clear_config_cache() -> None:
    """Drop all cached config file contents."""
    with _config_cache_lock:
        _config_cache.clear()


def load_config_file(path: Path | None = None) -> dict[str, Any]:
    """Load configuration from a TOML file.

    Args:
        path: Path to config file. If None, uses default location.

    Returns:
        Parsed configuration dict. Empty dict if file doesn't exist.

    Raises:
        ConfigFileError: If the file exists but cannot be read or parsed.
    """
    if path is None:
        path = get_default_config_path()

    try:
        mtime = path.stat().st_mtime
    except FileNotFoundError:
        logger.debug("Config file not found: %s", path)
        return {}
    except OSError as e:
        raise ConfigFileError(f"Cannot access config file {path}: {e}") from e

    with _config_cache_lock:
        cached = _config_cache.get(path)
        if cached is not None and cached[1] == mtime:
            return cached[0]

    try:
        with path.open("rb") as f:
            data = tomllib.load(f)
    except OSError as e:
        raise ConfigFileError(f"Cannot read config file {path}: {e}") from e
    except tomllib.TOMLDecodeError as e:
        raise ConfigFileError(f"Invalid TOML in config file {path}: {e}") from e

    with _config_cache_lock:
        _config_cache[path] = (data, mtime)

    logger.debug("Loaded config from %s", path)
    return data


def _section(data: dict[str, Any], name: str) -> dict[str, Any]:
    section = data.get(name, {})
    if not isinstance(section, dict):
        raise ConfigFileError(f"Config section [{name}] must be a table")
    return section


def _optional_path(value: Any) -> Path | None:
    if value is None or value == "":
        return None
    return Path(str(value)).expanduser()


def _tool_paths(
    file_data: dict[str, Any],
    reader: EnvReader,
    ffmpeg_path: Path | None,
    ffprobe_path: Path | None,
) -> ToolPathsConfig:
    tools_data = _section(file_data, "tools")
    return ToolPathsConfig(
        ffmpeg=ffmpeg_path
        or reader.get_path("ENCODEKIT_FFMPEG_PATH")
        or _optional_path(tools_data.get("ffmpeg")),
        ffprobe=ffprobe_path
        or reader.get_path("ENCODEKIT_FFPROBE_PATH")
        or _optional_path(tools_data.get("ffprobe")),
    )


def get_tool_paths(
    config_path: Path | None = None,
    env: Mapping[str, str] | None = None,
    ffmpeg_path: Path | None = None,
    ffprobe_path: Path | None = None,
) -> ToolPathsConfig:
    """Resolve only the tool paths, with the same precedence as get_config().

    Settings outside ``[tools]`` are not read, so a bad supervisor or
    logging value does not stop tool lookup.

    Raises:
        ConfigFileError: If the config file is unreadable or ``[tools]``
            is not a table.
    """
    reader = EnvReader(env)
    file_data = load_config_file(config_path or get_default_config_path(env))
    return _tool_paths(file_data, reader, ffmpeg_path, ffprobe_path)


def get_config(
    config_path: Path | None = None,
    env: Mapping[str, str] | None = None,
    # Direct overrides (highest precedence)
    ffmpeg_path: Path | None = None,
    ffprobe_path: Path | None = None,
) -> EncodekitConfig:
    """Get encodekit configuration with full precedence handling.

    Precedence (highest to lowest):
    1. Arguments passed to this function
    2. Environment variables (ENCODEKIT_*)
    3. Config file
    4. Default values

    Args:
        config_path: Path to config file (overrides ENCODEKIT_CONFIG_PATH).
        env: Environment mapping; defaults to os.environ.
        ffmpeg_path: Override for ffmpeg path.
        ffprobe_path: Override for ffprobe path.

    Returns:
        EncodekitConfig with merged configuration.

    Raises:
        ConfigFileError: If the config file is unreadable or holds invalid values.
    """
    reader = EnvReader(env)
    file_data = load_config_file(config_path or get_default_config_path(env))

    tools = _tool_paths(file_data, reader, ffmpeg_path, ffprobe_path)
    supervisor_data = _section(file_data, "supervisor")
    probe_data = _section(file_data, "probe")
    logging_data = _section(file_data, "logging")

    try:
        defaults = SupervisorConfig()
        supervisor = SupervisorConfig(
            grace_period=reader.get_float(
                "ENCODEKIT_GRACE_PERIOD",
                float(supervisor_data.get("grace_period", defaults.grace_period)),
            ),
            poll_interval=float(
                supervisor_data.get("poll_interval", defaults.poll_interval)
            ),
            diagnostic_lines=reader.get_int(
                "ENCODEKIT_DIAGNOSTIC_LINES",
                int(supervisor_data.get("diagnostic_lines", defaults.diagnostic_lines)),
            ),
            stderr_drain_timeout=float(
                supervisor_data.get(
                    "stderr_drain_timeout", defaults.stderr_drain_timeout
                )
            ),
            default_deadline=reader.get_float(
                "ENCODEKIT_DEFAULT_DEADLINE",
                supervisor_data.get("default_deadline"),
            ),
        )

        probe = ProbeConfig(
            timeout=reader.get_float(
                "ENCODEKIT_PROBE_TIMEOUT",
                float(probe_data.get("timeout", ProbeConfig().timeout)),
            ),
        )

        log_defaults = LoggingConfig()
        logging_config = LoggingConfig(
            level=reader.get_str(
                "ENCODEKIT_LOG_LEVEL", logging_data.get("level", log_defaults.level)
            ),
            file=reader.get_path("ENCODEKIT_LOG_FILE", must_exist=False)
            or _optional_path(logging_data.get("file")),
            format=reader.get_str(
                "ENCODEKIT_LOG_FORMAT", logging_data.get("format", log_defaults.format)
            ),
            include_stderr=bool(
                logging_data.get("include_stderr", log_defaults.include_stderr)
            ),
            max_bytes=int(logging_data.get("max_bytes", log_defaults.max_bytes)),
            backup_count=int(
                logging_data.get("backup_count", log_defaults.backup_count)
            ),
        )
    except (TypeError, ValueError) as e:
        raise ConfigFileError(f"Invalid configuration value: {e}") from e

    return EncodekitConfig(
        tools=tools,
        supervisor=supervisor,
        probe=probe,
        logging=logging_config,
    )
