"""Configuration management for encodekit.

This module provides configuration loading with precedence handling:
1. Direct arguments (highest priority)
2. Environment variables (ENCODEKIT_*)
3. Config file (~/.encodekit/config.toml)
4. Default values (lowest priority)
"""

from encodekit.config.env import EnvReader
from encodekit.config.loader import (
    clear_config_cache,
    get_config,
    get_default_config_path,
    get_tool_paths,
    load_config_file,
)
from encodekit.config.models import (
    EncodekitConfig,
    LoggingConfig,
    ProbeConfig,
    SupervisorConfig,
    ToolPathsConfig,
)

__all__ = [
    # Models
    "EncodekitConfig",
    "LoggingConfig",
    "ProbeConfig",
    "SupervisorConfig",
    "ToolPathsConfig",
    # Loader
    "EnvReader",
    "clear_config_cache",
    "get_config",
    "get_default_config_path",
    "get_tool_paths",
    "load_config_file",
]
