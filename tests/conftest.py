"""Shared test fixtures for encodekit."""

import shutil
import sys
import tempfile
from pathlib import Path

import pytest

from encodekit.config import SupervisorConfig, clear_config_cache


@pytest.fixture(autouse=True)
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    """Keep tests away from the user's ~/.encodekit/config.toml."""
    monkeypatch.setenv("ENCODEKIT_CONFIG_PATH", str(tmp_path / "config.toml"))
    for var in (
        "ENCODEKIT_FFMPEG_PATH",
        "ENCODEKIT_FFPROBE_PATH",
        "ENCODEKIT_GRACE_PERIOD",
        "ENCODEKIT_DIAGNOSTIC_LINES",
        "ENCODEKIT_DEFAULT_DEADLINE",
        "ENCODEKIT_PROBE_TIMEOUT",
        "ENCODEKIT_LOG_LEVEL",
        "ENCODEKIT_LOG_FORMAT",
        "ENCODEKIT_LOG_FILE",
    ):
        monkeypatch.delenv(var, raising=False)
    clear_config_cache()
    yield
    clear_config_cache()


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test isolation."""
    dir_path = tempfile.mkdtemp()
    yield Path(dir_path)
    shutil.rmtree(dir_path, ignore_errors=True)


@pytest.fixture
def fast_supervisor() -> SupervisorConfig:
    """Supervisor settings with short timings for subprocess tests."""
    return SupervisorConfig(
        grace_period=2.0,
        poll_interval=0.05,
        diagnostic_lines=5,
        stderr_drain_timeout=5.0,
    )


@pytest.fixture
def python_executable() -> Path:
    """The running interpreter, used as a stand-in external tool."""
    return Path(sys.executable)
