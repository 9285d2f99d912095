"""FFprobe-based implementation of the Prober protocol."""

import json
import subprocess  # nosec B404 - subprocess is required for ffprobe invocation
from pathlib import Path

from encodekit.core.paths import defuse_path
from encodekit.core.subprocess_utils import run_command
from encodekit.exceptions import ProbeError
from encodekit.probe.models import SourceProbe
from encodekit.probe.parsers import parse_ffprobe_output


class FFprobeProber:
    """ffprobe-based implementation of the Prober protocol.

    Extracts container, duration and stream information from media files.
    """

    def __init__(self, ffprobe_path: Path | None = None, timeout: float | None = None):
        """Initialize the prober.

        Args:
            ffprobe_path: Optional explicit path to ffprobe. If not provided,
                uses the configured path or the system PATH.
            timeout: ffprobe timeout in seconds. Defaults to the configured
                probe timeout.

        Raises:
            ProbeError: If ffprobe is not available.
        """
        if ffprobe_path is None or timeout is None:
            from encodekit.config import get_config
            from encodekit.executor.tools import get_tool_path

            config = get_config()
            if ffprobe_path is None:
                ffprobe_path = get_tool_path("ffprobe", config.tools)
            if timeout is None:
                timeout = config.probe.timeout

        if ffprobe_path is None:
            raise ProbeError(
                "ffprobe is not installed or not in PATH. "
                "Install ffmpeg to probe sources, or configure a custom path via "
                "the ENCODEKIT_FFPROBE_PATH environment variable or "
                "~/.encodekit/config.toml"
            )
        self._ffprobe_path = ffprobe_path
        self._timeout = timeout

    def probe(self, path: Path) -> SourceProbe:
        """Describe the media at ``path``.

        Raises:
            ProbeError: If the file cannot be probed.
        """
        if not path.exists():
            raise ProbeError(f"File not found: {path}")

        try:
            data = self._run_ffprobe(path)
        except subprocess.TimeoutExpired as e:
            raise ProbeError(
                f"ffprobe timed out for {path} after {e.timeout}s"
            ) from e
        except OSError as e:
            raise ProbeError(f"Cannot run ffprobe for {path}: {e}") from e
        except json.JSONDecodeError as e:
            raise ProbeError(f"Invalid ffprobe output for {path}: {e}") from e

        return parse_ffprobe_output(path, data)

    def _run_ffprobe(self, path: Path) -> dict:
        """Run ffprobe and return parsed JSON output.

        Raises:
            ProbeError: If ffprobe fails or output is missing required keys.
        """
        stdout, stderr, returncode = run_command(
            [
                self._ffprobe_path,
                "-v",
                "error",
                "-print_format",
                "json",
                "-show_streams",
                "-show_format",
                defuse_path(path),
            ],
            timeout=self._timeout,
        )
        if returncode != 0:
            raise ProbeError(f"ffprobe failed for {path}: {stderr.strip() or returncode}")

        data = json.loads(stdout)
        if "format" not in data:
            raise ProbeError(
                f"Missing 'format' in ffprobe output for {path}. "
                "File may be corrupted or not a valid media file."
            )
        return data
