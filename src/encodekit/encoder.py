"""High-level encoding facade.

Encoder wires the pieces together for the common case: probe the source,
validate the spec, synthesize the command and supervise the run.

Example:
    encoder = Encoder()
    spec = EncodingSpec().with_format("mp4").with_video(VideoSpec("libx264"))
    result = encoder.encode(
        Path("in.mkv"),
        Path("out.mp4"),
        spec,
        on_progress=lambda e: print(f"{e.percent or 0:.0f}%"),
    )
"""

from __future__ import annotations

import logging
from pathlib import Path

from encodekit.command.plan import InvocationPlan
from encodekit.command.synthesizer import synthesize
from encodekit.config.loader import get_config
from encodekit.config.models import EncodekitConfig
from encodekit.executor.supervisor import EncodingRun, ProgressCallback, RunSuccess
from encodekit.executor.tools import get_tool_path, resolve_tool
from encodekit.probe.ffprobe import FFprobeProber
from encodekit.probe.interface import Prober
from encodekit.probe.models import SourceProbe
from encodekit.spec.models import EncodingSpec
from encodekit.spec.validation import validate

logger = logging.getLogger(__name__)


class Encoder:
    """Encode media files with FFmpeg.

    Args:
        config: encodekit configuration. Loaded from the environment and
            config file when omitted.
        prober: Source prober. Defaults to an FFprobeProber created on first
            use.
    """

    def __init__(
        self,
        config: EncodekitConfig | None = None,
        prober: Prober | None = None,
    ) -> None:
        self._config = config or get_config()
        self._prober = prober
        self._ffmpeg_path = resolve_tool("ffmpeg", self._config.tools)

    @property
    def ffmpeg_path(self) -> Path:
        return self._ffmpeg_path

    def _get_prober(self) -> Prober:
        if self._prober is None:
            self._prober = FFprobeProber(
                get_tool_path("ffprobe", self._config.tools),
                self._config.probe.timeout,
            )
        return self._prober

    def probe(self, source: Path) -> SourceProbe:
        """Describe ``source`` with the configured prober."""
        return self._get_prober().probe(source)

    def plan(
        self,
        source: Path,
        target: Path,
        spec: EncodingSpec,
        probe: SourceProbe | None = None,
    ) -> InvocationPlan:
        """Validate ``spec`` and compile it into an InvocationPlan.

        The source is probed when ``probe`` is not supplied.

        Raises:
            ConfigError: If the spec is invalid. Nothing is probed or launched.
            ProbeError: If the source cannot be probed.
        """
        valid = validate(spec)
        if probe is None:
            probe = self.probe(source)
        return synthesize(valid, source, target, probe, executable=self._ffmpeg_path)

    def start(
        self,
        source: Path,
        target: Path,
        spec: EncodingSpec,
        on_progress: ProgressCallback | None = None,
        deadline: float | None = None,
        probe: SourceProbe | None = None,
    ) -> EncodingRun:
        """Start encoding in the background and return the running job."""
        plan = self.plan(source, target, spec, probe)
        encoding_run = EncodingRun(
            plan, on_progress, deadline, config=self._config.supervisor
        )
        return encoding_run.start()

    def encode(
        self,
        source: Path,
        target: Path,
        spec: EncodingSpec,
        on_progress: ProgressCallback | None = None,
        deadline: float | None = None,
        probe: SourceProbe | None = None,
    ) -> RunSuccess:
        """Encode ``source`` into ``target`` and wait for the result.

        Raises:
            ConfigError: If the spec is invalid.
            ProbeError: If the source cannot be probed.
            RunError: If the run fails, times out or is cancelled.
        """
        encoding_run = self.start(source, target, spec, on_progress, deadline, probe)
        try:
            return encoding_run.result()
        finally:
            if not encoding_run.done():
                encoding_run.cancel()
                encoding_run.wait()
