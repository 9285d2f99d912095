"""Throughput figures collected from progress events.

The supervisor feeds every non-fatal ProgressEvent into an
EncodingMetricsAggregator and attaches the summary to RunSuccess.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from encodekit.progress.parser import ProgressEvent

_BITRATE = re.compile(r"^([\d.]+)\s*([km]?)(?:bits/s)?$", re.IGNORECASE)
_UNIT_SCALE = {"": 1.0, "k": 1.0, "m": 1000.0}


@dataclass(frozen=True)
class EncodingMetricsSummary:
    """Throughput of one run.

    Attributes:
        avg_fps: Mean of the positive fps readings.
        peak_fps: Highest fps reading.
        avg_bitrate_kbps: Mean output bitrate in kbit/s.
        total_frames: Frame counter from the last status line.
        sample_count: Progress events seen.
    """

    avg_fps: float | None = None
    peak_fps: float | None = None
    avg_bitrate_kbps: int | None = None
    total_frames: int | None = None
    sample_count: int = 0


def parse_bitrate_kbps(bitrate: str | None) -> int | None:
    """Convert FFmpeg's ``bitrate=`` text ("629.9kbits/s", "5.2Mbits/s") to kbit/s.

    A bare number is taken as kbit/s. Returns None for "N/A" and anything
    unparseable.
    """
    if not bitrate:
        return None
    match = _BITRATE.match(bitrate.strip())
    if match is None:
        return None
    try:
        value = float(match.group(1))
    except ValueError:
        return None
    return round(value * _UNIT_SCALE[match.group(2).lower()])


class EncodingMetricsAggregator:
    """Running totals over a stream of progress events.

    Usage:
        aggregator = EncodingMetricsAggregator()
        for event in events:
            aggregator.add_sample(event)
        summary = aggregator.summarize()
    """

    def __init__(self) -> None:
        self._samples = 0
        self._fps_total = 0.0
        self._fps_count = 0
        self._fps_peak: float | None = None
        self._kbps_total = 0
        self._kbps_count = 0
        self._last_frame: int | None = None

    def add_sample(self, event: ProgressEvent) -> None:
        """Record one event. Fatal events carry no figures and are skipped."""
        if event.is_fatal:
            return
        self._samples += 1

        if event.fps:
            self._fps_total += event.fps
            self._fps_count += 1
            if self._fps_peak is None or event.fps > self._fps_peak:
                self._fps_peak = event.fps

        kbps = parse_bitrate_kbps(event.bitrate)
        if kbps:
            self._kbps_total += kbps
            self._kbps_count += 1

        if event.frame is not None:
            self._last_frame = event.frame

    def summarize(self) -> EncodingMetricsSummary:
        return EncodingMetricsSummary(
            avg_fps=self._fps_total / self._fps_count if self._fps_count else None,
            peak_fps=self._fps_peak,
            avg_bitrate_kbps=(
                self._kbps_total // self._kbps_count if self._kbps_count else None
            ),
            total_frames=self._last_frame,
            sample_count=self._samples,
        )
