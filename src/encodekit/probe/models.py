"""Source media description consumed by the command synthesizer."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class StreamInfo:
    """A single stream in the source container."""

    index: int
    kind: str
    """Stream type: "video", "audio", "subtitle", "data" or "attachment"."""

    codec: str | None = None
    width: int | None = None
    height: int | None = None
    frame_rate: float | None = None
    channels: int | None = None
    sample_rate: int | None = None


@dataclass(frozen=True)
class SourceProbe:
    """Read-only description of the input media.

    Produced by a :class:`~encodekit.probe.interface.Prober` or built by the
    caller directly. ``duration`` is None when the container does not report
    one (e.g. live streams).
    """

    path: Path | None = None
    container: str | None = None
    duration: float | None = None
    streams: tuple[StreamInfo, ...] = ()

    @classmethod
    def unknown(cls, path: Path | None = None) -> SourceProbe:
        """Probe placeholder for sources that were not inspected."""
        return cls(path=path)

    @property
    def has_video(self) -> bool:
        return any(stream.kind == "video" for stream in self.streams)

    @property
    def has_audio(self) -> bool:
        return any(stream.kind == "audio" for stream in self.streams)

    def streams_of_kind(self, kind: str) -> tuple[StreamInfo, ...]:
        return tuple(stream for stream in self.streams if stream.kind == kind)
