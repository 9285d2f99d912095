"""Encoding configuration models.

EncodingSpec describes what to encode: output format, time window, optional
audio/video attribute blocks, metadata copying and thread-count hints. All
models are frozen dataclasses; the ``with_*`` methods return a new instance so
calls can be chained without exposing partially built state.

Setters never validate. Cross-field rules live in
:mod:`encodekit.spec.validation`.
"""

from __future__ import annotations

import hashlib
import json
from dataclasses import asdict, dataclass, replace
from enum import Enum
from typing import Any


class ToolDefault(Enum):
    """Sentinel for "let FFmpeg decide" thread counts."""

    TOOL_DEFAULT = -1


ThreadCount = int | ToolDefault


def normalize_thread_count(value: ThreadCount) -> ThreadCount:
    """Map the legacy ``-1`` integer onto ToolDefault.TOOL_DEFAULT.

    Other values are returned unchanged, including invalid ones.
    """
    if isinstance(value, int) and not isinstance(value, bool) and value == -1:
        return ToolDefault.TOOL_DEFAULT
    return value


@dataclass(frozen=True)
class VideoSize:
    """Output frame size in pixels."""

    width: int
    height: int

    def __str__(self) -> str:
        return f"{self.width}x{self.height}"


@dataclass(frozen=True)
class AudioSpec:
    """Audio encoding attributes forwarded verbatim to FFmpeg.

    A field left as None is not emitted, so FFmpeg picks its own default.
    """

    codec: str | None = None
    """Encoder name (e.g. "aac", "libopus") or "copy" for stream copy."""

    bit_rate: int | None = None
    """Target bit rate in bits per second."""

    channels: int | None = None
    sampling_rate: int | None = None
    """Sampling rate in Hz."""

    quality: int | None = None
    """Encoder-specific VBR quality (``-q:a``)."""

    volume: float | None = None
    """Volume multiplier applied through the volume filter (1.0 = unchanged)."""

    def with_codec(self, codec: str | None) -> AudioSpec:
        return replace(self, codec=codec)

    def with_bit_rate(self, bit_rate: int | None) -> AudioSpec:
        return replace(self, bit_rate=bit_rate)

    def with_channels(self, channels: int | None) -> AudioSpec:
        return replace(self, channels=channels)

    def with_sampling_rate(self, sampling_rate: int | None) -> AudioSpec:
        return replace(self, sampling_rate=sampling_rate)

    def with_quality(self, quality: int | None) -> AudioSpec:
        return replace(self, quality=quality)

    def with_volume(self, volume: float | None) -> AudioSpec:
        return replace(self, volume=volume)


@dataclass(frozen=True)
class VideoSpec:
    """Video encoding attributes forwarded verbatim to FFmpeg.

    A field left as None is not emitted, so FFmpeg picks its own default.
    """

    codec: str | None = None
    """Encoder name (e.g. "libx264") or "copy" for stream copy."""

    tag: str | None = None
    """FourCC tag (e.g. "hvc1")."""

    bit_rate: int | None = None
    """Target bit rate in bits per second."""

    frame_rate: float | None = None
    size: VideoSize | None = None
    pixel_format: str | None = None
    quality: int | None = None
    """Encoder-specific quality scale (``-q:v``)."""

    faststart: bool = False
    """Move the index to the front of MP4/MOV outputs."""

    def with_codec(self, codec: str | None) -> VideoSpec:
        return replace(self, codec=codec)

    def with_tag(self, tag: str | None) -> VideoSpec:
        return replace(self, tag=tag)

    def with_bit_rate(self, bit_rate: int | None) -> VideoSpec:
        return replace(self, bit_rate=bit_rate)

    def with_frame_rate(self, frame_rate: float | None) -> VideoSpec:
        return replace(self, frame_rate=frame_rate)

    def with_size(self, size: VideoSize | None) -> VideoSpec:
        return replace(self, size=size)

    def with_pixel_format(self, pixel_format: str | None) -> VideoSpec:
        return replace(self, pixel_format=pixel_format)

    def with_quality(self, quality: int | None) -> VideoSpec:
        return replace(self, quality=quality)

    def with_faststart(self, faststart: bool) -> VideoSpec:
        return replace(self, faststart=faststart)


@dataclass(frozen=True)
class EncodingSpec:
    """Description of a desired transcoding job.

    Instances are immutable. Build one by chaining ``with_*`` calls::

        spec = (
            EncodingSpec()
            .with_format("mp4")
            .with_video(VideoSpec(codec="libx264"))
            .with_audio(AudioSpec(codec="aac"))
            .with_offset(5.0)
            .with_duration(10.0)
        )

    Construction never validates; pass the result through
    :func:`encodekit.spec.validation.validate` before synthesizing a command.
    """

    format: str | None = None
    """Output container format name (FFmpeg ``-f`` value)."""

    offset: float | None = None
    """Start offset in seconds. None means start of the source."""

    duration: float | None = None
    """Seconds to encode from the offset. None means until end of source."""

    audio: AudioSpec | None = None
    """Audio attributes. None disables audio output."""

    video: VideoSpec | None = None
    """Video attributes. None disables video output."""

    map_metadata: bool = False
    """Copy global metadata from the source to the output."""

    filter_threads: ThreadCount = ToolDefault.TOOL_DEFAULT
    decoding_threads: ThreadCount = ToolDefault.TOOL_DEFAULT
    encoding_threads: ThreadCount = ToolDefault.TOOL_DEFAULT

    def __post_init__(self) -> None:
        # Keep equality structural when callers pass -1 directly.
        for key in ("filter_threads", "decoding_threads", "encoding_threads"):
            object.__setattr__(self, key, normalize_thread_count(getattr(self, key)))

    def with_format(self, format: str | None) -> EncodingSpec:
        return replace(self, format=format)

    def with_offset(self, offset: float | None) -> EncodingSpec:
        return replace(self, offset=offset)

    def with_duration(self, duration: float | None) -> EncodingSpec:
        return replace(self, duration=duration)

    def with_audio(self, audio: AudioSpec | None) -> EncodingSpec:
        return replace(self, audio=audio)

    def with_video(self, video: VideoSpec | None) -> EncodingSpec:
        return replace(self, video=video)

    def with_map_metadata(self, map_metadata: bool) -> EncodingSpec:
        return replace(self, map_metadata=map_metadata)

    def with_filter_threads(self, threads: ThreadCount) -> EncodingSpec:
        return replace(self, filter_threads=normalize_thread_count(threads))

    def with_decoding_threads(self, threads: ThreadCount) -> EncodingSpec:
        return replace(self, decoding_threads=normalize_thread_count(threads))

    def with_encoding_threads(self, threads: ThreadCount) -> EncodingSpec:
        return replace(self, encoding_threads=normalize_thread_count(threads))

    def to_dict(self) -> dict[str, Any]:
        """Return the canonical plain-data form of this spec.

        Thread counts at the tool default are rendered as -1 so the result
        is JSON-serializable and round-trips through
        :func:`encodekit.spec.serialization.spec_from_dict`.
        """
        data = asdict(self)
        for key in ("filter_threads", "decoding_threads", "encoding_threads"):
            value = getattr(self, key)
            data[key] = value.value if isinstance(value, ToolDefault) else value
        return data

    def fingerprint(self) -> str:
        """Return a stable SHA-256 digest identifying this configuration.

        Specs with equal field values always share a fingerprint, making it
        suitable as a cache key for synthesized plans or encoded outputs.
        """
        canonical = json.dumps(self.to_dict(), sort_keys=True, separators=(",", ":"))
        return hashlib.sha256(canonical.encode("utf-8")).hexdigest()
