"""FFmpeg command synthesis.

This module compiles a validated EncodingSpec plus source/target paths into
an InvocationPlan. The argument layout is fixed:

    ffmpeg -hide_banner -nostdin -y [-filter_threads N]
           [-threads N] [-ss OFFSET] -i SOURCE
           [-threads N] <video flags | -vn> <audio flags | -an>
           [-t DURATION] [-map_metadata 0] [-f FORMAT] TARGET

The offset is always an input option (fast input seeking, output timestamps
start at zero) and the duration always an output option, so identical specs
always produce byte-identical argument vectors.
"""

from __future__ import annotations

import logging
from pathlib import Path

from encodekit.command.plan import InvocationPlan
from encodekit.core.formatting import format_number, format_seconds
from encodekit.core.paths import defuse_path
from encodekit.exceptions import ConfigFileError
from encodekit.probe.models import SourceProbe
from encodekit.spec.models import (
    AudioSpec,
    EncodingSpec,
    ThreadCount,
    ToolDefault,
    VideoSpec,
)
from encodekit.spec.validation import ValidSpec, validate

logger = logging.getLogger(__name__)


def _thread_value(threads: ThreadCount) -> str | None:
    if isinstance(threads, ToolDefault):
        return None
    return str(threads)


def build_video_args(video: VideoSpec | None) -> list[str]:
    """Build video stream arguments, or ``-vn`` when video is disabled.

    Args:
        video: Video attributes; None disables video output.

    Returns:
        List of FFmpeg arguments for the video stream.
    """
    if video is None:
        return ["-vn"]

    args: list[str] = []
    if video.codec:
        args.extend(["-c:v", video.codec])
    if video.tag:
        args.extend(["-tag:v", video.tag])
    if video.bit_rate is not None:
        args.extend(["-b:v", str(video.bit_rate)])
    if video.frame_rate is not None:
        args.extend(["-r", format_number(video.frame_rate)])
    if video.size is not None:
        args.extend(["-s", str(video.size)])
    if video.pixel_format:
        args.extend(["-pix_fmt", video.pixel_format])
    if video.quality is not None:
        args.extend(["-q:v", str(video.quality)])
    if video.faststart:
        args.extend(["-movflags", "+faststart"])
    return args


def build_audio_args(audio: AudioSpec | None) -> list[str]:
    """Build audio stream arguments, or ``-an`` when audio is disabled.

    Args:
        audio: Audio attributes; None disables audio output.

    Returns:
        List of FFmpeg arguments for the audio stream.
    """
    if audio is None:
        return ["-an"]

    args: list[str] = []
    if audio.codec:
        args.extend(["-c:a", audio.codec])
    if audio.bit_rate is not None:
        args.extend(["-b:a", str(audio.bit_rate)])
    if audio.channels is not None:
        args.extend(["-ac", str(audio.channels)])
    if audio.sampling_rate is not None:
        args.extend(["-ar", str(audio.sampling_rate)])
    if audio.quality is not None:
        args.extend(["-q:a", str(audio.quality)])
    if audio.volume is not None:
        args.extend(["-filter:a", f"volume={format_number(audio.volume)}"])
    return args


def build_arguments(spec: EncodingSpec, source: Path, target: Path) -> list[str]:
    """Build the FFmpeg argument vector (without the executable).

    Args:
        spec: A spec that has passed validation.
        source: Input path.
        target: Output path.

    Returns:
        Ordered list of arguments.
    """
    # Global options
    args = ["-hide_banner", "-nostdin", "-y"]
    filter_threads = _thread_value(spec.filter_threads)
    if filter_threads is not None:
        args.extend(["-filter_threads", filter_threads])

    # Input options
    decoding_threads = _thread_value(spec.decoding_threads)
    if decoding_threads is not None:
        args.extend(["-threads", decoding_threads])
    if spec.offset is not None:
        args.extend(["-ss", format_seconds(spec.offset)])
    args.extend(["-i", defuse_path(source)])

    # Output options
    encoding_threads = _thread_value(spec.encoding_threads)
    if encoding_threads is not None:
        args.extend(["-threads", encoding_threads])
    args.extend(build_video_args(spec.video))
    args.extend(build_audio_args(spec.audio))
    if spec.duration is not None:
        args.extend(["-t", format_seconds(spec.duration)])
    if spec.map_metadata:
        args.extend(["-map_metadata", "0"])
    if spec.format:
        args.extend(["-f", spec.format])

    args.append(defuse_path(target))
    return args


def expected_duration(spec: EncodingSpec, probe: SourceProbe | None) -> float | None:
    """Seconds of output the job should produce, if it can be known.

    The requested duration is bounded by what remains of the source after
    the offset; without a requested duration the remainder is used.
    """
    remaining = None
    if probe is not None and probe.duration is not None:
        remaining = max(0.0, probe.duration - (spec.offset or 0.0))

    if spec.duration is not None:
        if remaining is not None:
            return min(spec.duration, remaining)
        return spec.duration
    return remaining


def _default_executable() -> Path:
    """The configured or PATH ffmpeg, else the bare name."""
    from encodekit.config import get_tool_paths
    from encodekit.executor.tools import resolve_tool

    try:
        tools = get_tool_paths()
    except ConfigFileError as e:
        logger.warning("Ignoring tool paths from config: %s", e)
        tools = None
    return resolve_tool("ffmpeg", tools)


def synthesize(
    spec: ValidSpec | EncodingSpec,
    source: Path | str,
    target: Path | str,
    probe: SourceProbe | None = None,
    executable: Path | str | None = None,
) -> InvocationPlan:
    """Compile a spec into an InvocationPlan.

    Args:
        spec: A ValidSpec, or an EncodingSpec that is validated first.
        source: Input media path.
        target: Output media path.
        probe: Description of the source; used for the expected duration.
        executable: FFmpeg executable. Defaults to the configured/PATH ffmpeg.

    Returns:
        InvocationPlan ready to run.

    Raises:
        ConfigError: Only when given an EncodingSpec that fails validation.
    """
    if isinstance(spec, EncodingSpec):
        spec = validate(spec)

    if executable is None:
        executable = _default_executable()

    source_path = Path(source)
    target_path = Path(target)
    arguments = build_arguments(spec.spec, source_path, target_path)

    plan = InvocationPlan(
        executable=Path(executable),
        arguments=tuple(arguments),
        source=source_path,
        target=target_path,
        expected_duration=expected_duration(spec.spec, probe),
    )
    logger.debug(
        "Synthesized command: %s",
        plan.describe(),
        extra={"arg_count": len(arguments)},
    )
    return plan
