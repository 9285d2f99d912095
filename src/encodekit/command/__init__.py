"""FFmpeg command synthesis.

Usage:
    from encodekit.command import synthesize
    plan = synthesize(validate(spec), "in.mkv", "out.mp4", probe)
"""

from encodekit.command.inspect import KnownFlags, extract_known_flags
from encodekit.command.plan import InvocationPlan
from encodekit.command.synthesizer import (
    build_arguments,
    build_audio_args,
    build_video_args,
    defuse_path,
    expected_duration,
    synthesize,
)

__all__ = [
    "InvocationPlan",
    "KnownFlags",
    "build_arguments",
    "build_audio_args",
    "build_video_args",
    "defuse_path",
    "expected_duration",
    "extract_known_flags",
    "synthesize",
]
