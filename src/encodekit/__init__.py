"""encodekit: drive FFmpeg from Python.

Build an EncodingSpec, validate it, synthesize an InvocationPlan and run it
under supervision with structured progress events.

Usage:
    from encodekit import EncodingSpec, VideoSpec, AudioSpec, validate, synthesize, run
"""

from encodekit.command import InvocationPlan, synthesize
from encodekit.encoder import Encoder
from encodekit.exceptions import (
    ConfigError,
    EncodekitError,
    ExternalToolFailedError,
    InvalidDurationError,
    InvalidOffsetError,
    InvalidThreadCountError,
    LaunchFailedError,
    NoStreamSelectedError,
    ProbeError,
    RunCancelledError,
    RunError,
    RunTimedOutError,
    SynthesisError,
)
from encodekit.executor import EncodingRun, RunState, RunSuccess, run
from encodekit.probe import SourceProbe, StreamInfo
from encodekit.progress import ProgressEvent, ProgressParser
from encodekit.spec import (
    AudioSpec,
    EncodingSpec,
    ToolDefault,
    ValidSpec,
    VideoSize,
    VideoSpec,
    validate,
)

__version__ = "0.1.0"

__all__ = [
    "__version__",
    # Configuration model
    "AudioSpec",
    "EncodingSpec",
    "ToolDefault",
    "ValidSpec",
    "VideoSize",
    "VideoSpec",
    "validate",
    # Synthesis
    "InvocationPlan",
    "SourceProbe",
    "StreamInfo",
    "synthesize",
    # Execution
    "Encoder",
    "EncodingRun",
    "ProgressEvent",
    "ProgressParser",
    "RunState",
    "RunSuccess",
    "run",
    # Errors
    "ConfigError",
    "EncodekitError",
    "ExternalToolFailedError",
    "InvalidDurationError",
    "InvalidOffsetError",
    "InvalidThreadCountError",
    "LaunchFailedError",
    "NoStreamSelectedError",
    "ProbeError",
    "RunCancelledError",
    "RunError",
    "RunTimedOutError",
    "SynthesisError",
]
