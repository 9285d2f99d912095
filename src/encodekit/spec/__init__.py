"""Encoding configuration: models, validation and serialization.

Usage:
    from encodekit.spec import EncodingSpec, VideoSpec, AudioSpec, validate
"""

from .models import (
    AudioSpec,
    EncodingSpec,
    ThreadCount,
    ToolDefault,
    VideoSize,
    VideoSpec,
)
from .serialization import load_spec_file, spec_from_dict, spec_to_dict
from .validation import ValidSpec, is_valid, validate

__all__ = [
    # Models
    "AudioSpec",
    "EncodingSpec",
    "ThreadCount",
    "ToolDefault",
    "VideoSize",
    "VideoSpec",
    # Validation
    "ValidSpec",
    "is_valid",
    "validate",
    # Serialization
    "load_spec_file",
    "spec_from_dict",
    "spec_to_dict",
]
