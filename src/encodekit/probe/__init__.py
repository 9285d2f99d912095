"""Source media probing.

The encoding core only reads SourceProbe objects; FFprobeProber is the
default way to produce them.
"""

from encodekit.probe.ffprobe import FFprobeProber
from encodekit.probe.interface import Prober
from encodekit.probe.models import SourceProbe, StreamInfo
from encodekit.probe.parsers import parse_ffprobe_output

__all__ = [
    "FFprobeProber",
    "Prober",
    "SourceProbe",
    "StreamInfo",
    "parse_ffprobe_output",
]
