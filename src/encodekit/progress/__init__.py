"""FFmpeg progress parsing and metrics."""

from encodekit.progress.metrics import (
    EncodingMetricsAggregator,
    EncodingMetricsSummary,
    parse_bitrate_kbps,
)
from encodekit.progress.parser import (
    FATAL_ERROR_PATTERNS,
    ProgressEvent,
    ProgressParser,
    ProgressState,
    find_fatal_marker,
    parse_timestamp,
)

__all__ = [
    "FATAL_ERROR_PATTERNS",
    "EncodingMetricsAggregator",
    "EncodingMetricsSummary",
    "ProgressEvent",
    "ProgressParser",
    "ProgressState",
    "find_fatal_marker",
    "parse_bitrate_kbps",
    "parse_timestamp",
]
