"""Incremental parser for FFmpeg's stderr status stream.

FFmpeg writes periodic status lines such as::

    frame=  100 fps= 30 q=28.0 size=256kB time=00:00:03.33 bitrate=629.9kbits/s speed=1.0x

terminated by a carriage return rather than a newline, interleaved with
ordinary log lines and the occasional fatal error. ProgressParser reassembles
lines across arbitrary read boundaries, turns ``time=`` markers into
ProgressEvents with a completion fraction, and latches the first recognized
fatal-error line.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass

logger = logging.getLogger(__name__)

# Lines FFmpeg prints when the job cannot succeed, as (name, pattern) pairs.
# Patterns are matched case-insensitively from the start of the line, after
# any "[demuxer @ 0x...]" context prefix.
FATAL_ERROR_PATTERNS: tuple[tuple[str, re.Pattern[str]], ...] = tuple(
    (name, re.compile(pattern, re.IGNORECASE))
    for name, pattern in (
        ("unknown encoder", r"unknown encoder\b"),
        ("unknown decoder", r"unknown decoder\b"),
        ("encoder not found", r"encoder (?:\(codec [^)]*\) )?not found\b"),
        ("decoder not found", r"decoder (?:\(codec [^)]*\) )?not found\b"),
        ("unknown input format", r"unknown input format\b"),
        ("requested output format", r"requested output format\b.*\bis not\b"),
        ("no suitable output format", r"unable to find a suitable output format\b"),
        ("no output streams", r"output file\b.*\bdoes not contain any stream"),
        ("error opening files", r"error opening (?:input|output) files?\b"),
        ("error while opening encoder", r"error while opening encoder\b"),
        ("error initializing output stream", r"error initializing output stream\b"),
        ("could not write header", r"could not write header\b"),
        ("unrecognized option", r"unrecognized option '"),
        ("conversion failed!", r"conversion failed!$"),
        # "<path>: <reason>" as printed when opening a file fails. Decoder
        # warnings ("Error while decoding stream ...: Invalid data ...") and
        # padded metadata lines ("title   : ...") do not qualify.
        (
            "cannot open file",
            r"(?!error while )(?!.*\s:\s).*\S: (?:no such file or directory"
            r"|permission denied|invalid data found when processing input)$",
        ),
    )
)

# Longest unterminated line kept; the rest of such a line is discarded
MAX_LINE_LENGTH = 64 * 1024

_CONTEXT_PREFIX = re.compile(r"^\[[^\]]*\]\s*")

_TIME_PATTERN = re.compile(r"time=\s*(-?)(\d+):(\d{2}):(\d{2}(?:\.\d+)?)")
_FRAME_PATTERN = re.compile(r"frame=\s*(\d+)")
_FPS_PATTERN = re.compile(r"fps=\s*([\d.]+)")
_BITRATE_PATTERN = re.compile(r"bitrate=\s*(\S+)")
_SPEED_PATTERN = re.compile(r"speed=\s*(\S+)")
_LINE_BREAK = re.compile(r"[\r\n]")


def parse_timestamp(line: str) -> float | None:
    """Extract the ``time=HH:MM:SS.ff`` marker from a line, in seconds.

    Negative timestamps (printed by FFmpeg before the first output frame)
    clamp to 0.0.

    Returns:
        Seconds processed, or None if the line has no usable time marker
        (including ``time=N/A``).
    """
    match = _TIME_PATTERN.search(line)
    if match is None:
        return None
    sign, hours, minutes, seconds = match.groups()
    value = int(hours) * 3600 + int(minutes) * 60 + float(seconds)
    if sign:
        return 0.0
    return value


def find_fatal_marker(line: str) -> str | None:
    """Return the name of the fatal pattern ``line`` matches, if any."""
    body = _CONTEXT_PREFIX.sub("", line.strip(), count=1)
    for name, pattern in FATAL_ERROR_PATTERNS:
        if pattern.match(body):
            return name
    return None


@dataclass(frozen=True)
class ProgressEvent:
    """Structured update describing progress or a detected fatal condition.

    Progress events carry ``elapsed`` (seconds of output processed) and,
    when the total duration is known, ``fraction`` in [0.0, 1.0]. Fatal
    events carry the offending line in ``error`` and leave ``elapsed`` at
    the last known value.
    """

    elapsed: float
    fraction: float | None = None
    frame: int | None = None
    fps: float | None = None
    bitrate: str | None = None
    speed: str | None = None
    error: str | None = None

    @property
    def is_fatal(self) -> bool:
        return self.error is not None

    @property
    def percent(self) -> float | None:
        """Completion as a percentage (0-100), or None when unknown."""
        if self.fraction is None:
            return None
        return self.fraction * 100


@dataclass
class ProgressState:
    """Running progress of one supervised run.

    Owned by a single ProgressParser; never shared between runs.
    """

    total_duration: float | None = None
    elapsed: float = 0.0
    fraction: float | None = None
    fatal_error: str | None = None
    last_event: ProgressEvent | None = None


class ProgressParser:
    """Stateful, single-pass parser for FFmpeg status output.

    Args:
        total_duration: Expected output duration in seconds, used to compute
            the completion fraction. None reports elapsed time only.
    """

    def __init__(self, total_duration: float | None = None) -> None:
        if total_duration is not None and total_duration <= 0:
            total_duration = None
        self.state = ProgressState(total_duration=total_duration)
        self._pending = ""
        self._discarding = False

    @property
    def fatal_error(self) -> str | None:
        """First fatal line seen, latched for the rest of the run."""
        return self.state.fatal_error

    def feed(self, line: str) -> ProgressEvent | None:
        """Parse one complete line.

        Returns:
            A progress event for ``time=`` lines, a fatal event for recognized
            error lines, or None for everything else.
        """
        line = line.strip()
        if not line:
            return None

        if find_fatal_marker(line) is not None:
            return self._record_fatal(line)

        elapsed = parse_timestamp(line)
        if elapsed is None:
            return None
        return self._record_progress(line, elapsed)

    def split_lines(self, text: str) -> list[str]:
        """Reassemble complete lines from an arbitrary chunk of stderr text.

        A partial trailing line is held back until the rest arrives. Both
        ``\\r`` and ``\\n`` end a line; the empty line produced by ``\\r\\n``
        is dropped.

        A tail that grows past MAX_LINE_LENGTH is emitted truncated to its
        first MAX_LINE_LENGTH characters and the rest of that line is skipped.
        """
        if self._discarding:
            match = _LINE_BREAK.search(text)
            if match is None:
                return []
            text = text[match.end() :]
            self._discarding = False

        parts = _LINE_BREAK.split(self._pending + text)
        pending = parts.pop()
        if len(pending) > MAX_LINE_LENGTH:
            logger.debug(
                "Truncating unterminated stderr line at %d characters",
                MAX_LINE_LENGTH,
            )
            parts.append(pending[:MAX_LINE_LENGTH])
            pending = ""
            self._discarding = True
        self._pending = pending
        return [line for line in parts if line.strip()]

    def remainder(self) -> str:
        """Return and clear the unterminated tail held back so far."""
        pending, self._pending = self._pending, ""
        self._discarding = False
        return pending

    def feed_chunk(self, text: str) -> list[ProgressEvent]:
        """Parse an arbitrary chunk of stderr text."""
        events = []
        for line in self.split_lines(text):
            event = self.feed(line)
            if event is not None:
                events.append(event)
        return events

    def flush(self) -> list[ProgressEvent]:
        """Parse whatever partial line remains at end of stream."""
        event = self.feed(self.remainder())
        return [event] if event is not None else []

    def _record_progress(self, line: str, elapsed: float) -> ProgressEvent:
        state = self.state
        fraction = None
        if state.total_duration is not None:
            fraction = min(1.0, elapsed / state.total_duration)
            if state.fraction is not None:
                fraction = max(fraction, state.fraction)
            state.fraction = fraction
        state.elapsed = elapsed

        event = ProgressEvent(
            elapsed=elapsed,
            fraction=fraction,
            frame=_match_int(_FRAME_PATTERN, line),
            fps=_match_float(_FPS_PATTERN, line),
            bitrate=_match_str(_BITRATE_PATTERN, line),
            speed=_match_str(_SPEED_PATTERN, line),
        )
        state.last_event = event
        return event

    def _record_fatal(self, line: str) -> ProgressEvent:
        state = self.state
        if state.fatal_error is None:
            state.fatal_error = line
            logger.debug("Fatal FFmpeg output detected: %s", line)
        event = ProgressEvent(
            elapsed=state.elapsed,
            fraction=state.fraction,
            error=line,
        )
        state.last_event = event
        return event


def _match_int(pattern: re.Pattern[str], line: str) -> int | None:
    match = pattern.search(line)
    return int(match.group(1)) if match else None


def _match_float(pattern: re.Pattern[str], line: str) -> float | None:
    match = pattern.search(line)
    if match is None:
        return None
    try:
        return float(match.group(1))
    except ValueError:
        return None


def _match_str(pattern: re.Pattern[str], line: str) -> str | None:
    match = pattern.search(line)
    if match is None or match.group(1) == "N/A":
        return None
    return match.group(1)
