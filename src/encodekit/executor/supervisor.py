"""Supervised execution of FFmpeg.

EncodingRun owns the lifecycle of one external process::

    NOT_STARTED -> RUNNING -> SUCCEEDED | FAILED | CANCELLED | TIMED_OUT

Two daemon threads serve each run. The reader thread pumps stderr through a
ProgressParser and delivers events to the caller's callback in line order.
The watcher thread waits for the process to exit, for cancellation, or for
the deadline, runs the terminate/kill sequence when needed, and records the
terminal result. The caller is never blocked unless it asks to be, through
wait(), result() or the module-level run().
"""

from __future__ import annotations

import asyncio
import codecs
import contextvars
import logging
import subprocess  # nosec B404 - subprocess is required for FFmpeg invocation
import threading
import time
import uuid
from collections import deque
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import IO

from encodekit.command.plan import InvocationPlan
from encodekit.config.models import SupervisorConfig
from encodekit.core.formatting import format_timestamp
from encodekit.exceptions import (
    ExternalToolFailedError,
    LaunchFailedError,
    RunCancelledError,
    RunError,
    RunTimedOutError,
)
from encodekit.logging.context import run_context
from encodekit.progress.metrics import EncodingMetricsAggregator, EncodingMetricsSummary
from encodekit.progress.parser import ProgressEvent, ProgressParser, ProgressState

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[ProgressEvent], None]

# Bytes requested per stderr read
_READ_SIZE = 4096


class RunState(Enum):
    """Lifecycle state of an EncodingRun."""

    NOT_STARTED = "not_started"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    CANCELLED = "cancelled"
    TIMED_OUT = "timed_out"

    @property
    def is_terminal(self) -> bool:
        return self not in (RunState.NOT_STARTED, RunState.RUNNING)


@dataclass(frozen=True)
class RunSuccess:
    """Result of a run that completed without errors."""

    exit_code: int
    elapsed_seconds: float
    """Wall-clock seconds between launch and exit."""

    last_event: ProgressEvent | None
    metrics: EncodingMetricsSummary
    diagnostic_lines: tuple[str, ...] = ()


class EncodingRun:
    """One supervised FFmpeg process.

    Example:
        run = EncodingRun(plan, on_progress=lambda e: print(e.percent))
        run.start()
        ...
        run.cancel()          # from any thread, at any time
        success = run.result()  # raises RunCancelledError here

    Args:
        plan: The invocation to execute. A plan is launched at most once.
        on_progress: Called with every progress or fatal event, in output
            order, from the reader thread. Exceptions it raises are logged
            and otherwise ignored.
        deadline: Seconds after launch before the run is stopped and
            reported as timed out. None uses the configured default.
        config: Supervisor settings. None loads them from the environment
            and config file.
        run_id: Identifier attached to log records. Generated if omitted.
    """

    def __init__(
        self,
        plan: InvocationPlan,
        on_progress: ProgressCallback | None = None,
        deadline: float | None = None,
        config: SupervisorConfig | None = None,
        run_id: str | None = None,
    ) -> None:
        if config is None:
            from encodekit.config import get_config

            config = get_config().supervisor

        self.plan = plan
        self.run_id = run_id or uuid.uuid4().hex[:8]
        self._on_progress = on_progress
        self._config = config
        self._deadline = deadline if deadline is not None else config.default_deadline
        if self._deadline is not None and self._deadline <= 0:
            raise ValueError(f"deadline must be positive, got {self._deadline}")

        self._state = RunState.NOT_STARTED
        self._state_lock = threading.Lock()
        self._cancel_event = threading.Event()
        self._done_event = threading.Event()

        self._parser = ProgressParser(plan.expected_duration)
        self._metrics = EncodingMetricsAggregator()
        self._diagnostics: deque[str] = deque(maxlen=config.diagnostic_lines)

        self._process: subprocess.Popen[bytes] | None = None
        self._reader: threading.Thread | None = None
        self._watcher: threading.Thread | None = None
        self._started_at: float | None = None
        self._success: RunSuccess | None = None
        self._error: RunError | None = None

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    @property
    def state(self) -> RunState:
        return self._state

    @property
    def pid(self) -> int | None:
        """Process id of the external tool once launched."""
        return self._process.pid if self._process is not None else None

    @property
    def progress(self) -> ProgressState:
        """Live progress state. Treat as read-only."""
        return self._parser.state

    @property
    def deadline(self) -> float | None:
        return self._deadline

    def done(self) -> bool:
        """Return True once the run reached a terminal state."""
        return self._done_event.is_set()

    # ------------------------------------------------------------------
    # Control
    # ------------------------------------------------------------------

    def start(self) -> EncodingRun:
        """Launch the external process.

        Returns:
            self, for chaining.

        Raises:
            LaunchFailedError: If the executable cannot be started.
            RuntimeError: If the run was already started or cancelled.
        """
        with run_context(self.run_id, self.plan.source):
            launch_error: OSError | ValueError | None = None
            error: LaunchFailedError | None = None
            # Held across the launch so cancel() never observes a
            # half-started run.
            with self._state_lock:
                if self._state is not RunState.NOT_STARTED:
                    raise RuntimeError(
                        f"Run {self.run_id} cannot be started from state "
                        f"{self._state.value}"
                    )
                if self._cancel_event.is_set():
                    raise RuntimeError(f"Run {self.run_id} was cancelled")
                logger.info("Starting ffmpeg: %s", self.plan.describe())
                try:
                    self._process = subprocess.Popen(  # nosec B603 - argv list
                        self.plan.command,
                        stdin=subprocess.DEVNULL,
                        stdout=subprocess.DEVNULL,
                        stderr=subprocess.PIPE,
                    )
                except (OSError, ValueError) as e:
                    launch_error = e
                    error = LaunchFailedError(str(self.plan.executable), str(e))
                    self._settle(RunState.FAILED, error=error)
                else:
                    self._started_at = time.monotonic()
                    self._state = RunState.RUNNING

            if error is not None:
                logger.error("%s", error)
                self._announce(RunState.FAILED, error)
                raise error from launch_error

            # Each thread needs its own context copy; a Context can only be
            # entered by one thread at a time.
            self._reader = threading.Thread(
                target=contextvars.copy_context().run,
                args=(self._pump_stderr,),
                name=f"encodekit-reader-{self.run_id}",
                daemon=True,
            )
            self._watcher = threading.Thread(
                target=contextvars.copy_context().run,
                args=(self._watch,),
                name=f"encodekit-watcher-{self.run_id}",
                daemon=True,
            )
            self._reader.start()
            self._watcher.start()

        return self

    def cancel(self) -> None:
        """Request cancellation.

        Safe to call from any thread, any number of times. A run that has
        not started becomes CANCELLED immediately; a running one is
        terminated by the watcher thread. Terminal runs are unaffected.
        """
        error: RunCancelledError | None = None
        with self._state_lock:
            if self._state.is_terminal:
                return
            self._cancel_event.set()
            if self._state is RunState.NOT_STARTED:
                error = RunCancelledError()
                self._settle(RunState.CANCELLED, error=error)

        if error is not None:
            self._announce(RunState.CANCELLED, error)
        else:
            logger.debug("Cancellation requested for run %s", self.run_id)

    def wait(self, timeout: float | None = None) -> bool:
        """Block until the run finishes or ``timeout`` elapses.

        Returns:
            True if the run reached a terminal state.
        """
        return self._done_event.wait(timeout)

    def result(self, timeout: float | None = None) -> RunSuccess:
        """Return the outcome of the run, waiting for it if necessary.

        Raises:
            RunError: The typed failure (LaunchFailedError,
                ExternalToolFailedError, RunCancelledError, RunTimedOutError).
            TimeoutError: If ``timeout`` elapsed before the run finished.
            RuntimeError: If the run was never started.
        """
        if self._state is RunState.NOT_STARTED:
            raise RuntimeError(f"Run {self.run_id} has not been started")
        if not self._done_event.wait(timeout):
            raise TimeoutError(f"Run {self.run_id} is still in progress")
        if self._error is not None:
            raise self._error
        assert self._success is not None
        return self._success

    async def result_async(self) -> RunSuccess:
        """Await the outcome without blocking the event loop.

        Cancelling the awaiting task cancels the run.
        """
        try:
            return await asyncio.to_thread(self.result)
        except asyncio.CancelledError:
            self.cancel()
            raise

    def __enter__(self) -> EncodingRun:
        if self._state is RunState.NOT_STARTED:
            self.start()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if not self.done():
            self.cancel()
            self.wait()

    # ------------------------------------------------------------------
    # Reader thread
    # ------------------------------------------------------------------

    def _pump_stderr(self) -> None:
        """Read stderr until EOF, feeding every line to the parser."""
        assert self._process is not None
        stream: IO[bytes] | None = self._process.stderr
        decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        try:
            assert stream is not None
            while True:
                chunk = stream.read1(_READ_SIZE)  # type: ignore[attr-defined]
                if not chunk:
                    break
                self._handle_text(decoder.decode(chunk))
        except (ValueError, OSError) as e:
            # Pipe closed underneath us
            logger.debug("Stderr reader stopped: %s", e)
        finally:
            self._handle_text(decoder.decode(b"", final=True))
            tail = self._parser.remainder()
            if tail.strip():
                self._handle_line(tail)

    def _handle_text(self, text: str) -> None:
        for line in self._parser.split_lines(text):
            self._handle_line(line)

    def _handle_line(self, line: str) -> None:
        event = self._parser.feed(line)
        if event is None or event.is_fatal:
            self._diagnostics.append(line.strip())
        if event is None:
            return

        if event.is_fatal:
            logger.warning("FFmpeg reported a fatal error: %s", event.error)
        else:
            self._metrics.add_sample(event)

        if self._on_progress is not None:
            try:
                self._on_progress(event)
            except Exception as e:
                logger.warning("Progress callback error: %s", e)

    # ------------------------------------------------------------------
    # Watcher thread
    # ------------------------------------------------------------------

    def _watch(self) -> None:
        assert self._process is not None
        process = self._process
        try:
            stop_state = self._wait_for_exit(process)
            if stop_state is not None:
                self._stop_process(process, stop_state)
            self._drain_reader(process)
            self._record_outcome(process, stop_state)
        except Exception as e:
            logger.exception("Supervision of run %s failed", self.run_id)
            if process.poll() is None:
                process.kill()
                process.wait()
            error = RunError(f"Supervision failed: {e}", tuple(self._diagnostics))
            error.__cause__ = e
            self._finish(RunState.FAILED, error=error)

    def _wait_for_exit(self, process: subprocess.Popen[bytes]) -> RunState | None:
        """Wait for exit, cancellation or deadline.

        Returns:
            CANCELLED or TIMED_OUT if the process must be stopped, None if
            it exited on its own.
        """
        assert self._started_at is not None
        poll_interval = self._config.poll_interval

        while process.poll() is None:
            timeout = poll_interval
            if self._deadline is not None:
                remaining = self._deadline - (time.monotonic() - self._started_at)
                if remaining <= 0:
                    return RunState.TIMED_OUT
                timeout = min(timeout, remaining)
            if self._cancel_event.wait(timeout):
                if process.poll() is None:
                    return RunState.CANCELLED
                break
        return None

    def _stop_process(self, process: subprocess.Popen[bytes], reason: RunState) -> None:
        """Terminate, wait out the grace period, then kill."""
        grace = self._config.grace_period
        logger.info(
            "Stopping ffmpeg (pid %d): %s",
            process.pid,
            "cancelled" if reason is RunState.CANCELLED else "deadline exceeded",
        )
        process.terminate()
        try:
            process.wait(timeout=grace)
        except subprocess.TimeoutExpired:
            logger.warning(
                "ffmpeg (pid %d) did not exit within %ss, killing", process.pid, grace
            )
            process.kill()
            process.wait()

    def _drain_reader(self, process: subprocess.Popen[bytes]) -> None:
        """Wait for the reader to consume remaining output, then close stderr."""
        assert self._reader is not None
        self._reader.join(timeout=self._config.stderr_drain_timeout)
        if self._reader.is_alive():
            # Closing the pipe now would block on the reader's buffer lock
            logger.error(
                "Stderr reader for run %s did not finish after exit. "
                "Thread will be abandoned (potential leak).",
                self.run_id,
            )
            return
        if process.stderr is not None:
            process.stderr.close()

    def _record_outcome(
        self, process: subprocess.Popen[bytes], stop_state: RunState | None
    ) -> None:
        assert self._started_at is not None
        exit_code = process.returncode
        elapsed = time.monotonic() - self._started_at
        diagnostics = tuple(self._diagnostics)
        fatal = self._parser.fatal_error

        if stop_state is RunState.CANCELLED:
            self._finish(RunState.CANCELLED, error=RunCancelledError(diagnostics))
        elif stop_state is RunState.TIMED_OUT:
            assert self._deadline is not None
            self._finish(
                RunState.TIMED_OUT,
                error=RunTimedOutError(self._deadline, diagnostics),
            )
        elif fatal is not None or exit_code != 0:
            self._finish(
                RunState.FAILED,
                error=ExternalToolFailedError(exit_code, diagnostics, fatal),
            )
        else:
            self._finish(
                RunState.SUCCEEDED,
                success=RunSuccess(
                    exit_code=exit_code,
                    elapsed_seconds=elapsed,
                    last_event=self._parser.state.last_event,
                    metrics=self._metrics.summarize(),
                    diagnostic_lines=diagnostics,
                ),
            )

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    def _finish(
        self,
        state: RunState,
        success: RunSuccess | None = None,
        error: RunError | None = None,
    ) -> None:
        with self._state_lock:
            if not self._settle(state, success, error):
                return
        self._announce(state, error)

    def _settle(
        self,
        state: RunState,
        success: RunSuccess | None = None,
        error: RunError | None = None,
    ) -> bool:
        """Record the terminal outcome. Caller holds ``_state_lock``."""
        if self._state.is_terminal:
            return False
        self._state = state
        self._success = success
        self._error = error
        return True

    def _announce(self, state: RunState, error: RunError | None) -> None:
        if error is None:
            logger.info(
                "Run %s succeeded (%s of output)",
                self.run_id,
                format_timestamp(self._parser.state.elapsed),
            )
        else:
            logger.info("Run %s ended as %s: %s", self.run_id, state.value, error)
        self._done_event.set()


def run(
    plan: InvocationPlan,
    on_progress: ProgressCallback | None = None,
    deadline: float | None = None,
    config: SupervisorConfig | None = None,
) -> RunSuccess:
    """Run a plan to completion.

    Blocks the calling thread; progress is delivered from the reader thread.
    If the caller is interrupted (e.g. KeyboardInterrupt), the process is
    stopped before the exception propagates.

    Returns:
        RunSuccess for a clean exit.

    Raises:
        RunError: The typed failure of the run.
    """
    encoding_run = EncodingRun(plan, on_progress, deadline, config)
    encoding_run.start()
    try:
        return encoding_run.result()
    finally:
        if not encoding_run.done():
            encoding_run.cancel()
            encoding_run.wait()
