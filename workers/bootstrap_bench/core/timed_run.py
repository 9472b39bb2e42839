"""
Timed run — one measured compilation with its output captured.

IDLE -> RUNNING -> COMPLETED | FAILED.  The wrapped process's stdout and
stderr go verbatim into the trace file; elapsed time is whole seconds of
the monotonic clock and is only available after COMPLETED.
"""
from __future__ import annotations

import logging
import time
from enum import Enum, unique
from pathlib import Path
from typing import Optional, Sequence

from bootstrap_bench.core.errors import BenchmarkError, FilesystemError
from bootstrap_bench.core.invoker import CompilerForm, invoke_compiler
from bootstrap_bench.io.schema import TraceRecord, now_iso

logger = logging.getLogger(__name__)


@unique
class RunState(str, Enum):
    IDLE = "IDLE"
    RUNNING = "RUNNING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"


class TimedRun:
    """Wraps a single compiler invocation with timing and trace capture."""

    def __init__(
        self,
        label: str,
        form: CompilerForm,
        source: Path,
        target: str,
        optimization: str,
        output: Path,
        trace_path: Path,
        cwd: Path,
        host: Optional[str] = None,
        extra_args: Sequence[str] = (),
    ):
        self.label = label
        self.form = form
        self.source = source
        self.target = target
        self.optimization = optimization
        self.output = output
        self.trace_path = trace_path
        self.cwd = cwd
        self.host = host
        self.extra_args = tuple(extra_args)

        self.state = RunState.IDLE
        self.started_at: Optional[str] = None
        self.record: Optional[TraceRecord] = None

    def run(self) -> TraceRecord:
        """Execute the measured compilation; raises on any failure."""
        if self.state != RunState.IDLE:
            raise RuntimeError(f"Timed run '{self.label}' already {self.state.value}")

        try:
            self.trace_path.parent.mkdir(parents=True, exist_ok=True)
            trace = self.trace_path.open("wb")
        except OSError as e:
            self.state = RunState.FAILED
            raise FilesystemError(f"Cannot open trace file {self.trace_path}: {e}") from e

        with trace:
            self.state = RunState.RUNNING
            self.started_at = now_iso()
            t0 = time.monotonic()
            try:
                invoke_compiler(
                    self.form,
                    self.source,
                    self.target,
                    self.optimization,
                    self.output,
                    self.cwd,
                    stdout=trace,
                    host=self.host,
                    extra_args=self.extra_args,
                )
            except BenchmarkError:
                self.state = RunState.FAILED
                logger.error("Timed run '%s' failed; see %s", self.label, self.trace_path)
                raise
            t1 = time.monotonic()

        self.state = RunState.COMPLETED
        elapsed = max(0.0, t1 - t0)
        self.record = TraceRecord(
            label=self.label,
            trace_path=str(self.trace_path),
            elapsed_seconds=int(elapsed),
            elapsed_ms=int(elapsed * 1000),
            started_at=self.started_at,
            finished_at=now_iso(),
        )
        logger.debug("Timed run '%s' took %.3fs", self.label, elapsed)
        return self.record
