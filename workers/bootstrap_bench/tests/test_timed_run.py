"""Tests for the timed run state machine."""
from pathlib import Path

import pytest

from bootstrap_bench.core.errors import FilesystemError, NonZeroExit, ProcessSpawnFailure
from bootstrap_bench.core.invoker import CompilerForm
from bootstrap_bench.core.timed_run import RunState, TimedRun


def _timed(workdir: Path, form: CompilerForm, trace: Path, label: str = "t") -> TimedRun:
    return TimedRun(
        label=label,
        form=form,
        source=workdir / "C.src",
        target="scm",
        optimization="max",
        output=workdir / f"{label}-result.scm",
        trace_path=trace,
        cwd=workdir,
    )


class TestCompleted:

    def test_state_and_record(self, workdir: Path):
        trace = workdir / "t.trace.txt"
        tr = _timed(workdir, CompilerForm.precompiled(workdir / "rsc"), trace)
        assert tr.state == RunState.IDLE

        record = tr.run()

        assert tr.state == RunState.COMPLETED
        assert isinstance(record.elapsed_seconds, int)
        assert record.elapsed_seconds >= 0
        assert record.elapsed_ms >= 0
        assert record.trace_path == str(trace)
        assert record.started_at and record.finished_at
        assert tr.record is record

    def test_trace_holds_stdout_verbatim(self, workdir: Path):
        trace = workdir / "t.trace.txt"
        _timed(workdir, CompilerForm.precompiled(workdir / "rsc"), trace).run()
        assert trace.read_text() == f"compiling {workdir / 'C.src'}\n"

    def test_output_written(self, workdir: Path):
        _timed(workdir, CompilerForm.precompiled(workdir / "rsc"), workdir / "t.trace.txt").run()
        assert (workdir / "t-result.scm").exists()

    def test_rerun_overwrites_trace(self, workdir: Path):
        trace = workdir / "t.trace.txt"
        trace.write_text("stale contents from an earlier run\n" * 10)
        _timed(workdir, CompilerForm.precompiled(workdir / "rsc"), trace).run()
        assert "stale" not in trace.read_text()

    def test_single_use(self, workdir: Path):
        tr = _timed(workdir, CompilerForm.precompiled(workdir / "rsc"), workdir / "t.trace.txt")
        tr.run()
        with pytest.raises(RuntimeError):
            tr.run()

    def test_trace_dir_created(self, workdir: Path):
        trace = workdir / "traces" / "nested" / "t.trace.txt"
        _timed(workdir, CompilerForm.precompiled(workdir / "rsc"), trace).run()
        assert trace.exists()


class TestFailed:

    def test_non_zero_exit(self, workdir: Path, failing_compiler: Path):
        trace = workdir / "f.trace.txt"
        tr = _timed(workdir, CompilerForm.precompiled(failing_compiler), trace, label="f")
        with pytest.raises(NonZeroExit):
            tr.run()
        assert tr.state == RunState.FAILED
        assert tr.record is None
        # stderr of the failing compiler is kept for diagnosis
        assert "error: cannot compile" in trace.read_text()

    def test_spawn_failure(self, workdir: Path):
        tr = _timed(workdir, CompilerForm.precompiled(workdir / "missing"), workdir / "m.trace.txt")
        with pytest.raises(ProcessSpawnFailure):
            tr.run()
        assert tr.state == RunState.FAILED

    def test_unwritable_trace(self, workdir: Path):
        blocker = workdir / "blocker"
        blocker.write_text("")
        tr = _timed(workdir, CompilerForm.precompiled(workdir / "rsc"), blocker / "t.trace.txt")
        with pytest.raises(FilesystemError):
            tr.run()
        assert tr.state == RunState.FAILED
