"""
Error taxonomy for the benchmark harness.

None of these are recovered inside the harness: any of them aborts the
remaining scenario sequence.
"""
from __future__ import annotations

from typing import Sequence


class BenchmarkError(RuntimeError):
    """Base class for every harness failure."""


class ProcessSpawnFailure(BenchmarkError):
    """The operating system could not start the requested command."""

    def __init__(self, command: Sequence[str], reason: str):
        self.command = list(command)
        self.reason = reason
        super().__init__(f"Cannot spawn {' '.join(self.command)}: {reason}")


class NonZeroExit(BenchmarkError):
    """A spawned command finished with a non-zero exit status."""

    def __init__(self, command: Sequence[str], returncode: int):
        self.command = list(command)
        self.returncode = returncode
        super().__init__(
            f"Command exited with {returncode}: {' '.join(self.command)}"
        )


class DebugToggleError(BenchmarkError):
    """The debug substitution could not be applied cleanly."""


class MissingSubstitutionTarget(DebugToggleError):
    """A substitution pattern matched nothing in the artifact."""

    def __init__(self, pattern: str, path: str = "<text>"):
        self.pattern = pattern
        self.path = path
        super().__init__(f"Pattern {pattern!r} not found in {path}")


class FilesystemError(BenchmarkError):
    """Reading, writing or deleting a harness file failed."""
