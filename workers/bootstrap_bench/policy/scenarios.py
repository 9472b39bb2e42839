"""
Scenarios — the fixed benchmark matrix.

Four (build mode, invocation) pairs, always run in the same order.
Every file a scenario touches is named after its label, so labels must
be unique and reruns overwrite the previous run's files.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, unique
from typing import Tuple


@unique
class BuildMode(str, Enum):
    RELEASE = "release"
    DEBUG = "debug"


@unique
class Invocation(str, Enum):
    PRECOMPILED = "precompiled"
    INTERPRETED = "interpreted"


@unique
class CleanupPolicy(str, Enum):
    """What happens to built executables once the matrix completes."""
    KEEP_ALL = "keep-all"
    REMOVE_ALL = "remove-all"


TRACE_SUFFIX = ".trace.txt"


@dataclass(frozen=True)
class Scenario:
    """One (build mode, invocation) pair to benchmark."""

    label: str
    build_mode: BuildMode
    invocation: Invocation

    @property
    def is_debug(self) -> bool:
        return self.build_mode == BuildMode.DEBUG

    def trace_name(self) -> str:
        return f"{self.label}{TRACE_SUFFIX}"

    def artifact_name(self, suffix: str) -> str:
        return f"{self.label}{suffix}"

    def executable_name(self) -> str:
        return self.label

    def result_name(self, suffix: str) -> str:
        return f"{self.label}-result{suffix}"


DEFAULT_SCENARIOS: Tuple[Scenario, ...] = (
    Scenario("release-binary", BuildMode.RELEASE, Invocation.PRECOMPILED),
    Scenario("debug-binary", BuildMode.DEBUG, Invocation.PRECOMPILED),
    Scenario("release-interpreted", BuildMode.RELEASE, Invocation.INTERPRETED),
    Scenario("debug-interpreted", BuildMode.DEBUG, Invocation.INTERPRETED),
)


def check_unique_labels(scenarios: Tuple[Scenario, ...]) -> None:
    """Raise ValueError if two scenarios would share trace/artifact names."""
    seen = set()
    for sc in scenarios:
        if sc.label in seen:
            raise ValueError(f"Duplicate scenario label: {sc.label}")
        seen.add(sc.label)
