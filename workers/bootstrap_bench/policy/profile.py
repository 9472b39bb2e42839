"""
Profile — the fixed flag set and filesystem layout of one benchmark.

Everything the components need is carried here explicitly; nothing
reads the process working directory.  Build with ``BenchProfile.v0()``
or from settings via ``BenchSettings.to_profile()``.
"""
from __future__ import annotations

import shlex
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple

from bootstrap_bench import PROFILE_ID
from bootstrap_bench.policy.scenarios import CleanupPolicy

DEFAULT_NATIVE_BUILDER = "gsc -exe -o {output} {artifact}"


@dataclass(frozen=True)
class BenchProfile:
    """Paths and compiler flags shared by all scenarios."""

    workdir: Path
    compiler_source: Path
    compiler_binary: Path
    interpreter: str = "gsi"
    native_builder: Tuple[str, ...] = tuple(shlex.split(DEFAULT_NATIVE_BUILDER))
    target: str = "scm"
    optimization: str = "max"
    artifact_suffix: str = ".scm"
    trace_dir: Optional[Path] = None
    cleanup_policy: CleanupPolicy = CleanupPolicy.REMOVE_ALL
    debug_sed_script: Optional[Path] = None
    measure_via_driver: bool = False
    profile_id: str = PROFILE_ID
    extra_args: Tuple[str, ...] = ()

    @classmethod
    def v0(cls, workdir: Path) -> BenchProfile:
        """The Ribbit layout: ./rsc compiling rsc.scm, built with gsc."""
        workdir = Path(workdir).resolve()
        return cls(
            workdir=workdir,
            compiler_source=workdir / "rsc.scm",
            compiler_binary=workdir / "rsc",
        )

    @property
    def trace_root(self) -> Path:
        return self.trace_dir if self.trace_dir is not None else self.workdir
