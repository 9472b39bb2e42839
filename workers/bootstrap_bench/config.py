"""
Benchmark configuration
"""
import shlex
from pathlib import Path
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

from bootstrap_bench.policy.profile import DEFAULT_NATIVE_BUILDER, BenchProfile
from bootstrap_bench.policy.scenarios import CleanupPolicy


class BenchSettings(BaseSettings):
    """Benchmark settings (env prefix BOOTSTRAP_BENCH_)"""

    model_config = SettingsConfigDict(
        env_prefix="BOOTSTRAP_BENCH_",
        env_file=".env",
        case_sensitive=True,
        extra="ignore",
    )

    # Layout
    WORKDIR: Path = Path(".")
    COMPILER_SOURCE: str = "rsc.scm"
    COMPILER_BINARY: str = "./rsc"
    TRACE_DIR: Optional[Path] = None

    # Toolchain
    INTERPRETER: str = "gsi"
    NATIVE_BUILDER: str = DEFAULT_NATIVE_BUILDER

    # Compiler flags
    TARGET: str = "scm"
    OPTIMIZATION: str = "max"
    ARTIFACT_SUFFIX: str = ".scm"
    EXTRA_ARGS: str = ""  # appended to every compiler invocation, shell-quoted

    # Behaviour
    CLEANUP_POLICY: CleanupPolicy = CleanupPolicy.REMOVE_ALL
    DEBUG_SED_SCRIPT: Optional[Path] = None
    MEASURE_VIA_DRIVER: bool = False

    def to_profile(self) -> BenchProfile:
        """
        Freeze these settings into an explicit BenchProfile.

        Raises ValueError for an empty or badly quoted command setting.
        """
        workdir = self.WORKDIR.resolve()
        native_builder = tuple(shlex.split(self.NATIVE_BUILDER))
        if not native_builder:
            raise ValueError("NATIVE_BUILDER must not be empty")

        def _abs(p) -> Path:
            p = Path(p)
            return p if p.is_absolute() else workdir / p

        return BenchProfile(
            workdir=workdir,
            compiler_source=_abs(self.COMPILER_SOURCE),
            compiler_binary=_abs(self.COMPILER_BINARY),
            interpreter=self.INTERPRETER,
            native_builder=native_builder,
            target=self.TARGET,
            optimization=self.OPTIMIZATION,
            artifact_suffix=self.ARTIFACT_SUFFIX,
            trace_dir=_abs(self.TRACE_DIR) if self.TRACE_DIR is not None else None,
            cleanup_policy=self.CLEANUP_POLICY,
            debug_sed_script=_abs(self.DEBUG_SED_SCRIPT) if self.DEBUG_SED_SCRIPT else None,
            measure_via_driver=self.MEASURE_VIA_DRIVER,
            extra_args=tuple(shlex.split(self.EXTRA_ARGS)),
        )
