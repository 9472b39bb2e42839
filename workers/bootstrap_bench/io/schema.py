"""
Schema — Pydantic models for benchmark results.

Results are returned to the caller and summarised on stdout; the only
files a benchmark leaves behind are raw trace files and compiler output.
"""
from __future__ import annotations

from datetime import datetime, timezone
from typing import List, Optional

from pydantic import BaseModel, Field

from bootstrap_bench import BENCH_VERSION, PACKAGE_NAME


class TraceRecord(BaseModel):
    """Outcome of one completed timed run."""
    label: str
    trace_path: str
    elapsed_seconds: int = Field(ge=0)
    elapsed_ms: int = Field(default=0, ge=0)
    started_at: Optional[str] = None
    finished_at: Optional[str] = None


class ToolchainIdentity(BaseModel):
    """Versions of the external tools, first line of each banner."""
    interpreter: str = "unknown"
    native_builder: str = "unknown"
    os_release: str = "unknown"
    kernel: str = "unknown"
    arch: str = "unknown"


class ExecutableMeta(BaseModel):
    """The native compiler a scenario built."""
    path: str
    sha256: str
    size_bytes: int
    is_elf: bool = False
    machine: Optional[str] = None    # EM_X86_64, etc.
    build_id: Optional[str] = None


class ScenarioResult(BaseModel):
    label: str
    build_mode: str          # release | debug
    invocation: str          # precompiled | interpreted
    artifact_path: str
    executable_path: str
    result_path: str
    executable: Optional[ExecutableMeta] = None
    trace: Optional[TraceRecord] = None
    status: str = "PENDING"  # PENDING | SUCCESS | FAILED


class BenchReport(BaseModel):
    """All scenario results of one matrix run."""
    package_name: str = PACKAGE_NAME
    bench_version: str = BENCH_VERSION
    profile_id: str
    toolchain: ToolchainIdentity = ToolchainIdentity()
    started_at: str
    finished_at: Optional[str] = None
    status: str = "RUNNING"  # RUNNING | SUCCESS | FAILED
    scenarios: List[ScenarioResult] = Field(default_factory=list)

    def compute_status(self) -> str:
        """SUCCESS only when every scenario succeeded."""
        if not self.scenarios:
            return "FAILED"
        if all(s.status == "SUCCESS" for s in self.scenarios):
            return "SUCCESS"
        return "FAILED"


def now_iso() -> str:
    """Current UTC time as ISO 8601 string."""
    return datetime.now(timezone.utc).isoformat()
