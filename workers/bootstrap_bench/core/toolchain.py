"""
Toolchain discovery — record which interpreter and native builder ran.

Informational only: every probe is best-effort and falls back to
"unknown", so a missing tool is reported by the build step, not here.
"""
from __future__ import annotations

import platform
import subprocess
from pathlib import Path
from typing import List

from bootstrap_bench.io.schema import ToolchainIdentity


def _first_line(cmd: List[str], timeout: int = 5) -> str:
    """First non-empty output line of *cmd*, or "unknown"."""
    try:
        r = subprocess.run(
            cmd, stdin=subprocess.DEVNULL, capture_output=True, text=True, timeout=timeout,
        )
    except (OSError, subprocess.SubprocessError):
        return "unknown"
    for line in (r.stdout + r.stderr).splitlines():
        if line.strip():
            return line.strip()
    return "unknown"


def _os_release() -> str:
    try:
        for line in Path("/etc/os-release").read_text().splitlines():
            if line.startswith("PRETTY_NAME="):
                return line.split("=", 1)[1].strip('"')
    except OSError:
        pass
    return platform.system() or "unknown"


def capture_toolchain(interpreter: str, native_builder: str) -> ToolchainIdentity:
    """Probe ``<tool> -v`` for the interpreter and the native builder."""
    return ToolchainIdentity(
        interpreter=_first_line([interpreter, "-v"]),
        native_builder=_first_line([native_builder, "-v"]),
        os_release=_os_release(),
        kernel=platform.release() or "unknown",
        arch=platform.machine() or "unknown",
    )
