"""
Compiler invoker — run one compiler form against a source file.

A compiler form is either a precompiled native binary or an interpreter
running the compiler's source.  Each invocation is a single blocking
subprocess; the process handle is scoped so it is always waited on and
closed, including when the caller's stdout sink raises.
"""
from __future__ import annotations

import logging
import shlex
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import IO, List, Optional, Sequence

from bootstrap_bench.core.errors import NonZeroExit, ProcessSpawnFailure

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CompilerForm:
    """Executable form of the compiler."""

    executable: str
    source: Optional[Path] = None  # set only for interpreted forms

    @classmethod
    def precompiled(cls, binary: Path | str) -> CompilerForm:
        return cls(executable=str(binary))

    @classmethod
    def interpreted(cls, interpreter: str, source: Path | str) -> CompilerForm:
        return cls(executable=interpreter, source=Path(source))

    def argv(self) -> List[str]:
        """Command prefix that starts this compiler."""
        if self.source is None:
            return [self.executable]
        return [self.executable, str(self.source)]

    def describe(self) -> str:
        return " ".join(self.argv())


def build_compiler_args(
    source: Path,
    target: str,
    optimization: str,
    output: Path,
    host: Optional[str] = None,
    extra_args: Sequence[str] = (),
) -> List[str]:
    """Compiler flags: ``-t target -l level [-c host] -o output source``."""
    args = ["-t", target, "-l", optimization]
    if host is not None:
        args += ["-c", host]
    args += list(extra_args)
    args += ["-o", str(output), str(source)]
    return args


def run_command(
    cmd: Sequence[str],
    cwd: Path,
    stdout: Optional[IO] = None,
) -> int:
    """
    Run *cmd* to completion in *cwd*.

    When *stdout* is given, the process's stdout and stderr both go to it.
    Returns 0; raises ProcessSpawnFailure or NonZeroExit otherwise.
    """
    cmd = [str(c) for c in cmd]
    logger.debug("exec (cwd=%s): %s", cwd, shlex.join(cmd))
    stderr = subprocess.STDOUT if stdout is not None else None
    try:
        proc = subprocess.Popen(cmd, cwd=str(cwd), stdout=stdout, stderr=stderr)
    except OSError as e:
        raise ProcessSpawnFailure(cmd, str(e)) from e

    with proc:
        returncode = proc.wait()

    if returncode != 0:
        raise NonZeroExit(cmd, returncode)
    return returncode


def invoke_compiler(
    form: CompilerForm,
    source: Path,
    target: str,
    optimization: str,
    output: Path,
    cwd: Path,
    stdout: Optional[IO] = None,
    host: Optional[str] = None,
    extra_args: Sequence[str] = (),
) -> int:
    """
    Invoke *form* once to compile *source* into *output*.

    Parameters
    ----------
    form : CompilerForm
        Precompiled binary or interpreter + compiler source.
    source : Path
        The file being compiled (the compiler's own source).
    target, optimization : str
        Values for ``-t`` and ``-l``.
    output : Path
        Where the compiler writes its generated code.
    cwd : Path
        Working directory of the spawned process.
    stdout : file object, optional
        Sink for the process's output; inherited when None.
    host : str, optional
        Compiler host passed with ``-c``.
    """
    cmd = form.argv() + build_compiler_args(
        source, target, optimization, output, host=host, extra_args=extra_args,
    )
    logger.info("Invoking %s -> %s", form.describe(), output)
    return run_command(cmd, cwd, stdout=stdout)
