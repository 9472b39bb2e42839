"""
Shared pytest fixtures for bootstrap_bench tests.

The "compiler" is a tiny POSIX shell script that reproduces itself into
its ``-o`` output, so it can be compiled, natively "built" (copied and
made executable) and run again exactly like a self-hosting compiler.
Its debug flag is the line ``DEBUG=off``.

Tests are automatically skipped on Windows.
"""
import platform
import stat
import textwrap
from pathlib import Path

import pytest

from bootstrap_bench.policy.profile import BenchProfile
from bootstrap_bench.policy.scenarios import CleanupPolicy
from bootstrap_bench.tests.helpers import COPY_BUILDER

if platform.system() == "Windows":
    collect_ignore_glob = ["test_*.py"]


FAKE_COMPILER = textwrap.dedent("""\
    #!/bin/sh
    # fake self-hosting compiler
    DEBUG=off
    out=""
    src=""
    host=""
    while [ $# -gt 0 ]; do
        case "$1" in
            -o) out="$2"; shift 2 ;;
            -c) host="$2"; shift 2 ;;
            -t|-l) shift 2 ;;
            *) src="$1"; shift ;;
        esac
    done
    if [ -n "$host" ]; then
        exec "$host" -o "$out" "$src"
    fi
    echo "compiling $src"
    if [ "$DEBUG" = "on" ]; then
        echo "debug: tracing enabled"
    fi
    cp "$0" "$out"
""")

FAILING_COMPILER = textwrap.dedent("""\
    #!/bin/sh
    echo "error: cannot compile" >&2
    exit 3
""")

TURN_ON_DEBUG_SED = "# enable debug\ns/^DEBUG=off$/DEBUG=on/\n"


def _write_script(path: Path, text: str) -> Path:
    path.write_text(text)
    path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return path


@pytest.fixture
def workdir(tmp_path: Path) -> Path:
    """Working directory with compiler binary, source and sed script."""
    wd = tmp_path / "bench"
    wd.mkdir()
    _write_script(wd / "rsc", FAKE_COMPILER)
    (wd / "C.src").write_text(FAKE_COMPILER)
    (wd / "turn-on-debug.sed").write_text(TURN_ON_DEBUG_SED)
    return wd


@pytest.fixture
def failing_compiler(workdir: Path) -> Path:
    return _write_script(workdir / "broken-rsc", FAILING_COMPILER)


@pytest.fixture
def profile(workdir: Path) -> BenchProfile:
    """Profile wired to the fake compiler, sh as interpreter."""
    return BenchProfile(
        workdir=workdir,
        compiler_source=workdir / "C.src",
        compiler_binary=workdir / "rsc",
        interpreter="sh",
        native_builder=COPY_BUILDER,
        debug_sed_script=workdir / "turn-on-debug.sed",
        cleanup_policy=CleanupPolicy.REMOVE_ALL,
    )
