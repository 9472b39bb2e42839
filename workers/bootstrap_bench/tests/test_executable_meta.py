"""Tests for built-executable metadata."""
import hashlib
import shutil
from pathlib import Path

import pytest

from bootstrap_bench.core.errors import FilesystemError
from bootstrap_bench.core.executable_meta import describe_executable, hash_file


def _is_elf(path: Path) -> bool:
    with open(path, "rb") as f:
        return f.read(4) == b"\x7fELF"


class TestDescribeExecutable:

    def test_script_is_not_elf(self, workdir: Path):
        exe = workdir / "rsc"
        meta = describe_executable(exe)
        assert meta.is_elf is False
        assert meta.machine is None
        assert meta.size_bytes == exe.stat().st_size
        assert meta.sha256 == hashlib.sha256(exe.read_bytes()).hexdigest()

    def test_real_elf(self, tmp_path: Path):
        sh = shutil.which("sh")
        if sh is None or not _is_elf(Path(sh).resolve()):
            pytest.skip("no ELF shell binary on this system")
        exe = tmp_path / "sh-copy"
        shutil.copyfile(Path(sh).resolve(), exe)
        meta = describe_executable(exe)
        assert meta.is_elf is True
        assert meta.machine and meta.machine.startswith("EM_")

    def test_missing_executable(self, tmp_path: Path):
        with pytest.raises(FilesystemError):
            describe_executable(tmp_path / "gone")

    def test_hash_deterministic(self, workdir: Path):
        assert hash_file(workdir / "rsc") == hash_file(workdir / "C.src")
