"""
Executable metadata — identify the native compiler a scenario built.

Hash, size and, when the builder produced an ELF, its machine and GNU
build-id.  A non-ELF executable is not an error; it is simply recorded
as such.
"""
from __future__ import annotations

import hashlib
import logging
from pathlib import Path
from typing import Optional

from elftools.common.exceptions import ELFError
from elftools.elf.elffile import ELFFile

from bootstrap_bench.core.errors import FilesystemError
from bootstrap_bench.io.schema import ExecutableMeta

logger = logging.getLogger(__name__)


def hash_file(path: Path) -> str:
    """SHA-256 of a file."""
    h = hashlib.sha256()
    with open(path, "rb") as f:
        for chunk in iter(lambda: f.read(65536), b""):
            h.update(chunk)
    return h.hexdigest()


def _read_build_id(elffile: ELFFile) -> Optional[str]:
    section = elffile.get_section_by_name(".note.gnu.build-id")
    if section is None:
        return None
    for note in section.iter_notes():
        if note["n_type"] == "NT_GNU_BUILD_ID":
            return note["n_desc"]
    return None


def describe_executable(path: Path) -> ExecutableMeta:
    """Collect metadata for the executable at *path*."""
    try:
        meta = ExecutableMeta(
            path=str(path),
            sha256=hash_file(path),
            size_bytes=path.stat().st_size,
        )
    except OSError as e:
        raise FilesystemError(f"Cannot read executable {path}: {e}") from e

    with open(path, "rb") as f:
        try:
            elffile = ELFFile(f)
            meta.is_elf = True
            meta.machine = elffile.header["e_machine"]
            meta.build_id = _read_build_id(elffile)
        except ELFError as e:
            logger.debug("%s is not an ELF binary: %s", path, e)
    return meta
