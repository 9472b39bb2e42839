"""
Native builder — turn a generated source artifact into an executable.

The builder itself (gsc by default) is an external tool; this module
only fills in its command template and checks that the executable
appeared.  Template tokens may contain ``{artifact}`` and ``{output}``.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Sequence

from bootstrap_bench.core.errors import FilesystemError
from bootstrap_bench.core.invoker import run_command

logger = logging.getLogger(__name__)


def render_command(template: Sequence[str], artifact: Path, output: Path) -> List[str]:
    """Substitute artifact/output paths into each template token.

    Only the two placeholders are replaced; any other braces (``${CC}``
    in a shell snippet, say) are passed through untouched.
    """
    if not template:
        raise ValueError("Native builder command template is empty")
    return [
        tok.replace("{artifact}", str(artifact)).replace("{output}", str(output))
        for tok in template
    ]


def build_native(
    template: Sequence[str],
    artifact: Path,
    output: Path,
    cwd: Path,
) -> Path:
    """Build *artifact* into the executable *output* and return its path."""
    if not artifact.is_file():
        raise FilesystemError(f"Build artifact missing: {artifact}")

    cmd = render_command(template, artifact, output)
    logger.info("Native build %s -> %s", artifact.name, output)
    run_command(cmd, cwd)

    if not output.exists():
        raise FilesystemError(f"Native builder produced no executable at {output}")
    return output
