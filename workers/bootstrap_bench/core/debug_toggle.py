"""
Debug toggle — flip the compiler's compile-time debug flag on.

The toggle is a list of declarative line-level substitutions, applied to
a generated compiler artifact before it is natively built.  It is total
(every pattern must match somewhere) and single-use (no pattern may
still match afterwards), so a second application to the same artifact
fails instead of silently doing nothing.

Rules can also be read from a sed script of ``s/pattern/replacement/``
commands, the format Ribbit-style bootstrap scripts ship.  Patterns in
such scripts are POSIX basic regular expressions and are translated to
Python syntax when the script is parsed.
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from bootstrap_bench.core.errors import (
    DebugToggleError,
    FilesystemError,
    MissingSubstitutionTarget,
)

logger = logging.getLogger(__name__)


def _check_template(regex: re.Pattern, replacement: str) -> None:
    """Expand *replacement* against an empty match with *regex*'s groups."""
    names = {idx: name for name, idx in regex.groupindex.items()}
    groups = "".join(
        f"(?P<{names[i]}>)" if i in names else "()"
        for i in range(1, regex.groups + 1)
    )
    re.compile(groups).match("").expand(replacement)


@dataclass(frozen=True)
class SubstitutionRule:
    """``pattern -> replacement`` applied to each line (Python ``re`` syntax)."""

    pattern: str
    replacement: str
    all_occurrences: bool = False
    regex: re.Pattern = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        try:
            regex = re.compile(self.pattern)
            _check_template(regex, self.replacement)
        except re.error as e:
            raise DebugToggleError(
                f"Invalid substitution {self.pattern!r} -> {self.replacement!r}: {e}"
            ) from e
        object.__setattr__(self, "regex", regex)

    def apply_line(self, line: str) -> tuple[str, int]:
        return self.regex.subn(
            self.replacement, line, count=0 if self.all_occurrences else 1,
        )


DEFAULT_RULES = (
    SubstitutionRule(r"\(define debug\? #f\)", "(define debug? #t)"),
)


class DebugToggle:
    """Ordered set of substitution rules that enable debug output."""

    def __init__(self, rules: Sequence[SubstitutionRule]):
        if not rules:
            raise ValueError("DebugToggle needs at least one substitution rule")
        self.rules: List[SubstitutionRule] = list(rules)

    @classmethod
    def default(cls) -> DebugToggle:
        return cls(DEFAULT_RULES)

    @classmethod
    def from_sed_script(cls, path: Path) -> DebugToggle:
        try:
            text = Path(path).read_text()
        except OSError as e:
            raise FilesystemError(f"Cannot read sed script {path}: {e}") from e
        try:
            return cls(parse_sed_script(text))
        except ValueError as e:
            raise DebugToggleError(f"Invalid sed script {path}: {e}") from e

    def apply_text(self, text: str, origin: str = "<text>") -> str:
        """Return *text* with every rule applied line by line."""
        lines = text.splitlines(keepends=True)
        hits = [0] * len(self.rules)

        for i, line in enumerate(lines):
            for r, rule in enumerate(self.rules):
                line, n = rule.apply_line(line)
                hits[r] += n
            lines[i] = line

        for rule, n in zip(self.rules, hits):
            if n == 0:
                raise MissingSubstitutionTarget(rule.pattern, origin)

        for rule in self.rules:
            if any(rule.regex.search(line) for line in lines):
                raise DebugToggleError(
                    f"Pattern {rule.pattern!r} still matches {origin} after substitution"
                )

        return "".join(lines)

    def apply(self, path: Path, output: Optional[Path] = None) -> Path:
        """
        Toggle the artifact at *path*, writing to *output* (default: in place).

        The destination is only written once every rule has succeeded.
        """
        output = output or path
        try:
            text = path.read_text()
        except OSError as e:
            raise FilesystemError(f"Cannot read artifact {path}: {e}") from e

        toggled = self.apply_text(text, origin=str(path))

        try:
            output.write_text(toggled)
        except OSError as e:
            raise FilesystemError(f"Cannot write artifact {output}: {e}") from e
        logger.info("Debug toggle applied to %s (%d rules)", output, len(self.rules))
        return output


# ── sed script parsing ───────────────────────────────────────────────────────

# Escaped in BRE to be special, plain in Python (and the other way round).
_BRE_SWAPPED = set("(){}?+|")

_POSIX_CLASSES = {
    "alpha": "a-zA-Z",
    "digit": "0-9",
    "alnum": "0-9a-zA-Z",
    "upper": "A-Z",
    "lower": "a-z",
    "xdigit": "0-9A-Fa-f",
    "space": r" \t\n\r\f\v",
    "blank": r" \t",
    "punct": r"!-/:-@\[-`{-~",
}


def _bracket_expr(pattern: str, start: int) -> Tuple[int, str]:
    """Translate the bracket expression at *start*; returns (next index, text)."""
    i = start + 1
    out = ["["]
    if i < len(pattern) and pattern[i] == "^":
        out.append("^")
        i += 1
    if i < len(pattern) and pattern[i] == "]":
        out.append(r"\]")
        i += 1
    while i < len(pattern) and pattern[i] != "]":
        if pattern.startswith("[:", i):
            end = pattern.find(":]", i + 2)
            if end != -1 and pattern[i + 2:end] in _POSIX_CLASSES:
                out.append(_POSIX_CLASSES[pattern[i + 2:end]])
                i = end + 2
                continue
        ch = pattern[i]
        out.append("\\" + ch if ch in "\\[" else ch)
        i += 1
    if i >= len(pattern):
        raise ValueError(f"unterminated bracket expression in {pattern!r}")
    out.append("]")
    return i + 1, "".join(out)


def bre_to_python(pattern: str, delim: str = "/") -> str:
    """
    Translate a sed (POSIX basic) regular expression to Python ``re`` syntax.

    ``\\( \\) \\{ \\} \\? \\+ \\|`` become operators and their plain forms
    become literals.  ``^`` and ``$`` are anchors only at the ends of the
    expression or of a group, and a leading ``*`` is literal.  Back
    references (``\\1``) pass through unchanged.
    """
    out: List[str] = []
    i, n = 0, len(pattern)
    while i < n:
        ch = pattern[i]
        expr_start = not out or out[-1] in ("(", "|")
        if ch == "\\" and i + 1 < n:
            nxt = pattern[i + 1]
            i += 2
            if nxt == delim:
                out.append(re.escape(nxt))
            elif nxt in _BRE_SWAPPED:
                out.append(nxt)
            elif nxt in "<>":
                out.append(r"\b")
            else:
                out.append(ch + nxt)
            continue
        if ch == "[":
            i, text = _bracket_expr(pattern, i)
            out.append(text)
            continue
        if ch in _BRE_SWAPPED:
            out.append("\\" + ch)
        elif ch == "^" and not expr_start:
            out.append(r"\^")
        elif ch == "$" and not (i + 1 == n or pattern.startswith(("\\)", "\\|"), i + 1)):
            out.append(r"\$")
        elif ch == "*" and (expr_start or out[-1] == "^"):
            out.append(r"\*")
        else:
            out.append(ch)
        i += 1
    return "".join(out)


def _split_sed_fields(body: str, delim: str) -> List[str]:
    """Split on unescaped *delim*; escapes are kept for the translators."""
    fields: List[str] = []
    buf = []
    i = 0
    while i < len(body):
        ch = body[i]
        if ch == "\\" and i + 1 < len(body):
            buf.append(body[i:i + 2])
            i += 2
            continue
        if ch == delim:
            fields.append("".join(buf))
            buf = []
        else:
            buf.append(ch)
        i += 1
    fields.append("".join(buf))
    return fields


def _sed_replacement(rep: str) -> str:
    """Translate sed replacement syntax (``&``, ``\\&``, ``\\1``) to Python's."""
    out = []
    i = 0
    while i < len(rep):
        ch = rep[i]
        if ch == "\\" and i + 1 < len(rep):
            nxt = rep[i + 1]
            # \1, \n and \\ mean the same in both; other escapes are literal
            out.append(ch + nxt if nxt.isalnum() or nxt == "\\" else nxt)
            i += 2
            continue
        out.append(r"\g<0>" if ch == "&" else ch)
        i += 1
    return "".join(out)


def parse_sed_script(text: str) -> List[SubstitutionRule]:
    """
    Parse ``s/pattern/replacement/[g]`` lines into rules.

    Raises ValueError for anything that is not a substitution, and
    DebugToggleError for a rule that does not compile.
    """
    rules: List[SubstitutionRule] = []
    for lineno, raw in enumerate(text.splitlines(), start=1):
        line = raw.strip()
        if not line or line.startswith("#"):
            continue
        if len(line) < 2 or line[0] != "s":
            raise ValueError(f"sed line {lineno}: only s commands are supported: {raw!r}")
        delim = line[1]
        fields = _split_sed_fields(line[2:], delim)
        if len(fields) != 3:
            raise ValueError(f"sed line {lineno}: malformed substitution: {raw!r}")
        pattern, replacement, flags = fields
        if set(flags.strip()) - {"g"}:
            raise ValueError(f"sed line {lineno}: unsupported flags {flags!r}")
        try:
            rules.append(SubstitutionRule(
                pattern=bre_to_python(pattern, delim),
                replacement=_sed_replacement(replacement),
                all_occurrences="g" in flags,
            ))
        except DebugToggleError as e:
            raise DebugToggleError(f"sed line {lineno}: {e}") from e
    if not rules:
        raise ValueError("sed script contains no substitutions")
    return rules
