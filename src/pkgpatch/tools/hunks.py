"""Strict, in-memory application of unified diff hunks.

The applier walks the original text with a single cursor and never searches
for a better offset: every context and removed line must match the original
exactly at the position implied by the hunk anchors and the lines before it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Sequence, Tuple

from .errors import HunkMismatch

DEV_NULL = "/dev/null"


class LineKind(str, Enum):
    """Role of a single line inside a hunk."""

    CONTEXT = "context"
    ADD = "add"
    REMOVE = "remove"


@dataclass(frozen=True, slots=True)
class Line:
    """One hunk body line with its diff marker already removed."""

    kind: LineKind
    text: str

    @classmethod
    def context(cls, text: str) -> "Line":
        return cls(LineKind.CONTEXT, text)

    @classmethod
    def add(cls, text: str) -> "Line":
        return cls(LineKind.ADD, text)

    @classmethod
    def remove(cls, text: str) -> "Line":
        return cls(LineKind.REMOVE, text)


@dataclass(frozen=True, slots=True)
class Hunk:
    """Contiguous change region anchored at a 1-based old-file line."""

    old_start: int
    old_count: int
    lines: Tuple[Line, ...] = ()

    @classmethod
    def from_lines(cls, old_start: int, lines: Iterable[Line]) -> "Hunk":
        """Build a hunk whose old count is derived from its context/remove lines."""
        collected = tuple(lines)
        old_count = sum(1 for line in collected if line.kind is not LineKind.ADD)
        return cls(old_start=old_start, old_count=old_count, lines=collected)


@dataclass(frozen=True, slots=True)
class FileDiff:
    """All hunks that apply to one old/new file pair."""

    old_path: str
    new_path: str
    hunks: Tuple[Hunk, ...] = field(default_factory=tuple)

    @property
    def creates_file(self) -> bool:
        return self.old_path == DEV_NULL

    @property
    def deletes_file(self) -> bool:
        return self.new_path == DEV_NULL


def split_physical_lines(text: str) -> list[str]:
    """Split ``text`` into lines without their terminators.

    Only ``\\n`` separates lines; a trailing ``\\r`` is dropped from each line so
    CRLF sources compare equal to LF hunks. A final newline does not produce an
    empty trailing line.
    """
    if not text:
        return []
    lines = text.split("\n")
    if text.endswith("\n"):
        lines.pop()
    return [_strip_carriage_return(line) for line in lines]


def _strip_carriage_return(line: str) -> str:
    return line[:-1] if line.endswith("\r") else line


def _original_line(lines: Sequence[str], index: int) -> str | None:
    if 0 <= index < len(lines):
        return lines[index]
    return None


def apply_hunks(diff: FileDiff, original: str) -> str:
    """Apply ``diff`` to ``original`` and return the patched text.

    Raises ``HunkMismatch`` with the 0-based index of the original line where a
    context or removed line diverged. Reading past the end of the original is
    reported the same way.
    """
    old_lines = split_physical_lines(original)
    out: list[str] = []
    old_line = 0

    for hunk in diff.hunks:
        while hunk.old_start != 0 and old_line < hunk.old_start - 1:
            current = _original_line(old_lines, old_line)
            if current is None:
                raise HunkMismatch(old_line)
            out.append(current)
            old_line += 1

        for line in hunk.lines:
            if line.kind is LineKind.ADD:
                out.append(line.text)
                continue

            if _original_line(old_lines, old_line) != line.text:
                raise HunkMismatch(old_line)
            if line.kind is LineKind.CONTEXT:
                out.append(line.text)
            old_line += 1

    out.extend(old_lines[old_line:])
    if original.endswith("\n"):
        out.append("")
    return "\n".join(out)


__all__ = [
    "DEV_NULL",
    "FileDiff",
    "Hunk",
    "Line",
    "LineKind",
    "apply_hunks",
    "split_physical_lines",
]
