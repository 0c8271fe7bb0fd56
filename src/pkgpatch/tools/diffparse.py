"""Translate ``unidiff`` parse results into the engine's diff model."""

from __future__ import annotations

import logging
import re
from typing import Iterator

from unidiff import PatchSet
from unidiff.errors import UnidiffParseError

from .errors import MalformedPatchError
from .hunks import FileDiff, Hunk, Line

LOGGER = logging.getLogger(__name__)

# ``diff -u`` separates the timestamp with a tab, but hand-edited patches often
# use spaces which unidiff keeps as part of the filename.
_TRAILING_TIMESTAMP = re.compile(
    r"\s+\d{4}-\d{2}-\d{2}[ T]\d{2}:\d{2}(?::\d{2}(?:\.\d+)?)?(?:\s*[+-]\d{4})?\s*$"
)

_PARSE_FAILURE = "Unable to parse patch file"


def _clean_header_path(raw: str) -> str:
    """Drop timestamps and surrounding quotes from a ``---``/``+++`` operand."""
    path = _TRAILING_TIMESTAMP.sub("", raw).strip()
    if len(path) >= 2 and path[0] == path[-1] == '"':
        path = path[1:-1]
    return path


def _line_text(value: str) -> str:
    text = value[:-1] if value.endswith("\n") else value
    return text[:-1] if text.endswith("\r") else text


def _convert_hunk(hunk) -> Hunk:
    lines: list[Line] = []
    for entry in hunk:
        text = _line_text(entry.value)
        if entry.is_added:
            lines.append(Line.add(text))
        elif entry.is_removed:
            lines.append(Line.remove(text))
        elif entry.is_context:
            lines.append(Line.context(text))
        # "\ No newline at end of file" markers carry no content.
    return Hunk(old_start=hunk.source_start, old_count=hunk.source_length, lines=tuple(lines))


def iter_file_diffs(patch_text: str) -> Iterator[FileDiff]:
    """Yield one ``FileDiff`` per file section of ``patch_text``."""
    try:
        patch_set = PatchSet(patch_text)
    except UnidiffParseError as error:
        LOGGER.debug("unidiff rejected patch text: %s", error)
        raise MalformedPatchError(_PARSE_FAILURE, details={"reason": str(error)}) from error

    for patched_file in patch_set:
        yield FileDiff(
            old_path=_clean_header_path(patched_file.source_file or ""),
            new_path=_clean_header_path(patched_file.target_file or ""),
            hunks=tuple(_convert_hunk(hunk) for hunk in patched_file),
        )


def parse_patch(patch_text: str) -> list[FileDiff]:
    """Parse a (possibly multi-file) unified diff.

    A text that yields no file sections is rejected the same way as a syntax
    error; the runner treats both as an unparseable patch file.
    """
    diffs = list(iter_file_diffs(patch_text))
    if not diffs:
        raise MalformedPatchError(_PARSE_FAILURE, details={"reason": "no file sections"})
    return diffs


__all__ = ["iter_file_diffs", "parse_patch"]
