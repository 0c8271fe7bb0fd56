"""Decide whether a file diff creates, modifies or deletes a file, then do it."""

from __future__ import annotations

import logging
from enum import Enum
from pathlib import Path

from .errors import HunkMismatch, InvalidHunkTargetError, PatchMismatchError, UnreadableFileError
from .hunks import FileDiff, apply_hunks

LOGGER = logging.getLogger(__name__)


class PatchOperationResult(str, Enum):
    """Kind of file-system mutation a file diff performed."""

    MODIFIED = "modified"
    CREATED = "created"
    DELETED = "deleted"


def _read_text(path: Path) -> str:
    try:
        with path.open("r", encoding="utf-8", newline="") as handle:
            return handle.read()
    except UnicodeDecodeError as error:
        raise UnreadableFileError(path, str(error)) from error


def _write_text(path: Path, content: str) -> None:
    with path.open("w", encoding="utf-8", newline="") as handle:
        handle.write(content)


def plan_and_apply(
    diff: FileDiff,
    old_path: Path | None,
    new_path: Path | None,
) -> PatchOperationResult:
    """Apply ``diff`` to disk given its resolved old/new paths.

    ``None`` stands for ``/dev/null``. Delete removes ``old_path`` without
    checking the hunks against its contents. Mismatching hunks raise
    ``PatchMismatchError`` naming the target file and the 1-based line; I/O
    failures surface as ``OSError``.
    """
    if new_path is None:
        if old_path is None:
            raise InvalidHunkTargetError("Both old and new file are all empty.")
        old_path.unlink()
        LOGGER.debug("Deleted %s", old_path)
        return PatchOperationResult.DELETED

    if old_path is None:
        original = ""
        operation = PatchOperationResult.CREATED
    else:
        original = _read_text(old_path)
        operation = PatchOperationResult.MODIFIED

    try:
        patched = apply_hunks(diff, original)
    except HunkMismatch as mismatch:
        raise PatchMismatchError(new_path.name, mismatch.line) from mismatch

    if operation is PatchOperationResult.CREATED:
        new_path.parent.mkdir(parents=True, exist_ok=True)
    _write_text(new_path, patched)
    LOGGER.debug("%s %s (%d hunk(s))", operation.value.capitalize(), new_path, len(diff.hunks))
    return operation


__all__ = ["PatchOperationResult", "plan_and_apply"]
