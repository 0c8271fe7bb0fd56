"""Apply a package's ordered list of patch files inside its sandbox copy."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterable, List

from .diffparse import parse_patch
from .errors import MissingPatchFileError, PatchError, UnreadableFileError
from .hunks import DEV_NULL, FileDiff
from .planner import PatchOperationResult, plan_and_apply
from .sandbox import resolve_in_sandbox
from .sources import PatchItem, normalize_paths
from .telemetry import emit_patch_event

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class AppliedPatch:
    """One file diff that was applied successfully."""

    package: str
    old_path: str
    new_path: str
    operation: PatchOperationResult

    @property
    def location(self) -> str:
        # Modifications touch a single path, so only the old side is shown.
        if self.operation is PatchOperationResult.MODIFIED:
            return f"{self.package}: {self.old_path}"
        return f"{self.package}: {self.old_path} -> {self.new_path}"

    def describe(self) -> str:
        return f"Patched {self.location}"


def read_patch_file(path: Path, *, display: Path | None = None) -> str:
    """Read a patch file, distinguishing a missing file from other I/O errors."""
    try:
        with path.open("r", encoding="utf-8", newline="") as handle:
            return handle.read()
    except FileNotFoundError as error:
        raise MissingPatchFileError(display or path) from error
    except UnicodeDecodeError as error:
        raise UnreadableFileError(display or path, str(error)) from error


def apply_file_diff(name: str, item: PatchItem, diff: FileDiff, sandbox_dir: Path) -> AppliedPatch:
    """Normalise, sandbox-check and apply a single file diff."""
    old_rel, new_rel = normalize_paths(item.source, diff.old_path, diff.new_path)
    label = f"{name}: {old_rel} -> {new_rel}"

    new_path = None if new_rel == DEV_NULL else resolve_in_sandbox(sandbox_dir, new_rel, label)
    old_path = None if old_rel == DEV_NULL else resolve_in_sandbox(sandbox_dir, old_rel, label)

    operation = plan_and_apply(diff, old_path, new_path)
    return AppliedPatch(package=name, old_path=old_rel, new_path=new_rel, operation=operation)


def apply_all(
    name: str,
    patches: Iterable[PatchItem],
    sandbox_dir: Path,
    *,
    base_dir: Path | None = None,
    echo: Callable[[str], None] | None = None,
) -> List[AppliedPatch]:
    """Apply every patch file in ``patches`` to the package copy in ``sandbox_dir``.

    Patch files are processed in order and each file diff in the order the
    parser yields it. Relative patch paths are read from ``base_dir`` when
    given. The first failure aborts the batch; files already written stay
    written. Each applied file diff is reported through ``echo``.
    """
    sandbox_root = Path(sandbox_dir).resolve()
    applied: list[AppliedPatch] = []

    for item in patches:
        patch_path = item.path if base_dir is None else Path(base_dir) / item.path
        patch_text = read_patch_file(patch_path, display=item.path)
        diffs = parse_patch(patch_text)
        LOGGER.debug("Parsed %d file diff(s) from %s", len(diffs), patch_path)

        for diff in diffs:
            try:
                result = apply_file_diff(name, item, diff, sandbox_root)
            except PatchError as error:
                emit_patch_event(
                    "patch_file_failed",
                    package=name,
                    patch=patch_path,
                    old_path=diff.old_path,
                    new_path=diff.new_path,
                    error=str(error),
                    details=error.details,
                )
                raise

            applied.append(result)
            emit_patch_event(
                "patch_file_applied",
                package=name,
                patch=patch_path,
                old_path=result.old_path,
                new_path=result.new_path,
                operation=result.operation,
            )
            LOGGER.info("Patched %s", result.location)
            if echo is not None:
                echo(result.describe())

    return applied


__all__ = ["AppliedPatch", "apply_all", "apply_file_diff", "read_patch_file"]
