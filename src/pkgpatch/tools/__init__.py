"""Patch application engine and the collaborators that feed it."""

from .diffparse import parse_patch
from .errors import (
    HunkMismatch,
    InvalidHunkTargetError,
    MalformedPatchError,
    MissingPatchFileError,
    PatchError,
    PatchMismatchError,
    SandboxEscapeError,
    UnreadableFileError,
    UnverifiablePathError,
)
from .hunks import DEV_NULL, FileDiff, Hunk, Line, LineKind, apply_hunks
from .materialize import clear_sandbox, copy_package
from .planner import PatchOperationResult, plan_and_apply
from .resolver import PackageIndex, ResolvedPackage, parse_version_requirement
from .runner import AppliedPatch, apply_all, apply_file_diff
from .sandbox import resolve_in_sandbox
from .sources import PatchItem, PatchSource, normalize_paths

__all__ = [
    "AppliedPatch",
    "DEV_NULL",
    "FileDiff",
    "Hunk",
    "HunkMismatch",
    "InvalidHunkTargetError",
    "Line",
    "LineKind",
    "MalformedPatchError",
    "MissingPatchFileError",
    "PackageIndex",
    "PatchError",
    "PatchItem",
    "PatchMismatchError",
    "PatchOperationResult",
    "PatchSource",
    "ResolvedPackage",
    "SandboxEscapeError",
    "UnreadableFileError",
    "UnverifiablePathError",
    "apply_all",
    "apply_file_diff",
    "apply_hunks",
    "clear_sandbox",
    "copy_package",
    "normalize_paths",
    "parse_patch",
    "parse_version_requirement",
    "plan_and_apply",
    "resolve_in_sandbox",
]
