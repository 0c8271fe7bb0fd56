"""Patch file references and the path conventions of their diff dialects."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Callable, Mapping, Tuple


class PatchSource(str, Enum):
    """Diff dialect a patch file was produced with."""

    DEFAULT = "Default"
    GITHUB_PR_DIFF = "GithubPrDiff"


@dataclass(frozen=True, slots=True)
class PatchItem:
    """A patch file to apply and the dialect its paths are written in."""

    path: Path
    source: PatchSource = PatchSource.DEFAULT


def _strip_prefix(path: str, prefix: str) -> str:
    return path[len(prefix):] if path.startswith(prefix) else path


def _default_paths(old_path: str, new_path: str) -> Tuple[str, str]:
    return old_path, new_path


def _github_pr_paths(old_path: str, new_path: str) -> Tuple[str, str]:
    return _strip_prefix(old_path, "a/"), _strip_prefix(new_path, "b/")


_NORMALIZERS: Mapping[PatchSource, Callable[[str, str], Tuple[str, str]]] = {
    PatchSource.DEFAULT: _default_paths,
    PatchSource.GITHUB_PR_DIFF: _github_pr_paths,
}


def normalize_paths(source: PatchSource, old_path: str, new_path: str) -> Tuple[str, str]:
    """Return in-tree ``(old, new)`` paths for a diff header written in ``source``'s dialect."""
    return _NORMALIZERS[source](old_path, new_path)


__all__ = ["PatchItem", "PatchSource", "normalize_paths"]
