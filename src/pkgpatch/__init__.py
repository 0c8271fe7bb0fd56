"""Patch third-party source packages with unified-diff files inside a sandbox."""

from .tools import PatchError, PatchItem, PatchSource, apply_all
from .workflow import patch

__all__ = ["PatchError", "PatchItem", "PatchSource", "apply_all", "patch"]
