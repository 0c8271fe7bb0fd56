"""Error taxonomy raised while applying patch files to sandboxed packages."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Mapping


class PatchError(RuntimeError):
    """Raised when a patch fails validation or application."""

    def __init__(self, message: str, *, details: Mapping[str, Any] | None = None) -> None:
        super().__init__(message)
        self.details: dict[str, Any] = dict(details or {})


class HunkMismatch(Exception):
    """Signal from the hunk applier carrying the 0-based original line index."""

    def __init__(self, line: int) -> None:
        super().__init__(f"hunk does not match original content at line index {line}")
        self.line = line


class PatchMismatchError(PatchError):
    """A context or removed line no longer matches the file on disk."""

    def __init__(self, file: Path | str, line: int) -> None:
        self.file = Path(file)
        self.line = line
        super().__init__(
            f"failed to apply patch to {self.file.as_posix()} on line {line + 1}",
            details={"file": self.file.as_posix(), "line": line + 1},
        )


class MalformedPatchError(PatchError):
    """The diff parser rejected the patch text."""


class MissingPatchFileError(PatchError):
    """The configured patch file does not exist."""

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)
        super().__init__(
            f'Unable to find patch file with path: "{self.path.as_posix()}"',
            details={"path": self.path.as_posix()},
        )


class UnreadableFileError(PatchError):
    """A patch file or patch target is not valid UTF-8 text."""

    def __init__(self, path: Path | str, reason: str) -> None:
        self.path = Path(path)
        super().__init__(
            f"Unable to read {self.path.as_posix()} as UTF-8 text: {reason}",
            details={"path": self.path.as_posix(), "reason": reason},
        )


class SandboxEscapeError(PatchError):
    """A patch-referenced path resolves outside the sandbox root."""


class UnverifiablePathError(SandboxEscapeError):
    """A nonexistent path containing ``..`` cannot be proven to stay inside the sandbox."""


class InvalidHunkTargetError(PatchError):
    """Both sides of a file diff are ``/dev/null``."""


__all__ = [
    "HunkMismatch",
    "InvalidHunkTargetError",
    "MalformedPatchError",
    "MissingPatchFileError",
    "PatchError",
    "PatchMismatchError",
    "SandboxEscapeError",
    "UnreadableFileError",
    "UnverifiablePathError",
]
