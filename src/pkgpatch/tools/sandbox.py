"""Resolve patch-referenced paths without letting them leave the sandbox."""

from __future__ import annotations

from pathlib import Path, PurePath

from .errors import SandboxEscapeError, UnverifiablePathError


def _has_parent_segment(path: PurePath) -> bool:
    return any(part == ".." for part in path.parts)


def _canonical_ancestor(candidate: Path) -> Path | None:
    """Canonicalise the deepest part of ``candidate`` that is present on disk.

    Dangling symlinks count as present so that a create through one is
    checked against where the link points.
    """
    for path in (candidate, *candidate.parents):
        if path.is_symlink() or path.exists():
            return path.resolve()
    return None


def _escape_error(label: str, relative_path: str, **details: str) -> SandboxEscapeError:
    return SandboxEscapeError(
        f"Patch file tried to escape dependency folder ({label})",
        details={"path": relative_path, **details},
    )


def resolve_in_sandbox(root: Path, relative_path: str, label: str) -> Path:
    """Join ``relative_path`` onto ``root`` and prove the result stays inside it.

    ``root`` must already be canonical. Existing targets are canonicalised
    (following symlinks) and compared against ``root``. For targets that do
    not exist yet, the nearest existing ancestor is canonicalised and compared
    instead, and a ``..`` segment anywhere in the joined path is refused.
    Symlink loops are refused as well.

    ``label`` identifies the file diff in error messages, for example
    ``"serde: a.txt -> b.txt"``.
    """
    candidate = root / relative_path
    if PurePath(relative_path).is_absolute():
        raise _escape_error(label, relative_path)

    # Symlink loops raise RuntimeError before Python 3.13 and OSError(ELOOP) after.
    try:
        canonical = candidate.resolve(strict=True)
    except (FileNotFoundError, NotADirectoryError):
        canonical = None
    except (RuntimeError, OSError) as error:
        raise _escape_error(label, relative_path, reason=str(error)) from error

    if canonical is None:
        if _has_parent_segment(candidate):
            raise UnverifiablePathError(
                f"Failed to canonicalize path and the path has .. in it. ({label})",
                details={"path": relative_path},
            )
        try:
            canonical = _canonical_ancestor(candidate)
        except (RuntimeError, OSError) as error:
            raise _escape_error(label, relative_path, reason=str(error)) from error

    if canonical is None or not canonical.is_relative_to(root):
        resolved = "" if canonical is None else canonical.as_posix()
        raise _escape_error(label, relative_path, resolved=resolved)
    return candidate


__all__ = ["resolve_in_sandbox"]
