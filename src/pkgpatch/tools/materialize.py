"""Copy resolved packages into the sandbox directory they are patched in."""

from __future__ import annotations

import logging
import shutil
from pathlib import Path

from .resolver import ResolvedPackage

LOGGER = logging.getLogger(__name__)


def clear_sandbox(sandbox_root: Path) -> None:
    """Remove ``sandbox_root`` and everything in it; a missing directory is fine."""
    try:
        shutil.rmtree(sandbox_root)
    except FileNotFoundError:
        return
    LOGGER.debug("Cleared sandbox %s", sandbox_root)


def copy_package(package: ResolvedPackage, sandbox_root: Path) -> Path:
    """Copy ``package`` into ``sandbox_root`` and return the canonical copy path.

    The copy keeps the source directory's name, so each package gets its own
    namespaced directory under the sandbox root.
    """
    source = Path(package.root)
    if not source.name:
        raise ValueError(f"Dependency folder does not have a name: {source}")
    sandbox_root.mkdir(parents=True, exist_ok=True)
    destination = sandbox_root / source.name
    shutil.copytree(source, destination, symlinks=True, dirs_exist_ok=True)
    LOGGER.debug("Copied %s into %s", package.label, destination)
    return destination.resolve()


__all__ = ["clear_sandbox", "copy_package"]
