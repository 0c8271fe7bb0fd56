"""End-to-end patch run: resolve, copy and patch every configured package."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, List, Optional

from .manifest import DEFAULT_CONFIG_NAME, LoadedConfig, PatchEntry, load_config
from .tools.materialize import clear_sandbox, copy_package
from .tools.resolver import PackageIndex, ResolvedPackage
from .tools.runner import AppliedPatch, apply_all

LOGGER = logging.getLogger(__name__)

NO_PATCHES_MESSAGE = "No patches found"


@dataclass(slots=True)
class PackagePatchRun:
    """Outcome of patching one resolved package."""

    entry: PatchEntry
    package: ResolvedPackage
    sandbox_dir: Path
    applied: List[AppliedPatch] = field(default_factory=list)


def resolve_entries(
    config: LoadedConfig,
    *,
    diagnostic: Callable[[str], None] | None = None,
) -> List[tuple[PatchEntry, ResolvedPackage]]:
    """Pair each configured entry with the package it resolves to, skipping failures."""
    index = PackageIndex(config.sources, diagnostic=diagnostic)
    resolved: list[tuple[PatchEntry, ResolvedPackage]] = []
    for entry in config.entries:
        package = index.find(entry.name, entry.version)
        if package is not None:
            resolved.append((entry, package))
    return resolved


def run_patches(
    config: LoadedConfig,
    *,
    echo: Callable[[str], None] | None = print,
    diagnostic: Callable[[str], None] | None = None,
) -> List[PackagePatchRun]:
    """Clear the sandbox, then copy and patch each resolved package in order.

    The first fatal error aborts the whole run; packages and files patched
    before it are left in place.
    """
    clear_sandbox(config.sandbox_root)
    runs: list[PackagePatchRun] = []
    for entry, package in resolve_entries(config, diagnostic=diagnostic):
        sandbox_dir = copy_package(package, config.sandbox_root)
        run = PackagePatchRun(entry=entry, package=package, sandbox_dir=sandbox_dir)
        runs.append(run)
        LOGGER.debug("Patching %s in %s", package.label, sandbox_dir)
        run.applied = apply_all(
            entry.name,
            entry.patches,
            sandbox_dir,
            base_dir=entry.base_dir,
            echo=echo,
        )
    return runs


def patch(
    config_path: Path | str | None = None,
    *,
    echo: Optional[Callable[[str], None]] = print,
    diagnostic: Optional[Callable[[str], None]] = None,
) -> bool:
    """Apply all configured patches; returns whether any package was patched.

    Intended both for the CLI and for build scripts that patch their
    dependencies before building. ``config_path`` defaults to
    ``pkgpatch.yaml`` in the current directory.
    """
    path = Path(config_path) if config_path is not None else Path(DEFAULT_CONFIG_NAME)
    config = load_config(path, diagnostic=diagnostic)
    runs = run_patches(config, echo=echo, diagnostic=diagnostic)
    if not runs and echo is not None:
        echo(NO_PATCHES_MESSAGE)
    return bool(runs)


__all__ = [
    "NO_PATCHES_MESSAGE",
    "PackagePatchRun",
    "patch",
    "resolve_entries",
    "run_patches",
]
