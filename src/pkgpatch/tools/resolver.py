"""Locate unpacked source packages by name and optional version specifier."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterable, Iterator, List

from packaging.specifiers import SpecifierSet
from packaging.utils import canonicalize_name
from packaging.version import InvalidVersion, Version

LOGGER = logging.getLogger(__name__)

_BARE_VERSION = re.compile(r"^\s*v?\d+(?:\.\d+)*\s*$")


@dataclass(frozen=True, slots=True)
class ResolvedPackage:
    """A source tree found in one of the configured source indexes."""

    name: str
    version: Version | None
    root: Path

    @property
    def label(self) -> str:
        return self.name if self.version is None else f"{self.name} {self.version}"


def parse_version_requirement(raw: str) -> SpecifierSet:
    """Parse a version requirement into a ``SpecifierSet``.

    A bare version such as ``1.0`` is a prefix requirement (``==1.0.*``), so it
    matches every ``1.0.x`` release. Anything else must be a PEP 440 specifier;
    ``InvalidSpecifier`` propagates otherwise.
    """
    text = raw.strip()
    if _BARE_VERSION.match(text):
        return SpecifierSet(f"=={text.lstrip('v')}.*")
    return SpecifierSet(text)


def _split_source_dir(name: str) -> tuple[str, Version | None]:
    """Split ``<name>-<version>`` directory names; unversioned names pass through."""
    stem, sep, suffix = name.rpartition("-")
    if sep and stem:
        try:
            return stem, Version(suffix)
        except InvalidVersion:
            pass
    return name, None


class PackageIndex:
    """Searchable view over directories of unpacked ``<name>-<version>`` trees."""

    def __init__(
        self,
        roots: Iterable[Path | str],
        *,
        diagnostic: Callable[[str], None] | None = None,
    ) -> None:
        self.roots: tuple[Path, ...] = tuple(Path(root) for root in roots)
        self._diagnostic = diagnostic

    def _report(self, message: str) -> None:
        if self._diagnostic is None:
            LOGGER.warning(message)
        else:
            self._diagnostic(message)

    def packages(self) -> Iterator[ResolvedPackage]:
        """Yield every package found in the source indexes, in a stable order."""
        for root in self.roots:
            if not root.is_dir():
                LOGGER.debug("Skipping missing source index %s", root)
                continue
            for child in sorted(root.iterdir(), key=lambda item: item.name):
                if not child.is_dir() or child.name.startswith("."):
                    continue
                name, version = _split_source_dir(child.name)
                yield ResolvedPackage(name=name, version=version, root=child)

    def candidates(self, name: str, specifier: SpecifierSet | None = None) -> List[ResolvedPackage]:
        """Return all packages matching ``name`` and ``specifier``."""
        wanted = canonicalize_name(name)
        matches: list[ResolvedPackage] = []
        for package in self.packages():
            if canonicalize_name(package.name) != wanted:
                continue
            if specifier is not None:
                if package.version is None or not specifier.contains(package.version, prereleases=True):
                    continue
            matches.append(package)
        return matches

    def find(self, name: str, specifier: SpecifierSet | None = None) -> ResolvedPackage | None:
        """Return the package to patch for ``name``.

        Not-found and ambiguous lookups are diagnostics rather than errors. An
        ambiguous lookup still returns the first candidate.
        """
        matches = self.candidates(name, specifier)
        if not matches:
            self._report(f"Unable to find package {name} in dependencies")
            return None
        if len(matches) > 1:
            self._report(f"There are multiple versions of {name} available. Try specifying a version.")
        return matches[0]


__all__ = [
    "PackageIndex",
    "ResolvedPackage",
    "parse_version_requirement",
]
