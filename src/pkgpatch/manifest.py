"""Configuration file describing which packages receive which patch files."""

from __future__ import annotations

import copy
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping, Optional

import yaml
from packaging.specifiers import InvalidSpecifier, SpecifierSet
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .tools.resolver import parse_version_requirement
from .tools.sources import PatchItem, PatchSource

LOGGER = logging.getLogger(__name__)

DEFAULT_CONFIG_NAME = "pkgpatch.yaml"

DEFAULT_CONFIG_TEMPLATE: Dict[str, Any] = {
    "paths": {
        "sources": ["vendor"],
        "sandbox": "target/patch",
    },
    "members": [],
    "patch": {},
}

Diagnostic = Callable[[str], None]


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be loaded or validated."""


class RecordModel(BaseModel):
    """Base Pydantic model with strict field handling."""

    model_config = ConfigDict(extra="forbid", frozen=False)


class PathsConfig(RecordModel):
    """Directories used by a patch run, relative to the config file."""

    sources: List[str] = Field(default_factory=lambda: ["vendor"])
    sandbox: str = "target/patch"


class ConfigFile(RecordModel):
    """Top-level layout of ``pkgpatch.yaml``.

    ``patch`` is kept untyped: individual entries are validated leniently so a
    single malformed entry only produces a diagnostic.
    """

    paths: PathsConfig = Field(default_factory=PathsConfig)
    members: List[str] = Field(default_factory=list)
    patch: Dict[str, Any] = Field(default_factory=dict)


@dataclass(slots=True)
class PatchEntry:
    """Patch files configured for one package."""

    name: str
    version: Optional[SpecifierSet]
    patches: tuple[PatchItem, ...]
    base_dir: Path


@dataclass(slots=True)
class LoadedConfig:
    """Validated configuration with every path made absolute."""

    path: Path
    settings: ConfigFile
    sources: tuple[Path, ...]
    sandbox_root: Path
    entries: List[PatchEntry] = field(default_factory=list)

    @property
    def root(self) -> Path:
        return self.path.parent


def copy_config_template() -> Dict[str, Any]:
    """Return a deep copy of the default configuration template."""
    return copy.deepcopy(DEFAULT_CONFIG_TEMPLATE)


def write_config(config_path: Path, config_data: Mapping[str, Any]) -> None:
    """Persist configuration data to disk with stable formatting."""
    config_path.parent.mkdir(parents=True, exist_ok=True)
    with config_path.open("w", encoding="utf-8") as handle:
        yaml.safe_dump(dict(config_data), handle, sort_keys=False)


def _report(diagnostic: Diagnostic | None, message: str) -> None:
    if diagnostic is None:
        LOGGER.warning(message)
    else:
        diagnostic(message)


def _read_config_mapping(config_path: Path) -> Dict[str, Any]:
    """Load YAML configuration from disk and return it as a dictionary."""
    if not config_path.exists():
        raise ConfigError(f"Config file not found: {config_path}")
    try:
        with config_path.open("r", encoding="utf-8") as handle:
            data = yaml.safe_load(handle) or {}
    except yaml.YAMLError as error:
        raise ConfigError(f"Failed to parse config: {error}") from error
    if not isinstance(data, dict):
        raise ConfigError("Configuration must be a mapping at the top level.")
    return data


def _load_settings(config_path: Path) -> ConfigFile:
    data = _read_config_mapping(config_path)
    try:
        return ConfigFile.model_validate(data)
    except ValidationError as error:
        raise ConfigError(f"Invalid configuration in {config_path}: {error}") from error


def _parse_version(raw: Any, diagnostic: Diagnostic | None) -> Optional[SpecifierSet]:
    if isinstance(raw, (int, float)) and not isinstance(raw, bool):
        raw = str(raw)
    if isinstance(raw, str):
        try:
            return parse_version_requirement(raw)
        except InvalidSpecifier:
            pass
    _report(diagnostic, f"Version must be a valid version specifier: {raw}")
    return None


def _parse_patch_item(raw: Any, diagnostic: Diagnostic | None) -> Optional[PatchItem]:
    if isinstance(raw, str) and raw.strip():
        return PatchItem(path=Path(raw))

    if isinstance(raw, Mapping):
        path_value = raw.get("path")
        if isinstance(path_value, str) and path_value.strip():
            source_value = raw.get("source")
            source = PatchSource.DEFAULT
            if isinstance(source_value, str):
                try:
                    source = PatchSource(source_value)
                except ValueError:
                    _report(diagnostic, f"Unknown patch source: {source_value}")
            return PatchItem(path=Path(path_value), source=source)

    _report(diagnostic, f"Patch Entry must be a string or a table with path and source: {raw}")
    return None


def parse_patch_entry(
    name: str,
    raw: Any,
    *,
    base_dir: Path,
    diagnostic: Diagnostic | None = None,
) -> Optional[PatchEntry]:
    """Interpret one ``patch.<name>`` table.

    Problems inside the table are reported through ``diagnostic`` and the
    offending part is skipped; only a non-table entry drops the package.
    """
    if not isinstance(raw, Mapping):
        _report(diagnostic, f"Entry {name} must contain a table.")
        return None

    version = None
    if raw.get("version") is not None:
        version = _parse_version(raw["version"], diagnostic)

    patches: list[PatchItem] = []
    raw_patches = raw.get("patches")
    if isinstance(raw_patches, list):
        for candidate in raw_patches:
            item = _parse_patch_item(candidate, diagnostic)
            if item is not None:
                patches.append(item)

    return PatchEntry(name=name, version=version, patches=tuple(patches), base_dir=base_dir)


def _collect_entries(
    settings: ConfigFile,
    base_dir: Path,
    diagnostic: Diagnostic | None,
) -> List[PatchEntry]:
    entries: list[PatchEntry] = []
    for name, raw in settings.patch.items():
        entry = parse_patch_entry(str(name), raw, base_dir=base_dir, diagnostic=diagnostic)
        if entry is not None:
            entries.append(entry)
    return entries


def _resolve_relative(base_dir: Path, value: str) -> Path:
    candidate = Path(value)
    if not candidate.is_absolute():
        candidate = base_dir / candidate
    return candidate.resolve()


def load_config(config_path: Path | str, *, diagnostic: Diagnostic | None = None) -> LoadedConfig:
    """Load ``config_path`` together with the patch entries of its members.

    Member configs contribute ``patch`` entries only; their ``paths`` and
    ``members`` sections are ignored. Entries keep declaration order, root
    config first.
    """
    path = Path(config_path).resolve()
    settings = _load_settings(path)
    base_dir = path.parent

    entries = _collect_entries(settings, base_dir, diagnostic)
    for member in settings.members:
        member_dir = _resolve_relative(base_dir, member)
        member_settings = _load_settings(member_dir / DEFAULT_CONFIG_NAME)
        entries.extend(_collect_entries(member_settings, member_dir, diagnostic))

    return LoadedConfig(
        path=path,
        settings=settings,
        sources=tuple(_resolve_relative(base_dir, source) for source in settings.paths.sources),
        sandbox_root=_resolve_relative(base_dir, settings.paths.sandbox),
        entries=entries,
    )


__all__ = [
    "ConfigError",
    "ConfigFile",
    "DEFAULT_CONFIG_NAME",
    "DEFAULT_CONFIG_TEMPLATE",
    "LoadedConfig",
    "PatchEntry",
    "PathsConfig",
    "copy_config_template",
    "load_config",
    "parse_patch_entry",
    "write_config",
]
