"""Structured JSON events describing patch runs."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field

from .planner import PatchOperationResult

TELEMETRY_LOGGER = logging.getLogger("pkgpatch.telemetry")


class PatchEvent(BaseModel):
    """One file diff outcome as written to the telemetry log."""

    model_config = ConfigDict(extra="forbid")

    event: str
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    package: str
    patch: Path
    old_path: str
    new_path: str
    operation: Optional[PatchOperationResult] = None
    error: Optional[str] = None
    details: Dict[str, Any] = Field(default_factory=dict)


def emit_patch_event(event: str, **fields: Any) -> None:
    """Log a ``PatchEvent`` as compact JSON on the ``pkgpatch.telemetry`` logger."""
    if not TELEMETRY_LOGGER.isEnabledFor(logging.INFO):
        return
    record = PatchEvent(event=event, **fields)
    TELEMETRY_LOGGER.info(record.model_dump_json(exclude_none=True))


__all__ = ["PatchEvent", "TELEMETRY_LOGGER", "emit_patch_event"]
