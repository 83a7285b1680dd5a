"""Typed records that describe anchor-based edits and their outcomes."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

ANCHOR_NOT_FOUND = "anchor not found"


class PatchMode(str, Enum):
    """How a replacement relates to the anchor it targets."""

    AFTER = "after"
    REPLACE = "replace"


@dataclass(slots=True, frozen=True)
class PatchOperation:
    """Named edit that splices ``replacement`` at the first ``anchor`` match."""

    name: str
    anchor: str
    replacement: str
    mode: PatchMode = PatchMode.AFTER

    def __post_init__(self) -> None:
        if not isinstance(self.mode, PatchMode):
            object.__setattr__(self, "mode", PatchMode(self.mode))


@dataclass(slots=True, frozen=True)
class ApplyResult:
    """Outcome of a single operation, used purely for reporting."""

    name: str
    applied: bool
    reason: str | None = None
    offset: int | None = None

    def to_dict(self) -> dict[str, object]:
        return {
            "name": self.name,
            "applied": self.applied,
            "reason": self.reason,
            "offset": self.offset,
        }


@dataclass(slots=True, frozen=True)
class PatchSet:
    """Ordered operations plus the static notes printed after a run."""

    name: str
    operations: tuple[PatchOperation, ...]
    description: str = ""
    notes: tuple[str, ...] = ()


__all__ = ["ANCHOR_NOT_FOUND", "ApplyResult", "PatchMode", "PatchOperation", "PatchSet"]
