"""Bundled patch sets and resolution of user-supplied ones."""

from __future__ import annotations

from pathlib import Path
from typing import Dict

from ..operations import PatchSet
from .loader import PatchSetError, load_patch_set_file, parse_patch_set
from .pkn_tab import PKN_TAB

DEFAULT_PATCH_SET = PKN_TAB.name

PATCH_SETS: Dict[str, PatchSet] = {
    PKN_TAB.name: PKN_TAB,
}


def get_patch_set(name: str) -> PatchSet:
    """Return the bundled patch set registered under ``name``."""
    try:
        return PATCH_SETS[name]
    except KeyError:
        known = ", ".join(sorted(PATCH_SETS))
        raise PatchSetError(
            f"Unknown patch set '{name}'. Known patch sets: {known}.",
            details={"name": name, "known": sorted(PATCH_SETS)},
        ) from None


def load_patch_set(source: str | Path) -> PatchSet:
    """Resolve ``source`` as a bundled name first, then as a YAML file path."""
    if isinstance(source, str) and source in PATCH_SETS:
        return PATCH_SETS[source]
    candidate = Path(source)
    if candidate.is_file():
        return load_patch_set_file(candidate)
    return get_patch_set(str(source))


__all__ = [
    "DEFAULT_PATCH_SET",
    "PATCH_SETS",
    "PatchSetError",
    "get_patch_set",
    "load_patch_set",
    "load_patch_set_file",
    "parse_patch_set",
]
