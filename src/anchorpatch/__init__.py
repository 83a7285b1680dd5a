"""Convenience exports for the anchor-based patch engine."""

import logging

from .engine import PatchError, PatchRun, apply_operation, patch_file, render_diff, run_operations
from .operations import ANCHOR_NOT_FOUND, ApplyResult, PatchMode, PatchOperation, PatchSet

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "ANCHOR_NOT_FOUND",
    "ApplyResult",
    "PatchError",
    "PatchMode",
    "PatchOperation",
    "PatchRun",
    "PatchSet",
    "apply_operation",
    "patch_file",
    "render_diff",
    "run_operations",
]
