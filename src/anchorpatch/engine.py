"""Ordered anchor-search-and-splice engine for single-file patching."""

from __future__ import annotations

import difflib
import json
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Iterable, Mapping, Tuple

from .operations import ANCHOR_NOT_FOUND, ApplyResult, PatchMode, PatchOperation

LOGGER = logging.getLogger(__name__)
TELEMETRY_LOGGER = logging.getLogger("anchorpatch.telemetry")


class PatchError(RuntimeError):
    """Raised when a patch run cannot be accepted as-is."""

    def __init__(self, message: str, *, details: Mapping[str, Any] | None = None) -> None:
        super().__init__(message)
        self.details: dict[str, Any] = dict(details or {})


@dataclass(slots=True)
class PatchRun:
    """Final buffer plus one result per attempted operation."""

    buffer: str
    results: Tuple[ApplyResult, ...] = ()

    @property
    def total(self) -> int:
        return len(self.results)

    @property
    def applied_count(self) -> int:
        return sum(1 for result in self.results if result.applied)

    @property
    def failed(self) -> Tuple[ApplyResult, ...]:
        return tuple(result for result in self.results if not result.applied)

    @property
    def ok(self) -> bool:
        """True when every operation landed (vacuously true for an empty run)."""
        return not self.failed

    def summary(self, path: Path | str) -> str:
        label = path.as_posix() if isinstance(path, Path) else str(path)
        return f"{self.applied_count}/{self.total} edits applied to {label}"

    def to_dict(self) -> dict[str, Any]:
        return {
            "applied": self.applied_count,
            "total": self.total,
            "results": [result.to_dict() for result in self.results],
        }


def _serialise_event_value(value: Any) -> Any:
    """Convert telemetry payload values into JSON-friendly representations."""
    if isinstance(value, (str, int, float, bool)) or value is None:
        return value
    if isinstance(value, Path):
        return value.as_posix()
    if isinstance(value, (list, tuple, set)):
        return [_serialise_event_value(item) for item in value]
    if isinstance(value, Mapping):
        return {str(key): _serialise_event_value(child) for key, child in value.items()}
    return str(value)


def _emit_patch_event(event: str, **fields: Any) -> None:
    """Log structured telemetry events while patching."""
    payload = {"event": event, "timestamp": datetime.now(timezone.utc).isoformat()}
    for key, value in fields.items():
        payload[key] = _serialise_event_value(value)
    TELEMETRY_LOGGER.info(json.dumps(payload, separators=(",", ":"), ensure_ascii=True))


def apply_operation(buffer: str, operation: PatchOperation) -> tuple[str, ApplyResult]:
    """Apply ``operation`` to the first literal match of its anchor in ``buffer``.

    The returned buffer is the input unchanged when the anchor is empty or
    absent; the result then carries ``applied=False`` and the failure reason.
    """
    anchor = operation.anchor
    index = buffer.find(anchor) if anchor else -1
    if index == -1:
        LOGGER.warning("Edit %s: %s", operation.name, ANCHOR_NOT_FOUND)
        result = ApplyResult(name=operation.name, applied=False, reason=ANCHOR_NOT_FOUND)
        _emit_patch_event("patch.operation", **result.to_dict(), mode=operation.mode.value)
        return buffer, result

    end = index + len(anchor)
    if operation.mode is PatchMode.AFTER:
        updated = buffer[:end] + operation.replacement + buffer[end:]
    else:
        updated = buffer[:index] + operation.replacement + buffer[end:]

    LOGGER.debug("Edit %s applied at offset %d (%s)", operation.name, index, operation.mode.value)
    result = ApplyResult(name=operation.name, applied=True, offset=index)
    _emit_patch_event("patch.operation", **result.to_dict(), mode=operation.mode.value)
    return updated, result


def run_operations(
    buffer: str,
    operations: Iterable[PatchOperation],
    *,
    strict: bool = False,
) -> PatchRun:
    """Fold ``operations`` over ``buffer`` in list order.

    Failed anchors never stop the fold. With ``strict`` enabled the complete
    run is still attempted, then ``PatchError`` is raised if anything failed.
    """
    results: list[ApplyResult] = []
    current = buffer
    for operation in operations:
        current, result = apply_operation(current, operation)
        results.append(result)

    run = PatchRun(buffer=current, results=tuple(results))
    _emit_patch_event("patch.run", applied=run.applied_count, total=run.total, strict=strict)
    if strict and not run.ok:
        names = ", ".join(result.name for result in run.failed)
        raise PatchError(
            f"{len(run.failed)} of {run.total} edits did not apply: {names}",
            details={"run": run.to_dict()},
        )
    return run


def render_diff(path: Path | str, original: str, updated: str) -> str:
    """Render a git-style unified diff between two buffer states."""
    label = Path(path).as_posix()
    diff_lines = list(
        difflib.unified_diff(
            original.splitlines(),
            updated.splitlines(),
            fromfile=f"a/{label}",
            tofile=f"b/{label}",
            lineterm="",
        )
    )
    if not diff_lines:
        return ""
    return "\n".join([f"diff --git a/{label} b/{label}", *diff_lines]) + "\n"


def patch_file(
    path: Path | str,
    operations: Iterable[PatchOperation],
    *,
    strict: bool = False,
    dry_run: bool = False,
    encoding: str = "utf-8",
) -> tuple[str, PatchRun]:
    """Read ``path``, run ``operations`` and persist the final buffer.

    Returns the original text alongside the run. The file is rewritten even
    when some anchors were missing; strict failures raise before any write and
    ``dry_run`` never writes. Filesystem errors propagate to the caller.
    """
    target = Path(path)
    with target.open("r", encoding=encoding, newline="") as handle:
        original = handle.read()

    run = run_operations(original, operations, strict=strict)

    if not dry_run:
        with target.open("w", encoding=encoding, newline="") as handle:
            handle.write(run.buffer)
    _emit_patch_event(
        "patch.file",
        path=target,
        applied=run.applied_count,
        total=run.total,
        written=not dry_run,
    )
    return original, run


__all__ = [
    "PatchError",
    "PatchRun",
    "apply_operation",
    "patch_file",
    "render_diff",
    "run_operations",
]
