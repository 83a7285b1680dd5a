"""Load patch sets from YAML documents with strict schema validation."""

from __future__ import annotations

from pathlib import Path
from typing import List

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from ..engine import PatchError
from ..operations import PatchMode, PatchOperation, PatchSet


class PatchSetError(PatchError):
    """Raised when a patch set cannot be resolved or fails validation."""


class RecordModel(BaseModel):
    """Base Pydantic model with strict field handling."""

    model_config = ConfigDict(extra="forbid", frozen=True)


class OperationRecord(RecordModel):
    """Single operation entry within a patch set document."""

    name: str
    anchor: str
    replacement: str = ""
    mode: PatchMode = PatchMode.AFTER

    @field_validator("anchor")
    @classmethod
    def _anchor_not_empty(cls, value: str) -> str:
        if not value:
            raise ValueError("anchor must be a non-empty literal string")
        return value

    def to_operation(self) -> PatchOperation:
        return PatchOperation(
            name=self.name,
            anchor=self.anchor,
            replacement=self.replacement,
            mode=self.mode,
        )


class PatchSetDocument(RecordModel):
    """Top-level patch set document."""

    name: str
    description: str = ""
    notes: List[str] = Field(default_factory=list)
    operations: List[OperationRecord] = Field(default_factory=list)

    def to_patch_set(self) -> PatchSet:
        return PatchSet(
            name=self.name,
            description=self.description,
            notes=tuple(self.notes),
            operations=tuple(record.to_operation() for record in self.operations),
        )


def parse_patch_set(text: str, *, source: str = "<string>") -> PatchSet:
    """Parse and validate a YAML patch set document."""
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as error:
        raise PatchSetError(f"Failed to parse patch set {source}: {error}", details={"source": source}) from error

    if not isinstance(data, dict):
        raise PatchSetError(
            f"Patch set {source} must be a mapping at the top level.",
            details={"source": source},
        )

    try:
        document = PatchSetDocument.model_validate(data)
    except ValidationError as error:
        raise PatchSetError(
            f"Invalid patch set {source}: {error.error_count()} validation error(s).",
            details={"source": source, "errors": error.errors(include_url=False)},
        ) from error
    return document.to_patch_set()


def load_patch_set_file(path: Path | str) -> PatchSet:
    """Read a YAML patch set from disk."""
    document_path = Path(path)
    with document_path.open("r", encoding="utf-8") as handle:
        text = handle.read()
    return parse_patch_set(text, source=document_path.as_posix())


__all__ = ["PatchSetError", "load_patch_set_file", "parse_patch_set"]
