"""CLI commands for applying anchor-based patch sets to a single file."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Mapping

import typer

from .engine import PatchError, PatchRun, patch_file, render_diff
from .operations import PatchSet
from .patchsets import DEFAULT_PATCH_SET, PATCH_SETS, PatchSetError, load_patch_set

APP_HELP = "Apply ordered, anchor-based text patches to a source file in place."

app = typer.Typer(help=APP_HELP)


@app.callback()
def main(
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Emit debug logs and per-edit telemetry events.",
    ),
) -> None:
    """Anchor patch entry point."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")


def _resolve_patch_set(source: str) -> PatchSet:
    """Load a patch set or exit with the validation error."""
    try:
        return load_patch_set(source)
    except PatchSetError as error:
        typer.echo(str(error), err=True)
        for entry in error.details.get("errors", []):
            location = ".".join(str(part) for part in entry.get("loc", ()))
            typer.echo(f"  - {location}: {entry.get('msg')}", err=True)
        raise typer.Exit(code=1) from error


def _echo_result(entry: Mapping[str, Any]) -> None:
    if entry.get("applied"):
        typer.echo(f"✅ Edit {entry['name']}")
    else:
        typer.echo(f"❌ Edit {entry['name']}: {entry.get('reason')}", err=True)


def _render_report(run: PatchRun, target: Path, patch_set: PatchSet, *, dry_run: bool) -> None:
    """Print per-edit lines, the summary and the patch set's static notes."""
    for result in run.results:
        _echo_result(result.to_dict())
    typer.echo("")
    typer.echo(run.summary(target))
    if dry_run:
        typer.echo("Dry run: file not written.")
    for line in patch_set.notes:
        typer.echo(line)


@app.command()
def apply(
    path: Path = typer.Argument(
        ...,
        help="Target text file to patch in place.",
        show_default=False,
    ),
    patch_set: str = typer.Option(
        DEFAULT_PATCH_SET,
        "--patch-set",
        "-p",
        help="Bundled patch set name or path to a YAML patch set.",
    ),
    strict: bool = typer.Option(
        False,
        "--strict/--best-effort",
        help="Abort without writing when any anchor is not found.",
    ),
    dry_run: bool = typer.Option(
        False,
        "--dry-run",
        help="Report what would change without writing the file.",
    ),
    diff: bool = typer.Option(
        False,
        "--diff",
        help="Print a unified diff of the buffer change.",
    ),
) -> None:
    """Apply every edit of a patch set to PATH, in order."""
    selected = _resolve_patch_set(patch_set)

    try:
        original, run = patch_file(path, selected.operations, strict=strict, dry_run=dry_run)
    except PatchError as error:
        report = error.details.get("run", {})
        for entry in report.get("results", []):
            _echo_result(entry)
        typer.echo("")
        typer.echo(f"Strict mode: {error}. {path.as_posix()} left untouched.", err=True)
        raise typer.Exit(code=1) from error

    _render_report(run, path, selected, dry_run=dry_run)
    if diff:
        rendered = render_diff(path, original, run.buffer)
        typer.echo(rendered or "No changes.", nl=not rendered)


@app.command()
def show(
    patch_set: str = typer.Option(
        DEFAULT_PATCH_SET,
        "--patch-set",
        "-p",
        help="Bundled patch set name or path to a YAML patch set.",
    ),
) -> None:
    """List the operations of a patch set in application order."""
    selected = _resolve_patch_set(patch_set)
    typer.echo(f"Patch set: {selected.name} ({len(selected.operations)} operations)")
    if selected.description:
        typer.echo(selected.description)
    for index, operation in enumerate(selected.operations, start=1):
        first_line = operation.anchor.splitlines()[0] if operation.anchor else ""
        if len(first_line) > 72:
            first_line = first_line[:69] + "..."
        typer.echo(f"{index:>3}. {operation.name} [{operation.mode.value}] {first_line}")


@app.command("list")
def list_patch_sets() -> None:
    """List the bundled patch sets."""
    for name in sorted(PATCH_SETS):
        entry = PATCH_SETS[name]
        marker = " (default)" if name == DEFAULT_PATCH_SET else ""
        typer.echo(f"- {name}{marker}: {len(entry.operations)} operations. {entry.description}".rstrip())


if __name__ == "__main__":
    app()
