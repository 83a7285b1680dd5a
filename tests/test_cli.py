from __future__ import annotations

import logging
from pathlib import Path

import yaml
from typer.testing import CliRunner

from anchorpatch.cli import app


def _write_patch_set(path: Path, operations: list[dict[str, str]], **extra: object) -> Path:
    payload = {"name": "custom", "operations": operations, **extra}
    path.write_text(yaml.safe_dump(payload, sort_keys=False), encoding="utf-8")
    return path


def test_apply_reports_every_edit_and_summary(target_app) -> None:
    runner = CliRunner()
    result = runner.invoke(app, ["apply", str(target_app.path)], catch_exceptions=False)

    assert result.exit_code == 0, result.output
    assert "✅ Edit 1-state" in result.output
    assert "✅ Edit 14-scan-border" in result.output
    assert f"14/14 edits applied to {target_app.path.as_posix()}" in result.output
    assert "PKN Watch: #a78bfa (purple)" in result.output
    assert "function PknView(" in target_app.read()


def test_apply_partial_success_still_writes_and_exits_zero(tmp_path: Path) -> None:
    target = tmp_path / "target.txt"
    target.write_text("foo bar baz", encoding="utf-8")
    patch_set = _write_patch_set(
        tmp_path / "set.yaml",
        [
            {"name": "1-swap", "anchor": "bar", "replacement": "QUX", "mode": "replace"},
            {"name": "2-missing", "anchor": "nowhere", "replacement": "!"},
        ],
        notes=["Static note."],
    )

    runner = CliRunner()
    result = runner.invoke(app, ["apply", str(target), "--patch-set", str(patch_set)])

    assert result.exit_code == 0, result.output
    assert "✅ Edit 1-swap" in result.output
    assert "❌ Edit 2-missing: anchor not found" in result.output
    assert f"1/2 edits applied to {target.as_posix()}" in result.output
    assert "Static note." in result.output
    assert target.read_text(encoding="utf-8") == "foo QUX baz"


def test_apply_strict_mode_exits_nonzero_without_writing(tmp_path: Path) -> None:
    target = tmp_path / "target.txt"
    target.write_text("foo bar baz", encoding="utf-8")
    patch_set = _write_patch_set(
        tmp_path / "set.yaml",
        [
            {"name": "1-swap", "anchor": "bar", "replacement": "QUX", "mode": "replace"},
            {"name": "2-missing", "anchor": "nowhere", "replacement": "!"},
        ],
    )

    runner = CliRunner()
    result = runner.invoke(app, ["apply", str(target), "-p", str(patch_set), "--strict"])

    assert result.exit_code == 1
    assert "❌ Edit 2-missing: anchor not found" in result.output
    assert "left untouched" in result.output
    assert target.read_text(encoding="utf-8") == "foo bar baz"


def test_apply_dry_run_with_diff_keeps_file(target_app) -> None:
    runner = CliRunner()
    result = runner.invoke(app, ["apply", str(target_app.path), "--dry-run", "--diff"])

    assert result.exit_code == 0, result.output
    assert "Dry run: file not written." in result.output
    assert "+function PknView(" in result.output
    assert target_app.read() == target_app.original


def test_apply_rejects_invalid_patch_set(tmp_path: Path) -> None:
    target = tmp_path / "target.txt"
    target.write_text("content", encoding="utf-8")
    bad = tmp_path / "bad.yaml"
    bad.write_text("name: bad\noperations:\n  - name: x\n    anchor: ''\n", encoding="utf-8")

    runner = CliRunner()
    result = runner.invoke(app, ["apply", str(target), "--patch-set", str(bad)])

    assert result.exit_code == 1
    assert "Invalid patch set" in result.output
    assert "operations.0.anchor" in result.output
    assert target.read_text(encoding="utf-8") == "content"


def test_apply_missing_target_propagates_filesystem_error(tmp_path: Path) -> None:
    runner = CliRunner()
    result = runner.invoke(app, ["apply", str(tmp_path / "missing.jsx")])

    assert result.exit_code != 0
    assert isinstance(result.exception, FileNotFoundError)


def test_apply_without_path_prints_usage_and_exits_two(target_app) -> None:
    completed = target_app.run_cli("apply")

    assert completed.returncode == 2
    assert "Usage" in completed.stderr
    assert target_app.read() == target_app.original


def test_apply_reports_each_failed_edit_once_on_stderr(target_app) -> None:
    lone = target_app.root / "hello.txt"
    lone.write_text("hello", encoding="utf-8")

    completed = target_app.run_cli("apply", str(lone))

    assert completed.returncode == 0, completed.stderr
    for operation_name in ("1-state", "7-nav-tab", "14-scan-border"):
        mentions = [line for line in completed.stderr.splitlines() if operation_name in line]
        assert mentions == [f"❌ Edit {operation_name}: anchor not found"]
    assert "0/14 edits applied to" in completed.stdout
    assert lone.read_text(encoding="utf-8") == "hello"


def test_package_logger_has_null_handler() -> None:
    handlers = logging.getLogger("anchorpatch").handlers

    assert any(isinstance(handler, logging.NullHandler) for handler in handlers)


def test_show_lists_operations_in_order() -> None:
    runner = CliRunner()
    result = runner.invoke(app, ["show"])

    assert result.exit_code == 0, result.output
    assert "Patch set: pkn-tab (14 operations)" in result.output
    lines = [line for line in result.output.splitlines() if line.strip()[:1].isdigit()]
    assert len(lines) == 14
    assert "1. 1-state [after]" in lines[0]
    assert "14. 14-scan-border [replace]" in lines[-1]


def test_list_shows_bundled_patch_sets() -> None:
    runner = CliRunner()
    result = runner.invoke(app, ["list"])

    assert result.exit_code == 0, result.output
    assert "- pkn-tab (default): 14 operations." in result.output
