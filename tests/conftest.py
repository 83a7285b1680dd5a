from __future__ import annotations

import os
import subprocess
import sys
from dataclasses import dataclass
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"

if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))


@dataclass(slots=True)
class TargetApp:
    """Fixture payload representing the web app file under patch."""

    root: Path
    path: Path
    original: str

    def read(self) -> str:
        with self.path.open("r", encoding="utf-8", newline="") as handle:
            return handle.read()

    def run_cli(self, *args: str) -> subprocess.CompletedProcess[str]:
        """Invoke ``python -m anchorpatch.cli`` with the provided arguments."""

        env = os.environ.copy()
        pythonpath = str(SRC)
        if env.get("PYTHONPATH"):
            pythonpath = os.pathsep.join([pythonpath, env["PYTHONPATH"]])
        env["PYTHONPATH"] = pythonpath
        env["PYTHONIOENCODING"] = "utf-8"

        command = [sys.executable, "-m", "anchorpatch.cli", *args]
        return subprocess.run(  # noqa: S603 - command constructed from known values
            command,
            cwd=self.root,
            env=env,
            capture_output=True,
            text=True,
            encoding="utf-8",
            check=False,
        )


def build_app_source() -> str:
    """Assemble an ``App.jsx`` stand-in that carries every bundled anchor once."""

    from anchorpatch.patchsets.pkn_tab import OPERATIONS

    parts = ['import React, { useState, useEffect, useCallback, useMemo } from "react";', ""]
    for index, operation in enumerate(OPERATIONS, start=1):
        parts.append(f"// section {index}")
        parts.append(operation.anchor)
        parts.append("")
    parts.append("export default App;")
    return "\n".join(parts) + "\n"


@pytest.fixture()
def target_app(tmp_path: Path) -> TargetApp:
    """Write the synthetic ``src/App.jsx`` into a scratch project."""

    project_root = tmp_path / "web-app"
    src_dir = project_root / "src"
    src_dir.mkdir(parents=True)
    source = build_app_source()
    app_path = src_dir / "App.jsx"
    with app_path.open("w", encoding="utf-8", newline="") as handle:
        handle.write(source)
    return TargetApp(root=project_root, path=app_path, original=source)
