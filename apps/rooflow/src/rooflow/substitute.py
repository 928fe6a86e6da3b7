from __future__ import annotations

import os
import subprocess
from collections.abc import Callable
from pathlib import Path
from typing import Any

from prompt_sanitizer.documents import Emit
from rooflow.config import SubstitutionScripts

Runner = Callable[..., subprocess.CompletedProcess[Any]]


def is_windows_platform() -> bool:
    return os.name == "nt"


def _noop(_: str) -> None:
    return None


def manual_run_hint(scripts: SubstitutionScripts, *, is_windows: bool) -> str:
    if is_windows:
        return f"  {scripts.cmd} or bash ./{scripts.sh}"
    return f"  ./{scripts.sh}"


def _run(argv: list[str], *, cwd: Path, runner: Runner) -> bool:
    try:
        proc = runner(argv, cwd=str(cwd), check=False)
    except OSError:
        return False
    return proc.returncode == 0


def _make_executable(path: Path) -> bool:
    try:
        path.chmod(0o755)
    except OSError:
        return False
    return True


def run_substitution_script(
    project_root: Path,
    scripts: SubstitutionScripts,
    *,
    is_windows: bool | None = None,
    runner: Runner | None = None,
    emit: Emit | None = None,
) -> bool:
    """
    Run the downloaded insert-variables script from the project root.

    On Windows the shell script is tried through `bash` first and the `.cmd`
    variant is the fallback. The script's own output goes straight to the
    console. Returns whether the script exited successfully.
    """

    windows = is_windows_platform() if is_windows is None else is_windows
    run = runner if runner is not None else subprocess.run
    out = emit if emit is not None else _noop

    out("Running insert-variables script to configure system variables...")
    sh_path = project_root / scripts.sh

    if windows:
        ok = False
        if sh_path.is_file():
            _make_executable(sh_path)
            ok = _run(["bash", f"./{scripts.sh}"], cwd=project_root, runner=run)
        if not ok:
            ok = _run(["cmd", "/c", scripts.cmd], cwd=project_root, runner=run)
    else:
        ok = sh_path.is_file() and _make_executable(sh_path)
        if ok:
            ok = _run([f"./{scripts.sh}"], cwd=project_root, runner=run)

    if not ok:
        out("Failed to run insert-variables script")
        out("You may need to run it manually:")
        out(manual_run_hint(scripts, is_windows=windows))
    return ok


def cleanup_substitution_scripts(
    project_root: Path,
    scripts: SubstitutionScripts,
    *,
    emit: Emit | None = None,
) -> list[Path]:
    out = emit if emit is not None else _noop
    out("Cleaning up insert-variables scripts...")

    removed: list[Path] = []
    try:
        for name in (scripts.cmd, scripts.sh):
            path = project_root / name
            if path.exists():
                path.unlink()
                removed.append(path)
                out(f"  Removed {name}")
    except OSError as e:
        out("Warning: Failed to clean up insert-variables scripts")
        out(f"  Error: {e}")
        return removed

    out("Cleanup completed successfully")
    return removed
