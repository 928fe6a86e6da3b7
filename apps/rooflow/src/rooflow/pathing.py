from __future__ import annotations

import os
from collections.abc import Mapping
from pathlib import Path

PROJECT_ROOT_ENV_VARS: tuple[str, ...] = ("ROOFLOW_PROJECT_ROOT", "npm_config_local_prefix")
_INSTALL_DIR_NAMES: tuple[str, ...] = ("site-packages", "dist-packages", "node_modules")
_PROJECT_MARKERS: tuple[str, ...] = ("pyproject.toml", "setup.py", "package.json", ".git")


class ProjectRootError(FileNotFoundError):
    pass


def _has_project_marker(candidate: Path) -> bool:
    return any((candidate / marker).exists() for marker in _PROJECT_MARKERS)


def _project_containing_install_dir(module_dir: Path) -> Path | None:
    parts = module_dir.parts
    for name in _INSTALL_DIR_NAMES:
        if name not in parts:
            continue
        install_dir = Path(*parts[: parts.index(name)])
        for candidate in [install_dir, *install_dir.parents]:
            if _has_project_marker(candidate):
                return candidate
    return None


def find_project_root(
    *,
    env: Mapping[str, str] | None = None,
    module_dir: Path | None = None,
    cwd: Path | None = None,
) -> Path:
    """
    Locate the project the bootstrap files should be written into.

    An explicit install prefix from the environment wins. When running from an
    installed copy (inside site-packages or node_modules), the nearest enclosing
    project directory is used. Otherwise the current working directory.
    """

    env_map = os.environ if env is None else env
    for var in PROJECT_ROOT_ENV_VARS:
        raw = env_map.get(var, "").strip()
        if raw:
            return Path(raw).expanduser()

    here = module_dir if module_dir is not None else Path(__file__).resolve().parent
    enclosing = _project_containing_install_dir(here)
    if enclosing is not None:
        return enclosing

    return (cwd or Path.cwd()).resolve()


def resolve_project_root(explicit: Path | None = None) -> Path:
    root = explicit if explicit is not None else find_project_root()
    try:
        root = root.expanduser().resolve()
    except OSError:
        root = root.expanduser()
    if not root.is_dir():
        raise ProjectRootError(f"Project root directory not found: {root}")
    return root
