from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Any

try:
    import yaml  # noqa: F401
except ModuleNotFoundError as exc:
    raise SystemExit(
        "Missing dependency `pyyaml` (import name: `yaml`). "
        "Fix: `python -m pip install -e .`."
    ) from exc

from prompt_sanitizer import repair_documents, validate_documents
from rooflow.config import CONFIG_FILENAME, ConfigError, InstallConfig, load_install_config
from rooflow.install import install
from rooflow.pathing import ProjectRootError, resolve_project_root


def _enable_console_backslashreplace(stream: Any) -> None:
    """Configure stream error handling to backslash escapes when supported."""
    reconfigure = getattr(stream, "reconfigure", None)
    if not callable(reconfigure):
        return
    try:
        if str(getattr(stream, "errors", "")).lower() == "backslashreplace":
            return
        reconfigure(errors="backslashreplace")
    except Exception:
        return


def _configure_console_output() -> None:
    _enable_console_backslashreplace(sys.stdout)
    _enable_console_backslashreplace(sys.stderr)


def _add_common_args(p: argparse.ArgumentParser) -> None:
    p.add_argument(
        "--project-root",
        type=Path,
        help=(
            "Project to operate on. Defaults to $ROOFLOW_PROJECT_ROOT, the project enclosing "
            "this installation, or the current directory."
        ),
    )
    p.add_argument(
        "--config",
        type=Path,
        help=f"YAML config overriding the defaults (default: <project-root>/{CONFIG_FILENAME}).",
    )


def build_parser() -> argparse.ArgumentParser:
    """Build the rooflow CLI argument parser."""
    parser = argparse.ArgumentParser(prog="rooflow")
    sub = parser.add_subparsers(dest="cmd", required=True)

    install_p = sub.add_parser(
        "install",
        help="Download RooFlow files into the project, substitute variables and sanitize prompts.",
    )
    _add_common_args(install_p)
    install_p.add_argument(
        "--skip-substitution",
        action="store_true",
        help="Do not run the insert-variables script (scripts are left in place).",
    )
    install_p.add_argument(
        "--keep-scripts",
        action="store_true",
        help="Keep insert-variables scripts after a successful run.",
    )

    sanitize_p = sub.add_parser(
        "sanitize", help="Remove duplicated capabilities sections from system prompt files."
    )
    _add_common_args(sanitize_p)
    sanitize_p.add_argument(
        "paths",
        nargs="*",
        type=Path,
        help="Documents to repair (defaults to the configured system prompt files).",
    )

    validate_p = sub.add_parser(
        "validate", help="Check system prompt files section by section for YAML errors."
    )
    _add_common_args(validate_p)
    validate_p.add_argument(
        "--strict",
        action="store_true",
        help="Exit with status 1 when any document is invalid.",
    )
    validate_p.add_argument(
        "paths",
        nargs="*",
        type=Path,
        help="Documents to validate (defaults to the configured system prompt files).",
    )
    return parser


def _load_context(args: argparse.Namespace) -> tuple[Path, InstallConfig]:
    project_root = resolve_project_root(args.project_root)
    config = load_install_config(project_root, args.config)
    return project_root, config


def _document_paths(
    args: argparse.Namespace, project_root: Path, config: InstallConfig
) -> list[Path]:
    if args.paths:
        return [path.resolve() for path in args.paths]
    return config.document_paths(project_root)


def _cmd_install(args: argparse.Namespace) -> int:
    """Execute install and return the process exit code."""
    try:
        project_root, config = _load_context(args)
    except (ConfigError, ProjectRootError) as e:
        print(str(e), file=sys.stderr)
        return 2

    result = install(
        project_root,
        config,
        run_substitution=not args.skip_substitution,
        keep_scripts=args.keep_scripts,
    )
    if not result.downloaded_all:
        return 2
    return 0 if result.ok else 1


def _cmd_sanitize(args: argparse.Namespace) -> int:
    """Execute sanitize over the configured or given documents."""
    try:
        project_root, config = _load_context(args)
    except (ConfigError, ProjectRootError) as e:
        print(str(e), file=sys.stderr)
        return 2

    repair_documents(_document_paths(args, project_root, config), root=project_root, emit=print)
    return 0


def _cmd_validate(args: argparse.Namespace) -> int:
    """Execute validate and report whether every present document is valid."""
    try:
        project_root, config = _load_context(args)
    except (ConfigError, ProjectRootError) as e:
        print(str(e), file=sys.stderr)
        return 2

    report = validate_documents(
        _document_paths(args, project_root, config), root=project_root, emit=print
    )
    if not report.valid and args.strict:
        return 1
    return 0


def main(argv: list[str] | None = None) -> None:
    """Run the CLI entrypoint."""
    _configure_console_output()
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.cmd == "install":
        raise SystemExit(_cmd_install(args))
    if args.cmd == "sanitize":
        raise SystemExit(_cmd_sanitize(args))
    if args.cmd == "validate":
        raise SystemExit(_cmd_validate(args))
    raise SystemExit(2)


if __name__ == "__main__":
    main()
