from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from prompt_sanitizer import repair_documents, validate_documents
from prompt_sanitizer.documents import Emit
from rooflow.config import InstallConfig
from rooflow.fetch import Fetcher, TransferError, download_file
from rooflow.substitute import (
    Runner,
    cleanup_substitution_scripts,
    is_windows_platform,
    manual_run_hint,
    run_substitution_script,
)


@dataclass
class InstallResult:
    project_root: Path
    downloaded: list[Path] = field(default_factory=list)
    download_error: str | None = None
    fixed_any: bool = False
    substitution_ok: bool = False
    substitution_skipped: bool = False
    valid: bool = False
    removed_scripts: list[Path] = field(default_factory=list)

    @property
    def downloaded_all(self) -> bool:
        return self.download_error is None

    @property
    def ok(self) -> bool:
        return self.downloaded_all and (self.substitution_ok or self.substitution_skipped)


def _print_summary(
    result: InstallResult, config: InstallConfig, *, is_windows: bool, emit: Emit
) -> None:
    if not (result.substitution_ok or result.substitution_skipped):
        emit("")
        emit("RooFlow installation encountered issues")
        emit("The insert-variables script failed to run.")
        emit("You may need to run it manually:")
        emit(manual_run_hint(config.scripts, is_windows=is_windows))
        return

    emit("")
    if result.valid:
        emit("RooFlow installation complete!")
        emit("Your project is now configured to use RooFlow.")
        emit("")
        emit("Directory structure created:")
        emit("  .roo/ - Contains system prompt files")
        emit("  .roomodes - Mode configuration file")
    else:
        emit("RooFlow installation completed with warnings")
        emit("Some system prompt files may have YAML issues that need manual attention.")
        emit("To re-check them after editing, run:")
        emit("  rooflow validate")


def install(
    project_root: Path,
    config: InstallConfig,
    *,
    fetcher: Fetcher | None = None,
    runner: Runner | None = None,
    is_windows: bool | None = None,
    run_substitution: bool = True,
    keep_scripts: bool = False,
    emit: Emit = print,
) -> InstallResult:
    """
    Bootstrap RooFlow files into `project_root`.

    Sequence: download every configured file, repair duplicated sections in the
    system prompts, run the variable substitution script, validate the prompts,
    then remove the substitution scripts once they ran successfully. A failed
    download stops the sequence; every later step runs regardless of the
    outcome of the one before it.
    """

    windows = is_windows_platform() if is_windows is None else is_windows
    result = InstallResult(project_root=project_root)

    emit("RooFlow Installer")
    emit("Installation details:")
    emit(f"- Target directory: {project_root}")
    emit(f"- Config: {config.source_path or 'built-in defaults'}")
    emit("")

    roo_dir = project_root / ".roo"
    if not roo_dir.exists():
        emit("Creating .roo directory...")
        try:
            roo_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            result.download_error = str(e)
            emit(f"Error during installation: {e}")
            return result

    emit(f"Downloading files from {config.base_url}...")
    for remote in config.files:
        emit(f"  Downloading {remote.dest}...")
        try:
            result.downloaded.append(
                download_file(remote, project_root=project_root, config=config, fetcher=fetcher)
            )
        except (TransferError, OSError) as e:
            result.download_error = str(e)
            emit(f"Error during installation: {e}")
            return result
    emit("All files downloaded successfully")

    documents = config.document_paths(project_root)

    emit("")
    result.fixed_any = repair_documents(documents, root=project_root, emit=emit).fixed_any

    emit("")
    if run_substitution:
        result.substitution_ok = run_substitution_script(
            project_root, config.scripts, is_windows=windows, runner=runner, emit=emit
        )
    else:
        result.substitution_skipped = True
        emit("Skipping insert-variables script")

    emit("")
    result.valid = validate_documents(documents, root=project_root, emit=emit).valid

    if result.substitution_ok and not keep_scripts:
        emit("")
        result.removed_scripts = cleanup_substitution_scripts(
            project_root, config.scripts, emit=emit
        )

    _print_summary(result, config, is_windows=windows, emit=emit)
    return result
