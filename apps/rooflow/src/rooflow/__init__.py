from rooflow.config import (
    ConfigError,
    InstallConfig,
    RemoteFile,
    SubstitutionScripts,
    default_config,
    load_install_config,
)
from rooflow.fetch import TransferError, download_file, fetch_url
from rooflow.install import InstallResult, install
from rooflow.pathing import ProjectRootError, find_project_root, resolve_project_root
from rooflow.substitute import cleanup_substitution_scripts, run_substitution_script

__all__ = [
    "ConfigError",
    "InstallConfig",
    "InstallResult",
    "ProjectRootError",
    "RemoteFile",
    "SubstitutionScripts",
    "TransferError",
    "cleanup_substitution_scripts",
    "default_config",
    "download_file",
    "fetch_url",
    "find_project_root",
    "install",
    "load_install_config",
    "resolve_project_root",
    "run_substitution_script",
]
