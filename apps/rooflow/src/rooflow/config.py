from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any

import yaml

_CONFIG_VERSION = 1
CONFIG_FILENAME = ".rooflow.yaml"
BASE_URL_ENV = "ROOFLOW_BASE_URL"

DEFAULT_BASE_URL = "https://raw.githubusercontent.com/GreatScottyMac/RooFlow/main/"
DEFAULT_TIMEOUT_SECONDS = 30.0

_MODES: tuple[str, ...] = ("architect", "ask", "code", "debug", "test")


@dataclass(frozen=True)
class RemoteFile:
    src: str
    dest: str


@dataclass(frozen=True)
class SubstitutionScripts:
    sh: str = "insert-variables.sh"
    cmd: str = "insert-variables.cmd"


@dataclass(frozen=True)
class InstallConfig:
    base_url: str
    files: tuple[RemoteFile, ...]
    prompt_documents: tuple[str, ...]
    scripts: SubstitutionScripts
    timeout_seconds: float
    source_path: Path | None = None

    def url_for(self, remote: RemoteFile) -> str:
        return self.base_url.rstrip("/") + "/" + remote.src.lstrip("/")

    def document_paths(self, project_root: Path) -> list[Path]:
        return [project_root / rel for rel in self.prompt_documents]


class ConfigError(ValueError):
    def __init__(
        self,
        message: str,
        *,
        code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.details = details or {}


def default_config() -> InstallConfig:
    scripts = SubstitutionScripts()
    prompt_documents = tuple(f".roo/system-prompt-{mode}" for mode in _MODES)
    files = (
        *(RemoteFile(src=f"config/{dest}", dest=dest) for dest in prompt_documents),
        RemoteFile(src="config/.roomodes", dest=".roomodes"),
        RemoteFile(src=f"config/{scripts.cmd}", dest=scripts.cmd),
        RemoteFile(src=f"config/{scripts.sh}", dest=scripts.sh),
    )
    return InstallConfig(
        base_url=DEFAULT_BASE_URL,
        files=files,
        prompt_documents=prompt_documents,
        scripts=scripts,
        timeout_seconds=DEFAULT_TIMEOUT_SECONDS,
    )


def _load_yaml_mapping(path: Path) -> dict[str, Any]:
    try:
        raw = yaml.safe_load(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise ConfigError(f"Failed to read {path}: {e}", code="read_failed") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"Failed to parse YAML in {path}: {e}", code="invalid_yaml") from e

    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ConfigError(
            f"Expected a YAML mapping in {path}, got {type(raw).__name__}.",
            code="not_a_mapping",
        )
    return raw


def _ensure_no_unknown_keys(*, data: Mapping[str, Any], allowed: set[str], path: Path) -> None:
    unknown = set(data) - allowed
    if not unknown:
        return
    unknown_list = ", ".join(sorted(str(key) for key in unknown))
    allowed_list = ", ".join(sorted(allowed))
    raise ConfigError(
        f"Unknown keys in {path}: {unknown_list}. Allowed: {allowed_list}.",
        code="unknown_keys",
        details={"unknown": sorted(str(key) for key in unknown)},
    )


def _parse_rel_path(value: Any, *, path: Path, field: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ConfigError(f"Expected non-empty string for {field} in {path}.", code="invalid_type")
    raw = value.strip().replace("\\", "/")
    if raw.startswith("/") or ".." in raw.split("/"):
        raise ConfigError(
            f"{field} in {path} must stay inside the project root: {value!r}.",
            code="path_escape",
        )
    return raw


def _parse_files(value: Any, *, path: Path) -> tuple[RemoteFile, ...]:
    if not isinstance(value, list):
        raise ConfigError(f"Expected list for files in {path}.", code="invalid_type")
    out: list[RemoteFile] = []
    for idx, item in enumerate(value):
        if not isinstance(item, dict):
            raise ConfigError(f"Expected mapping for files[{idx}] in {path}.", code="invalid_type")
        _ensure_no_unknown_keys(data=item, allowed={"src", "dest"}, path=path)
        src = item.get("src")
        if not isinstance(src, str) or not src.strip():
            raise ConfigError(
                f"Expected non-empty string for files[{idx}].src in {path}.", code="invalid_type"
            )
        dest = _parse_rel_path(item.get("dest"), path=path, field=f"files[{idx}].dest")
        out.append(RemoteFile(src=src.strip(), dest=dest))
    return tuple(out)


def _parse_prompt_documents(value: Any, *, path: Path) -> tuple[str, ...]:
    if not isinstance(value, list):
        raise ConfigError(f"Expected list for prompt_documents in {path}.", code="invalid_type")
    return tuple(
        _parse_rel_path(item, path=path, field=f"prompt_documents[{idx}]")
        for idx, item in enumerate(value)
    )


def _parse_scripts(value: Any, *, path: Path) -> SubstitutionScripts:
    if not isinstance(value, dict):
        raise ConfigError(f"Expected mapping for scripts in {path}.", code="invalid_type")
    _ensure_no_unknown_keys(data=value, allowed={"sh", "cmd"}, path=path)
    defaults = SubstitutionScripts()
    sh = value.get("sh", defaults.sh)
    cmd = value.get("cmd", defaults.cmd)
    return SubstitutionScripts(
        sh=_parse_rel_path(sh, path=path, field="scripts.sh"),
        cmd=_parse_rel_path(cmd, path=path, field="scripts.cmd"),
    )


def _apply_override(base: InstallConfig, *, data: dict[str, Any], path: Path) -> InstallConfig:
    allowed = {
        "version",
        "base_url",
        "files",
        "prompt_documents",
        "scripts",
        "timeout_seconds",
        "meta",
    }
    _ensure_no_unknown_keys(data=data, allowed=allowed, path=path)

    meta = data.get("meta")
    if meta is not None and not isinstance(meta, dict):
        raise ConfigError(f"Expected mapping for meta in {path}.", code="invalid_type")

    version = data.get("version", _CONFIG_VERSION)
    if isinstance(version, bool) or version != _CONFIG_VERSION:
        raise ConfigError(
            f"Unsupported config version in {path}: {version!r} (expected {_CONFIG_VERSION}).",
            code="unsupported_version",
        )

    cfg = replace(base, source_path=path)
    if "base_url" in data:
        base_url = data["base_url"]
        if not isinstance(base_url, str) or not base_url.strip():
            raise ConfigError(f"Expected non-empty string for base_url in {path}.")
        cfg = replace(cfg, base_url=base_url.strip())
    if "files" in data:
        cfg = replace(cfg, files=_parse_files(data["files"], path=path))
    if "prompt_documents" in data:
        prompt_documents = _parse_prompt_documents(data["prompt_documents"], path=path)
        cfg = replace(cfg, prompt_documents=prompt_documents)
    if "scripts" in data:
        cfg = replace(cfg, scripts=_parse_scripts(data["scripts"], path=path))
    if "timeout_seconds" in data:
        timeout = data["timeout_seconds"]
        if isinstance(timeout, bool) or not isinstance(timeout, (int, float)) or timeout <= 0:
            raise ConfigError(f"Expected positive number for timeout_seconds in {path}.")
        cfg = replace(cfg, timeout_seconds=float(timeout))
    return cfg


def load_install_config(
    project_root: Path,
    config_path: Path | None = None,
    *,
    env: Mapping[str, str] | None = None,
) -> InstallConfig:
    """
    Build the effective install configuration.

    Defaults describe the upstream RooFlow layout. An explicit `config_path` must
    exist; otherwise `<project_root>/.rooflow.yaml` is applied when present.
    `ROOFLOW_BASE_URL` in the environment takes precedence over both.
    """

    cfg = default_config()

    if config_path is not None:
        if not config_path.is_file():
            raise ConfigError(f"Config file not found: {config_path}", code="not_found")
        cfg = _apply_override(cfg, data=_load_yaml_mapping(config_path), path=config_path)
    else:
        candidate = project_root / CONFIG_FILENAME
        if candidate.is_file():
            cfg = _apply_override(cfg, data=_load_yaml_mapping(candidate), path=candidate)

    env_map = os.environ if env is None else env
    env_base_url = env_map.get(BASE_URL_ENV, "").strip()
    if env_base_url:
        cfg = replace(cfg, base_url=env_base_url)
    return cfg
