from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import requests

from rooflow.config import DEFAULT_TIMEOUT_SECONDS, InstallConfig, RemoteFile

Fetcher = Callable[[str], bytes]


class TransferError(RuntimeError):
    def __init__(
        self,
        message: str,
        *,
        url: str,
        status: int | None = None,
        reason: str | None = None,
    ) -> None:
        super().__init__(message)
        self.url = url
        self.status = status
        self.reason = reason


def fetch_url(url: str, *, timeout: float = DEFAULT_TIMEOUT_SECONDS) -> bytes:
    try:
        response = requests.get(url, timeout=timeout)
    except requests.RequestException as e:
        raise TransferError(f"Failed to download {url}: {e}", url=url, reason=str(e)) from e

    if response.status_code != 200:
        raise TransferError(
            f"Failed to download {url}: {response.status_code} {response.reason}".rstrip(),
            url=url,
            status=response.status_code,
            reason=response.reason,
        )
    return response.content


def download_file(
    remote: RemoteFile,
    *,
    project_root: Path,
    config: InstallConfig,
    fetcher: Fetcher | None = None,
) -> Path:
    """
    Fetch one remote file and write it under `project_root`.

    Parent directories are created as needed. A destination left behind by a
    failed write is removed before the error propagates.
    """

    url = config.url_for(remote)
    if fetcher is None:
        payload = fetch_url(url, timeout=config.timeout_seconds)
    else:
        payload = fetcher(url)

    dest_path = project_root / remote.dest
    dest_path.parent.mkdir(parents=True, exist_ok=True)
    try:
        dest_path.write_bytes(payload)
    except OSError:
        dest_path.unlink(missing_ok=True)
        raise
    return dest_path
