from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

Emit = Callable[[str], None]


def display_path(path: Path, root: Path | None) -> str:
    if root is None:
        return str(path)
    try:
        return path.relative_to(root).as_posix()
    except ValueError:
        return str(path)


def read_document(path: Path) -> str:
    # newline="" keeps CRLF documents byte-identical on rewrite.
    with path.open("r", encoding="utf-8", newline="") as fh:
        return fh.read()


def write_document(path: Path, text: str) -> None:
    with path.open("w", encoding="utf-8", newline="") as fh:
        fh.write(text)
