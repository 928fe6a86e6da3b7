from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal

from prompt_sanitizer.documents import Emit, display_path, read_document, write_document
from prompt_sanitizer.resolver import resolve_duplicates
from prompt_sanitizer.sections import TARGET_KEY, join_sections, split_sections

DocumentStatus = Literal["missing", "clean", "fixed", "unresolvable", "failed"]


@dataclass(frozen=True)
class DocumentRepair:
    path: Path
    status: DocumentStatus
    target_count: int = 0
    used_second: bool = False
    candidate_errors: tuple[str, ...] = ()
    error: str | None = None


@dataclass
class RepairReport:
    documents: list[DocumentRepair] = field(default_factory=list)
    lines: list[str] = field(default_factory=list)

    @property
    def fixed_any(self) -> bool:
        return any(doc.status == "fixed" for doc in self.documents)

    def by_status(self, status: DocumentStatus) -> list[DocumentRepair]:
        return [doc for doc in self.documents if doc.status == status]


def repair_document(path: Path) -> DocumentRepair:
    """
    Remove duplicated target sections from one document, rewriting it in place.

    Read and write failures are reported as a `failed` outcome rather than raised,
    so a batch can continue past a single unreadable file.
    """

    if not path.exists():
        return DocumentRepair(path=path, status="missing")

    try:
        text = read_document(path)
    except (OSError, UnicodeDecodeError) as e:
        return DocumentRepair(path=path, status="failed", error=str(e))

    resolution = resolve_duplicates(split_sections(text))
    if resolution.status == "unchanged":
        return DocumentRepair(path=path, status="clean", target_count=resolution.target_count)
    if resolution.status == "unresolvable":
        return DocumentRepair(
            path=path,
            status="unresolvable",
            target_count=resolution.target_count,
            candidate_errors=resolution.candidate_errors,
        )

    try:
        write_document(path, join_sections(resolution.sections))
    except OSError as e:
        return DocumentRepair(
            path=path,
            status="failed",
            target_count=resolution.target_count,
            candidate_errors=resolution.candidate_errors,
            error=str(e),
        )
    return DocumentRepair(
        path=path,
        status="fixed",
        target_count=resolution.target_count,
        used_second=resolution.status == "used_second",
        candidate_errors=resolution.candidate_errors,
    )


def _describe(doc: DocumentRepair, name: str) -> list[str]:
    if doc.status == "missing":
        return [f"  {name}: File not found, skipping"]
    if doc.status == "clean":
        return [f"  {name}: No duplicate {TARGET_KEY} found"]

    lines: list[str] = []
    if doc.target_count > 1:
        lines.append(f"  {name}: Found {doc.target_count} {TARGET_KEY} sections")
    if doc.candidate_errors:
        lines.append(
            f"  Error: Failed to parse {TARGET_KEY} section in {name}: {doc.candidate_errors[0]}"
        )

    if doc.status == "fixed":
        if doc.used_second:
            lines.append(
                f"  Fixed: Used second {TARGET_KEY} section in {name} (first had YAML errors)"
            )
        else:
            lines.append(f"  Fixed: Kept first {TARGET_KEY} section in {name}")
    elif doc.status == "unresolvable":
        lines.append(f"  Error: Both {TARGET_KEY} sections have YAML errors in {name}")
    else:
        lines.append(f"  Error: Could not repair {name}: {doc.error}")
    return lines


def repair_documents(
    paths: Iterable[Path],
    *,
    root: Path | None = None,
    emit: Emit | None = None,
) -> RepairReport:
    """Run `repair_document` over `paths` in order and collect diagnostics.

    Parameters
    ----------
    paths:
        Documents to repair. Missing files are skipped.
    root:
        Base directory used to shorten paths in diagnostics.
    emit:
        Optional sink receiving each diagnostic line as it is produced.

    Returns
    -------
    RepairReport
        Per-document outcomes; ``fixed_any`` tells whether anything was rewritten.
    """

    report = RepairReport()

    def _line(text: str) -> None:
        report.lines.append(text)
        if emit is not None:
            emit(text)

    _line(f"Checking system prompt files for duplicate {TARGET_KEY} sections...")
    for path in paths:
        doc = repair_document(path)
        report.documents.append(doc)
        for text in _describe(doc, display_path(path, root)):
            _line(text)

    if report.fixed_any:
        _line(f"Fixed duplicate {TARGET_KEY} sections in system prompt files")
    else:
        _line(f"No duplicate {TARGET_KEY} sections found or fixed")
    return report
