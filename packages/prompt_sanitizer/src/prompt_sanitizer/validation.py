from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path

from prompt_sanitizer.documents import Emit, display_path, read_document
from prompt_sanitizer.fragment import FragmentInvalid, check_fragment, is_applicable
from prompt_sanitizer.sections import TARGET_KEY, count_kind, section_preview, split_sections


@dataclass(frozen=True)
class SectionFailure:
    preview: str
    reason: str


@dataclass(frozen=True)
class DocumentVerdict:
    path: Path
    present: bool
    target_count: int = 0
    failures: tuple[SectionFailure, ...] = ()
    read_error: str | None = None

    @property
    def duplicated(self) -> bool:
        return self.target_count > 1

    @property
    def valid(self) -> bool:
        if not self.present:
            return True
        return self.read_error is None and not self.duplicated and not self.failures


@dataclass
class ValidationReport:
    documents: list[DocumentVerdict] = field(default_factory=list)
    lines: list[str] = field(default_factory=list)

    @property
    def valid(self) -> bool:
        return all(doc.valid for doc in self.documents)


def validate_document(path: Path) -> DocumentVerdict:
    """
    Check one document: no duplicated target sections, and every section that
    looks structured parses on its own. Missing files are reported as absent.
    """

    if not path.exists():
        return DocumentVerdict(path=path, present=False)

    try:
        text = read_document(path)
    except (OSError, UnicodeDecodeError) as e:
        return DocumentVerdict(path=path, present=True, read_error=str(e))

    sections = split_sections(text)
    target_count = count_kind(sections, "target")
    if target_count > 1:
        return DocumentVerdict(path=path, present=True, target_count=target_count)

    failures: list[SectionFailure] = []
    for section in sections:
        if not is_applicable(section.text):
            continue
        check = check_fragment(section.text)
        if isinstance(check, FragmentInvalid):
            failures.append(SectionFailure(preview=section_preview(section), reason=check.reason))
    return DocumentVerdict(
        path=path,
        present=True,
        target_count=target_count,
        failures=tuple(failures),
    )


def _describe(doc: DocumentVerdict, name: str) -> list[str]:
    if not doc.present:
        return [f"  {name}: File not found, skipping"]
    if doc.read_error is not None:
        return [f"  Warning: Could not read {name}: {doc.read_error}"]
    if doc.duplicated:
        return [f"  Warning: {name} still has {doc.target_count} {TARGET_KEY} sections"]
    if not doc.failures:
        return [f"  Valid: {name} - All YAML sections validated successfully"]

    lines: list[str] = []
    for failure in doc.failures:
        lines.append(f"  Warning: Invalid YAML in section starting with: {failure.preview}...")
        lines.append(f"    Error: {failure.reason}")
    lines.append(f"  Warning: {name} has {len(doc.failures)} sections with YAML errors")
    return lines


def validate_documents(
    paths: Iterable[Path],
    *,
    root: Path | None = None,
    emit: Emit | None = None,
) -> ValidationReport:
    report = ValidationReport()

    def _line(text: str) -> None:
        report.lines.append(text)
        if emit is not None:
            emit(text)

    _line("Validating system prompt files...")
    for path in paths:
        doc = validate_document(path)
        report.documents.append(doc)
        for text in _describe(doc, display_path(path, root)):
            _line(text)

    if report.valid:
        _line("All system prompt files validated successfully")
    else:
        _line("Warning: Some files have issues that may need attention")
    return report
