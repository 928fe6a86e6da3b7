from __future__ import annotations

from pathlib import Path

import pytest

from prompt_sanitizer.repair import repair_document, repair_documents
from prompt_sanitizer.sections import count_kind, split_sections
from prompt_sanitizer.validation import validate_document, validate_documents

GOOD_CAPS = "capabilities:\n  - read\n"
BROKEN_CAPS = "capabilities:\n  - read: write: all\n"
UNTERMINATED_CAPS = 'capabilities:\n  - "unterminated\n'


def _write(path: Path, text: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(text.encode("utf-8"))
    return path


def test_repair_rewrites_duplicated_document(tmp_path: Path) -> None:
    path = _write(
        tmp_path / ".roo" / "system-prompt-code",
        "role: foo\n" + GOOD_CAPS + "mode: code\n" + "capabilities:\n  -oops\n",
    )

    doc = repair_document(path)

    assert doc.status == "fixed"
    assert doc.target_count == 2
    assert not doc.used_second
    assert path.read_text(encoding="utf-8") == "role: foo\nmode: code\n" + GOOD_CAPS


def test_repair_leaves_clean_document_untouched(tmp_path: Path) -> None:
    original = "role: foo\nmode: code\n" + GOOD_CAPS
    path = _write(tmp_path / "system-prompt-ask", original)
    before = path.stat().st_mtime_ns

    doc = repair_document(path)

    assert doc.status == "clean"
    assert path.read_text(encoding="utf-8") == original
    assert path.stat().st_mtime_ns == before


def test_repair_preserves_crlf_bytes(tmp_path: Path) -> None:
    text = "mode: code\r\ncapabilities:\r\n  - read\r\nrole: x\r\ncapabilities:\r\n  - b\r\n"
    path = _write(tmp_path / "system-prompt-debug", text)

    assert repair_document(path).status == "fixed"
    assert path.read_bytes() == b"mode: code\r\ncapabilities:\r\n  - read\r\nrole: x\r\n"


def test_repair_unresolvable_document_is_not_written(tmp_path: Path) -> None:
    original = "mode: code\n" + BROKEN_CAPS + "role: foo\n" + UNTERMINATED_CAPS
    path = _write(tmp_path / "system-prompt-test", original)

    doc = repair_document(path)

    assert doc.status == "unresolvable"
    assert len(doc.candidate_errors) == 2
    assert path.read_text(encoding="utf-8") == original

    verdict = validate_document(path)
    assert verdict.duplicated
    assert not verdict.valid


def test_repair_documents_reports_each_outcome(tmp_path: Path) -> None:
    fixed = _write(tmp_path / "a", "mode: code\n" + BROKEN_CAPS + "role: r\n" + GOOD_CAPS)
    clean = _write(tmp_path / "b", "mode: code\n" + GOOD_CAPS)
    broken = _write(tmp_path / "c", BROKEN_CAPS + UNTERMINATED_CAPS)
    missing = tmp_path / "d"

    lines: list[str] = []
    report = repair_documents([fixed, clean, broken, missing], root=tmp_path, emit=lines.append)

    assert report.fixed_any
    assert [doc.status for doc in report.documents] == [
        "fixed",
        "clean",
        "unresolvable",
        "missing",
    ]
    assert report.documents[0].used_second
    assert lines == report.lines
    assert "  a: Found 2 capabilities sections" in lines
    assert "  Fixed: Used second capabilities section in a (first had YAML errors)" in lines
    assert "  b: No duplicate capabilities found" in lines
    assert "  Error: Both capabilities sections have YAML errors in c" in lines
    assert "  d: File not found, skipping" in lines
    assert lines[-1] == "Fixed duplicate capabilities sections in system prompt files"


def test_repair_documents_without_changes(tmp_path: Path) -> None:
    report = repair_documents([tmp_path / "missing"])
    assert not report.fixed_any
    assert report.lines[-1] == "No duplicate capabilities sections found or fixed"


def test_repair_failure_does_not_abort_batch(tmp_path: Path) -> None:
    unreadable = tmp_path / "dir-not-file"
    unreadable.mkdir()
    fixable = _write(tmp_path / "ok", GOOD_CAPS + GOOD_CAPS)

    report = repair_documents([unreadable, fixable], root=tmp_path)

    assert [doc.status for doc in report.documents] == ["failed", "fixed"]
    assert report.fixed_any
    assert any(line.startswith("  Error: Could not repair dir-not-file") for line in report.lines)


def test_repaired_documents_have_single_target(tmp_path: Path) -> None:
    paths = [
        _write(tmp_path / "one", GOOD_CAPS + "mode: a\n" + GOOD_CAPS + GOOD_CAPS),
        _write(tmp_path / "two", "mode: b\n" + BROKEN_CAPS + GOOD_CAPS),
    ]
    report = repair_documents(paths)
    assert all(doc.status == "fixed" for doc in report.documents)

    for path in paths:
        sections = split_sections(path.read_text(encoding="utf-8"))
        assert count_kind(sections, "target") == 1
        assert validate_document(path).target_count == 1


def test_validate_flags_invalid_sections(tmp_path: Path) -> None:
    path = _write(
        tmp_path / "system-prompt-architect",
        "role: foo\n" + "tools: [read, write\n" + "Plain prose without delimiter\n" + GOOD_CAPS,
    )

    verdict = validate_document(path)

    assert verdict.present
    assert not verdict.valid
    assert len(verdict.failures) == 1
    assert verdict.failures[0].preview.startswith("tools: [read, write")


def test_validate_skips_sections_without_delimiter(tmp_path: Path) -> None:
    path = _write(tmp_path / "notes", "Plain prose\n  - [unbalanced\n")
    assert validate_document(path).valid


def test_validate_documents_aggregates(tmp_path: Path) -> None:
    good = _write(tmp_path / "good", "mode: code\n" + GOOD_CAPS)
    dup = _write(tmp_path / "dup", GOOD_CAPS + GOOD_CAPS)
    missing = tmp_path / "missing"

    lines: list[str] = []
    report = validate_documents([good, dup, missing], root=tmp_path, emit=lines.append)

    assert not report.valid
    assert [doc.valid for doc in report.documents] == [True, False, True]
    assert "  Valid: good - All YAML sections validated successfully" in lines
    assert "  Warning: dup still has 2 capabilities sections" in lines
    assert "  missing: File not found, skipping" in lines
    assert lines[-1] == "Warning: Some files have issues that may need attention"


@pytest.mark.parametrize("names", [[], ["absent"]])
def test_validate_documents_with_nothing_present_is_valid(tmp_path: Path, names: list[str]) -> None:
    report = validate_documents([tmp_path / name for name in names])
    assert report.valid
    assert report.lines[-1] == "All system prompt files validated successfully"


def test_validate_reports_section_errors(tmp_path: Path) -> None:
    path = _write(tmp_path / "bad", "mode: code\n" + BROKEN_CAPS)
    report = validate_documents([path], root=tmp_path)

    assert not report.valid
    assert any(line.startswith("    Error: ") for line in report.lines)
    assert "  Warning: bad has 1 sections with YAML errors" in report.lines


def test_tagged_scalar_errors_do_not_abort_batches(tmp_path: Path) -> None:
    tagged = "capabilities:\n  enabled: !!bool maybe\n"
    bad = _write(tmp_path / "bad", "mode: code\n" + tagged + "role: r\n" + GOOD_CAPS)
    good = _write(tmp_path / "good", "mode: code\n" + GOOD_CAPS)

    repaired = repair_documents([bad, good], root=tmp_path)

    assert [doc.status for doc in repaired.documents] == ["fixed", "clean"]
    assert repaired.documents[0].used_second
    assert bad.read_text(encoding="utf-8") == "mode: code\n" + GOOD_CAPS + "role: r\n"

    _write(bad, "mode: code\n" + tagged)
    report = validate_documents([bad, good], root=tmp_path)

    assert not report.valid
    assert [doc.valid for doc in report.documents] == [False, True]
    assert report.documents[0].failures[0].reason.startswith("KeyError:")
    assert "  Valid: good - All YAML sections validated successfully" in report.lines
