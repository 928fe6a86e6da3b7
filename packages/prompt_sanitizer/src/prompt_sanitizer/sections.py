from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import Literal

SectionKind = Literal["target", "anchor", "other"]

# Top-level keys of the system prompt documents that drive classification.
TARGET_KEY = "capabilities"
ANCHOR_KEY = "mode"


@dataclass(frozen=True)
class Section:
    """A run of lines opened by an unindented, non-blank line.

    `text` keeps the raw bytes of the run, including its trailing newline (only
    the final section of a document may lack one).
    """

    text: str

    @property
    def first_line(self) -> str:
        return self.text.split("\n", maxsplit=1)[0]

    @property
    def kind(self) -> SectionKind:
        return classify_section(self)


def _starts_section(line: str) -> bool:
    if not line.strip():
        return False
    return not line.startswith((" ", "\t"))


def _iter_lines(text: str) -> Iterable[str]:
    pieces = text.split("\n")
    for piece in pieces[:-1]:
        yield piece + "\n"
    if pieces[-1]:
        yield pieces[-1]


def split_sections(text: str) -> list[Section]:
    """Split a document into top-level sections.

    Parameters
    ----------
    text:
        Raw document text (``\\n`` line endings).

    Returns
    -------
    list[Section]
        Ordered sections. Joining their ``text`` reproduces ``text`` exactly;
        the list is empty only for empty input.
    """

    sections: list[Section] = []
    current: list[str] = []
    for line in _iter_lines(text):
        if current and _starts_section(line.rstrip("\n")):
            sections.append(Section("".join(current)))
            current = []
        current.append(line)
    if current:
        sections.append(Section("".join(current)))
    return sections


def _leading_key(line: str) -> str | None:
    key, sep, _ = line.partition(":")
    if not sep:
        return None
    return key


def classify_section(section: Section) -> SectionKind:
    key = _leading_key(section.first_line)
    if key == TARGET_KEY:
        return "target"
    if key == ANCHOR_KEY:
        return "anchor"
    return "other"


def count_kind(sections: Iterable[Section], kind: SectionKind) -> int:
    return sum(1 for section in sections if section.kind == kind)


def join_sections(sections: Sequence[Section]) -> str:
    """Concatenate sections back into document text.

    A section moved away from the end of the document gets the newline it would
    otherwise be missing, so it cannot run into the next section's first line.
    """

    parts: list[str] = []
    last = len(sections) - 1
    for idx, section in enumerate(sections):
        text = section.text
        if idx < last and not text.endswith("\n"):
            text += "\n"
        parts.append(text)
    return "".join(parts)


def section_preview(section: Section, *, limit: int = 40) -> str:
    return section.text[:limit].replace("\n", "\\n")
