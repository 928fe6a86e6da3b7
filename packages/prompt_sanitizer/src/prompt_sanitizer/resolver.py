from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Literal

from prompt_sanitizer.fragment import FragmentInvalid, check_fragment
from prompt_sanitizer.sections import Section

ResolutionStatus = Literal["unchanged", "kept_first", "used_second", "unresolvable"]

# Only the first two occurrences are ever considered as the surviving section.
MAX_CANDIDATES = 2


@dataclass(frozen=True)
class Resolution:
    sections: tuple[Section, ...]
    status: ResolutionStatus
    target_count: int
    candidate_errors: tuple[str, ...] = ()

    @property
    def fixed(self) -> bool:
        return self.status in {"kept_first", "used_second"}


def anchor_insert_index(others: Sequence[Section]) -> int:
    """Index right after the first anchor section, or the end when none exists."""
    for idx, section in enumerate(others):
        if section.kind == "anchor":
            return idx + 1
    return len(others)


def _rebuild(others: Sequence[Section], winner: Section) -> tuple[Section, ...]:
    cut = anchor_insert_index(others)
    return (*others[:cut], winner, *others[cut:])


def resolve_duplicates(sections: Sequence[Section]) -> Resolution:
    """
    Collapse duplicated target sections down to a single well-formed one.

    The first occurrence wins when it parses; otherwise the second one is tried.
    The survivor is placed directly after the anchor section. When neither of
    the two candidates parses, the input is returned untouched with status
    `unresolvable`.
    """

    targets = [section for section in sections if section.kind == "target"]
    others = [section for section in sections if section.kind != "target"]

    if len(targets) <= 1:
        return Resolution(sections=tuple(sections), status="unchanged", target_count=len(targets))

    errors: list[str] = []
    for idx, candidate in enumerate(targets[:MAX_CANDIDATES]):
        check = check_fragment(candidate.text)
        if isinstance(check, FragmentInvalid):
            errors.append(check.reason)
            continue
        return Resolution(
            sections=_rebuild(others, candidate),
            status="kept_first" if idx == 0 else "used_second",
            target_count=len(targets),
            candidate_errors=tuple(errors),
        )

    return Resolution(
        sections=tuple(sections),
        status="unresolvable",
        target_count=len(targets),
        candidate_errors=tuple(errors),
    )
