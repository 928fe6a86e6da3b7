from prompt_sanitizer.fragment import (
    FragmentCheck,
    FragmentInvalid,
    FragmentValid,
    check_fragment,
    is_applicable,
)
from prompt_sanitizer.repair import DocumentRepair, RepairReport, repair_document, repair_documents
from prompt_sanitizer.resolver import Resolution, anchor_insert_index, resolve_duplicates
from prompt_sanitizer.sections import (
    ANCHOR_KEY,
    TARGET_KEY,
    Section,
    SectionKind,
    classify_section,
    join_sections,
    split_sections,
)
from prompt_sanitizer.validation import (
    DocumentVerdict,
    SectionFailure,
    ValidationReport,
    validate_document,
    validate_documents,
)

__all__ = [
    "ANCHOR_KEY",
    "DocumentRepair",
    "DocumentVerdict",
    "FragmentCheck",
    "FragmentInvalid",
    "FragmentValid",
    "RepairReport",
    "Resolution",
    "Section",
    "SectionFailure",
    "SectionKind",
    "TARGET_KEY",
    "ValidationReport",
    "anchor_insert_index",
    "check_fragment",
    "classify_section",
    "is_applicable",
    "join_sections",
    "repair_document",
    "repair_documents",
    "resolve_duplicates",
    "split_sections",
    "validate_document",
    "validate_documents",
]
