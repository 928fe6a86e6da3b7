from __future__ import annotations

from dataclasses import dataclass

import yaml

# Synthetic key the section is nested under before parsing.
WRAPPER_KEY = "temp_root"
_INDENT = "  "


@dataclass(frozen=True)
class FragmentValid:
    pass


@dataclass(frozen=True)
class FragmentInvalid:
    reason: str


FragmentCheck = FragmentValid | FragmentInvalid


def is_applicable(text: str) -> bool:
    """Only text with a key/value delimiter is treated as structured."""
    return ":" in text


def wrap_fragment(text: str) -> str:
    body = "\n".join(_INDENT + line for line in text.split("\n"))
    return f"{WRAPPER_KEY}:\n{body}"


def check_fragment(text: str) -> FragmentCheck:
    """
    Parse `text` as a standalone YAML fragment nested under a wrapper key.

    Parser failures are returned as `FragmentInvalid` with the parser message;
    nothing is raised to the caller.
    """

    try:
        yaml.safe_load(wrap_fragment(text))
    except yaml.YAMLError as e:
        return FragmentInvalid(reason=str(e))
    except Exception as e:
        # Tag constructors raise builtins (ValueError, KeyError, AttributeError), and
        # deep nesting exhausts the recursion limit.
        return FragmentInvalid(reason=f"{type(e).__name__}: {e}")
    return FragmentValid()
