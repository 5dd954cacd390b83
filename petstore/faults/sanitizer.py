"""String transforms that strip implementation noise from diagnostic text.

Every transform is pure and is applied until its output stops changing, so
each one (and ``sanitize`` as their composition) is idempotent.
"""

from __future__ import annotations

import re
from collections.abc import Callable

NAMESPACE_ROOTS: tuple[str, ...] = (
    "de",
    "com",
    "org",
    "io",
    "net",
    "java",
    "javax",
    "sqlalchemy",
    "psycopg",
    "psycopg2",
    "pydantic",
    "pydantic_core",
    "starlette",
    "fastapi",
    "petstore",
)

_NAMESPACE_PATTERN = re.compile(
    r"(?<![\w.@])@?(?:"
    + "|".join(re.escape(root) for root in NAMESPACE_ROOTS)
    + r")(?:\.[a-z][a-z0-9_]{1,19}){1,10}\."
)
_WRAPPER_PARENTHETICAL_PATTERN = re.compile(r"\([A-Z][^()]*\)")
_PARENTHETICAL_PATTERN = re.compile(r"\([^()]*\)")
_SEPARATOR_PATTERN = re.compile(r";\s+|[\x00-\x1f\x7f]+")
_WHITESPACE_RUN_PATTERN = re.compile(r"\s{2,}")
_LOCATION_PATTERN = re.compile(r"line:?\s*\d+,\s*column:?\s*\d+", re.IGNORECASE)
_REFERENCE_CHAIN_PATTERN = re.compile(r"reference chain:\s*([^)]*)\)?")
_REFERENCE_FIELD_PATTERN = re.compile(r"\[\"([^\"]*)\"\]")


def _until_stable(transform: Callable[[str], str], text: str) -> str:
    current = text
    while True:
        updated = transform(current)
        if updated == current:
            return current
        current = updated


def strip_namespace_prefixes(text: str) -> str:
    """Remove dotted module/package prefixes such as ``java.util.`` or ``sqlalchemy.exc.``."""
    return _until_stable(lambda value: _NAMESPACE_PATTERN.sub("", value), text)


def strip_wrapper_parentheticals(text: str) -> str:
    """Remove parenthetical suffixes that start with a type name, e.g. ``(StreamUtils$Input)``."""
    return _until_stable(lambda value: _WRAPPER_PARENTHETICAL_PATTERN.sub("", value), text)


def strip_parentheticals(text: str) -> str:
    """Remove every parenthetical group, innermost first."""
    return _until_stable(lambda value: _PARENTHETICAL_PATTERN.sub("", value), text)


def normalize_separators(text: str) -> str:
    """Collapse control characters, ``; `` separators and whitespace runs to single spaces."""

    def _normalize(value: str) -> str:
        spaced = _SEPARATOR_PATTERN.sub(" ", value)
        return _WHITESPACE_RUN_PATTERN.sub(" ", spaced).strip()

    return _until_stable(_normalize, text)


def sanitize(text: str) -> str:
    """Apply all noise-removal transforms used for user-visible diagnostics."""

    def _compose(value: str) -> str:
        return normalize_separators(strip_wrapper_parentheticals(strip_namespace_prefixes(value)))

    return _until_stable(_compose, text)


def has_location(text: str) -> bool:
    """Return True when the text already names a line and column."""
    return _LOCATION_PATTERN.search(text) is not None


def reference_chain_fields(text: str) -> tuple[str, ...]:
    """Rebuild a field path from a ``reference chain: Pet["a"]->Inner["b"]`` suffix."""
    match = _REFERENCE_CHAIN_PATTERN.search(text)
    if match is None:
        return ()
    return tuple(_REFERENCE_FIELD_PATTERN.findall(match.group(1)))
