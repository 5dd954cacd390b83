"""Named validator functions returning structured violations."""

from __future__ import annotations

from collections.abc import Iterable
from collections.abc import Sized
from typing import Any

from petstore.faults.models import Violation

# Leading bytes of the image formats the service accepts.
_IMAGE_SIGNATURES: tuple[tuple[bytes, str], ...] = (
    (b"\x89PNG\r\n\x1a\n", "image/png"),
    (b"\xff\xd8\xff", "image/jpeg"),
    (b"GIF87a", "image/gif"),
    (b"GIF89a", "image/gif"),
)


def not_null(path: tuple[str, ...], value: Any) -> Violation | None:
    if value is None:
        return Violation(path=path, message="must not be null")
    return None


def must_be_null(path: tuple[str, ...], value: Any, message: str) -> Violation | None:
    if value is not None:
        return Violation(path=path, message=message)
    return None


def size_between(path: tuple[str, ...], value: Sized | None, minimum: int, maximum: int) -> Violation | None:
    """Check ``len(value)``; a missing value is left to ``not_null``."""
    if value is None:
        return None
    if minimum <= len(value) <= maximum:
        return None
    return Violation(path=path, message=f"size must be between {minimum} and {maximum}")


def each_size_between(
    path: tuple[str, ...],
    values: Iterable[Sized] | None,
    minimum: int,
    maximum: int,
) -> list[Violation]:
    if values is None:
        return []
    return [
        violation
        for violation in (size_between(path, value, minimum, maximum) for value in values)
        if violation is not None
    ]


def sniff_media_type(content: bytes) -> str | None:
    """Detect the image media type from the content's leading bytes."""
    for signature, media_type in _IMAGE_SIGNATURES:
        if content.startswith(signature):
            return media_type
    return None


def content_matches_media_type(path: tuple[str, ...], content: bytes, declared: str | None) -> Violation | None:
    detected = sniff_media_type(content)
    if declared is not None and detected == declared:
        return None
    return Violation(
        path=path,
        message=f"Declared content type '{declared or ''}' does not match the content ({detected or 'unknown'})",
    )


def collect(*results: Violation | list[Violation] | None) -> list[Violation]:
    """Flatten validator results into a list, dropping passes."""
    violations: list[Violation] = []
    for result in results:
        if result is None:
            continue
        if isinstance(result, Violation):
            violations.append(result)
        else:
            violations.extend(result)
    return violations
