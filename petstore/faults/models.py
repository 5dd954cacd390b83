"""Fault values and classification results for the error-normalization engine."""

from __future__ import annotations

from dataclasses import dataclass
from dataclasses import field
from enum import Enum

from petstore.schemas.error import InvalidParam
from petstore.schemas.error import ProblemDetail


class FaultKind(str, Enum):
    METHOD_NOT_SUPPORTED = "MethodNotSupported"
    MEDIA_TYPE_NOT_SUPPORTED = "MediaTypeNotSupported"
    BODY_MISSING = "BodyMissing"
    BODY_UNTERMINATED = "BodyUnterminated"
    BODY_SYNTAX_ERROR = "BodySyntaxError"
    BODY_TYPE_MISMATCH = "BodyTypeMismatch"
    BODY_SEMANTIC_VIOLATION = "BodySemanticViolation"
    PARAMETER_CONSTRAINT_VIOLATION = "ParameterConstraintViolation"
    PARAMETER_TYPE_MISMATCH = "ParameterTypeMismatch"
    MISSING_PARAMETER = "MissingParameter"
    ENTITY_NOT_FOUND = "EntityNotFound"
    UNIQUE_CONSTRAINT_CONFLICT = "UniqueConstraintConflict"
    UNCLASSIFIED = "Unclassified"


BODY_FAULT_KINDS = frozenset(
    {
        FaultKind.BODY_MISSING,
        FaultKind.BODY_UNTERMINATED,
        FaultKind.BODY_SYNTAX_ERROR,
        FaultKind.BODY_TYPE_MISMATCH,
        FaultKind.BODY_SEMANTIC_VIOLATION,
    }
)


class ParameterSite(str, Enum):
    PATH = "path"
    QUERY = "query"
    HEADER = "header"
    COOKIE = "cookie"


@dataclass(frozen=True)
class SourceLocation:
    """One-based line/column inside a request body."""

    line: int
    column: int

    def describe(self) -> str:
        return f"line {self.line}, column {self.column}"


@dataclass(frozen=True)
class Violation:
    """Structured result of a failed validation rule."""

    path: tuple[str, ...]
    message: str

    @property
    def name(self) -> str:
        """Innermost path segment, used as the pointer target."""
        return self.path[-1] if self.path else ""


@dataclass(frozen=True)
class ParameterInfo:
    """Metadata about a path, query, header or cookie parameter."""

    name: str
    site: ParameterSite = ParameterSite.QUERY
    value: str | None = None
    actual_type: str = "String"
    required_type: str | None = None
    reason: str | None = None


@dataclass(frozen=True)
class Fault:
    """Signal that the current request cannot be completed.

    ``kind`` selects the classifier; everything else is optional metadata
    supplied by whoever detected the failure. ``cause`` is only ever used for
    server-side logging and never reaches a response.
    """

    kind: FaultKind
    message: str = ""
    location: SourceLocation | None = None
    field_path: tuple[str, ...] = ()
    violations: tuple[Violation, ...] = ()
    parameter: ParameterInfo | None = None
    method: str | None = None
    supported_methods: tuple[str, ...] = ()
    content_type: str | None = None
    supported_media_types: tuple[str, ...] = ()
    cause: BaseException | None = field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class RequestContext:
    """Request attributes a classification is allowed to see."""

    path: str
    method: str = "GET"


@dataclass(frozen=True)
class Classification:
    """Status and problem content chosen by a classifier."""

    status: int
    title: str
    detail: str | None = None
    errors: tuple[InvalidParam, ...] | None = None


@dataclass(frozen=True)
class ClassificationResult:
    """Final outcome for one fault: HTTP status plus the wire payload."""

    http_status: int
    problem: ProblemDetail
