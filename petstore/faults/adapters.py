"""Translation of framework exceptions into fault values.

This is the decoding side of the engine: it looks at machine-readable error
codes (pydantic error ``type``s, HTTP status codes, exception classes) and
hands the classifiers a typed ``FaultKind`` instead of raw parser text.
"""

from __future__ import annotations

from collections.abc import Mapping
from collections.abc import Sequence
from typing import Any

from fastapi.exceptions import RequestValidationError
from sqlalchemy.exc import IntegrityError
from starlette.exceptions import HTTPException as StarletteHTTPException

from petstore.faults.models import Fault
from petstore.faults.models import FaultKind
from petstore.faults.models import ParameterInfo
from petstore.faults.models import ParameterSite
from petstore.faults.models import SourceLocation
from petstore.faults.models import Violation

BODY_LOCATION = "body"
JSON_INVALID = "json_invalid"
MISSING = "missing"

_PARAMETER_SITES = {site.value: site for site in ParameterSite}

# Error types raised while coercing a value into its declared type.
_COERCION_TYPES = frozenset(
    {
        "enum",
        "literal_error",
        "int_from_float",
        "uuid_version",
        "url_scheme",
        "url_syntax_violation",
        "url_too_long",
        "bool_parsing",
        "bytes_invalid_encoding",
        "is_instance_of",
    }
)

# Declared type names and conversion reasons for parameter coercion failures.
_CONVERSIONS: dict[str, tuple[str, str]] = {
    "uuid_parsing": ("UUID", "Invalid UUID string: {value}"),
    "uuid_type": ("UUID", "Invalid UUID string: {value}"),
    "uuid_version": ("UUID", "Invalid UUID version: {value}"),
    "int_parsing": ("Integer", 'For input string: "{value}"'),
    "int_type": ("Integer", 'For input string: "{value}"'),
    "int_from_float": ("Integer", 'For input string: "{value}"'),
    "float_parsing": ("Double", 'For input string: "{value}"'),
    "float_type": ("Double", 'For input string: "{value}"'),
    "bool_parsing": ("Boolean", "Invalid boolean value '{value}'"),
    "bool_type": ("Boolean", "Invalid boolean value '{value}'"),
    "enum": ("Enum", "'{value}' is not one of {expected}"),
    "literal_error": ("Enum", "'{value}' is not one of {expected}"),
    "date_parsing": ("LocalDate", "Invalid date string: {value}"),
    "datetime_parsing": ("OffsetDateTime", "Invalid date-time string: {value}"),
}

# Rendered messages for constraint failures, keyed by error type.
_CONSTRAINT_MESSAGES: dict[str, str] = {
    MISSING: "must not be null",
    "greater_than_equal": "must be greater than or equal to {ge}",
    "greater_than": "must be greater than {gt}",
    "less_than_equal": "must be less than or equal to {le}",
    "less_than": "must be less than {lt}",
    "multiple_of": "must be a multiple of {multiple_of}",
    "string_too_short": "size must be at least {min_length}",
    "string_too_long": "size must be at most {max_length}",
    "too_short": "size must be at least {min_length}",
    "too_long": "size must be at most {max_length}",
    "string_pattern_mismatch": 'must match "{pattern}"',
}


def is_coercion_error(error_type: str) -> bool:
    """Return True for error types that mean "value has the wrong type or shape"."""
    return (
        error_type in _COERCION_TYPES
        or error_type.endswith("_parsing")
        or error_type.endswith("_type")
    )


def render_constraint_message(error: Mapping[str, Any]) -> str:
    """Render a constraint failure with the bound values from the error context."""
    template = _CONSTRAINT_MESSAGES.get(str(error.get("type", "")))
    context = error.get("ctx") or {}
    if template is None:
        return str(error.get("msg", "Invalid value"))
    try:
        return template.format(**context)
    except (KeyError, IndexError):
        return str(error.get("msg", "Invalid value"))


def line_and_column(document: str, position: int) -> SourceLocation:
    """Convert a character offset into a one-based line/column pair."""
    line = document.count("\n", 0, position) + 1
    column = position - document.rfind("\n", 0, position)
    return SourceLocation(line=line, column=column)


def fault_from_validation_error(exc: RequestValidationError) -> Fault:
    """Translate a request validation error into exactly one fault.

    Candidates are considered in dispatch priority order: body decoding,
    parameter type mismatch, constraint violations, missing parameters.
    """
    errors: Sequence[Mapping[str, Any]] = exc.errors()

    for error in errors:
        if error.get("type") == JSON_INVALID:
            return _json_decode_fault(error, exc.body, exc)

    body_errors = [error for error in errors if _site(error) == BODY_LOCATION]
    for error in body_errors:
        fault = _body_decoding_fault(error, exc)
        if fault is not None:
            return fault

    parameter_errors = [error for error in errors if _site(error) in _PARAMETER_SITES]
    for error in parameter_errors:
        if is_coercion_error(str(error.get("type", ""))):
            return _parameter_type_mismatch(error, exc)

    violations = tuple(
        Violation(path=_named_path(error), message=render_constraint_message(error))
        for error in errors
        if not _is_missing_parameter(error)
    )
    if violations:
        return Fault(
            kind=FaultKind.PARAMETER_CONSTRAINT_VIOLATION,
            message="; ".join(f"{'.'.join(v.path)}: {v.message}" for v in violations),
            violations=violations,
            cause=exc,
        )

    missing = [error for error in parameter_errors if _is_missing_parameter(error)]
    if missing:
        return _missing_parameter(missing[0], exc)

    return Fault(kind=FaultKind.UNCLASSIFIED, message=str(errors), cause=exc)


def fault_from_http_exception(
    exc: StarletteHTTPException,
    *,
    method: str | None = None,
    content_type: str | None = None,
    supported_methods: Sequence[str] = (),
) -> Fault:
    """Translate routing-level HTTP exceptions raised by Starlette.

    ``supported_methods`` overrides the ``Allow`` header, which only names the
    methods of the first route matching the path.
    """
    message = exc.detail if isinstance(exc.detail, str) else ""

    if exc.status_code == 405:
        allow = (exc.headers or {}).get("Allow", "")
        methods = supported_methods or [part.strip() for part in allow.split(",") if part.strip()]
        return Fault(
            kind=FaultKind.METHOD_NOT_SUPPORTED,
            message=message,
            method=method,
            supported_methods=tuple(sorted(set(methods))),
        )

    if exc.status_code == 404:
        return Fault(kind=FaultKind.ENTITY_NOT_FOUND, message=message)

    if exc.status_code == 415:
        return Fault(
            kind=FaultKind.MEDIA_TYPE_NOT_SUPPORTED,
            message=message,
            content_type=content_type,
        )

    # FastAPI raises a bare 400 when the body bytes cannot be decoded at all.
    if exc.status_code == 400:
        return Fault(kind=FaultKind.BODY_SYNTAX_ERROR, message=message, cause=exc)

    return Fault(
        kind=FaultKind.UNCLASSIFIED,
        message=f"HTTP {exc.status_code}: {message}",
        cause=exc,
    )


def fault_from_integrity_error(exc: IntegrityError) -> Fault:
    """Persistence conflicts are classified on the driver's own message."""
    raw = str(exc.orig) if exc.orig is not None else str(exc)
    return Fault(kind=FaultKind.UNIQUE_CONSTRAINT_CONFLICT, message=raw, cause=exc)


def unclassified_fault(exc: BaseException) -> Fault:
    return Fault(kind=FaultKind.UNCLASSIFIED, message=f"{type(exc).__name__}: {exc}", cause=exc)


def _site(error: Mapping[str, Any]) -> str | None:
    location = error.get("loc") or ()
    if not location:
        return None
    return str(location[0])


def _named_path(error: Mapping[str, Any]) -> tuple[str, ...]:
    # List indexes are dropped; pointers name fields only.
    return tuple(part for part in (error.get("loc") or ()) if isinstance(part, str))


def _is_missing_parameter(error: Mapping[str, Any]) -> bool:
    return error.get("type") == MISSING and _site(error) in _PARAMETER_SITES


def _as_text(value: Any) -> str:
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).decode("utf-8", errors="replace")
    if value is None:
        return ""
    return str(value)


def _json_decode_fault(error: Mapping[str, Any], document: Any, exc: RequestValidationError) -> Fault:
    text = _as_text(document)
    if not text.strip():
        return Fault(kind=FaultKind.BODY_MISSING, cause=exc)

    location = error.get("loc") or ()
    position = location[1] if len(location) > 1 and isinstance(location[1], int) else len(text)
    context = error.get("ctx") or {}
    message = str(context.get("error") or error.get("msg") or "")

    if position >= len(text.rstrip()):
        return Fault(kind=FaultKind.BODY_UNTERMINATED, message=message, cause=exc)

    return Fault(
        kind=FaultKind.BODY_SYNTAX_ERROR,
        message=message,
        location=line_and_column(text, position),
        cause=exc,
    )


def _body_decoding_fault(error: Mapping[str, Any], exc: RequestValidationError) -> Fault | None:
    location = tuple(error.get("loc") or ())
    error_type = str(error.get("type", ""))
    message = str(error.get("msg", ""))

    if len(location) == 1:
        if error_type == MISSING:
            return Fault(kind=FaultKind.BODY_MISSING, cause=exc)
        return Fault(kind=FaultKind.BODY_TYPE_MISMATCH, message=message, cause=exc)

    if is_coercion_error(error_type):
        return Fault(
            kind=FaultKind.BODY_SEMANTIC_VIOLATION,
            message=message,
            field_path=_named_path(error)[1:],
            cause=exc,
        )
    return None


def _parameter_info(error: Mapping[str, Any]) -> ParameterInfo:
    names = _named_path(error)
    name = names[-1] if len(names) > 1 else ""
    site = _PARAMETER_SITES[str(_site(error))]
    value = error.get("input")
    return ParameterInfo(name=name, site=site, value=None if value is None else str(value))


def _parameter_type_mismatch(error: Mapping[str, Any], exc: RequestValidationError) -> Fault:
    info = _parameter_info(error)
    error_type = str(error.get("type", ""))
    required_type, template = _CONVERSIONS.get(
        error_type,
        (error_type.split("_")[0].capitalize(), "{msg}"),
    )
    context = {"value": info.value, "msg": error.get("msg", ""), **(error.get("ctx") or {})}
    try:
        reason = template.format(**context)
    except (KeyError, IndexError):
        reason = str(error.get("msg", ""))

    return Fault(
        kind=FaultKind.PARAMETER_TYPE_MISMATCH,
        message=str(error.get("msg", "")),
        field_path=(info.name,),
        parameter=ParameterInfo(
            name=info.name,
            site=info.site,
            value=info.value,
            required_type=required_type,
            reason=reason,
        ),
        cause=exc,
    )


def _missing_parameter(error: Mapping[str, Any], exc: RequestValidationError) -> Fault:
    info = _parameter_info(error)
    return Fault(
        kind=FaultKind.MISSING_PARAMETER,
        message=str(error.get("msg", "")),
        field_path=(info.name,),
        parameter=info,
        cause=exc,
    )
