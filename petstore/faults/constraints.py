"""Routing of field and parameter validation faults to status and pointer shape."""

from __future__ import annotations

from petstore.faults.models import Classification
from petstore.faults.models import Fault
from petstore.faults.models import Violation
from petstore.faults.sanitizer import sanitize
from petstore.faults.sanitizer import strip_namespace_prefixes
from petstore.schemas.error import InvalidParam

BODY_SEGMENT = "body"
BODY_VALIDATION_TITLE = "Request body validation failed"
PARAMETER_VIOLATION_TITLE = "Violation in parameter"
CONVERSION_FAILED_TITLE = "Failed to convert value"


def is_body_site(violation: Violation) -> bool:
    """Return True when the violation path passes through the request body."""
    return any(segment.lower() == BODY_SEGMENT for segment in violation.path)


def conversion_title(actual_type: str, required_type: str) -> str:
    return f"Failed to convert value of type '{actual_type}' to required type '{required_type}'"


class ConstraintFaultRouter:
    """Map validation violations to 422 (body site) or 400 (parameter site).

    Parameter-site violations follow a full-list policy: every simultaneous
    violation is reported as its own ``InvalidParam`` and summarized in
    ``detail``. When a request has both kinds, only the parameter-site
    violations are reported.
    """

    def route(self, fault: Fault) -> Classification:
        violations = fault.violations
        if not violations:
            # Nothing enumerable: report the sanitized message as one parameter problem.
            return Classification(400, PARAMETER_VIOLATION_TITLE, detail=sanitize(fault.message) or None)

        # Parameter violations win over body violations raised for the same request.
        parameter_violations = tuple(v for v in violations if not is_body_site(v))
        if parameter_violations:
            return self._parameter_site(_distinct(parameter_violations))
        return self._body_site(_distinct(violations))

    def route_type_mismatch(self, fault: Fault) -> Classification:
        """Report a path/query value that could not be converted to its declared type."""
        parameter = fault.parameter
        name = parameter.name if parameter else (fault.field_path[-1] if fault.field_path else "")

        if parameter is not None and parameter.required_type:
            title = conversion_title(parameter.actual_type, parameter.required_type)
            reason = parameter.reason or sanitize(fault.message)
        else:
            title, reason = _split_conversion_message(fault.message)

        invalid_param = InvalidParam(pointer=f"#/{name}", detail=reason or title)
        return Classification(400, title, errors=(invalid_param,))

    def _body_site(self, violations: tuple[Violation, ...]) -> Classification:
        errors = tuple(
            InvalidParam(pointer=f"#/{violation.name}", detail=violation.message)
            for violation in violations
        )
        return Classification(422, BODY_VALIDATION_TITLE, errors=errors)

    def _parameter_site(self, violations: tuple[Violation, ...]) -> Classification:
        errors = tuple(
            InvalidParam(pointer=f"#/{violation.name}", detail=violation.message)
            for violation in violations
        )
        detail = "; ".join(f"{violation.name}: {violation.message}" for violation in violations)
        return Classification(400, PARAMETER_VIOLATION_TITLE, detail=detail, errors=errors)


def _distinct(violations: tuple[Violation, ...]) -> tuple[Violation, ...]:
    # One entry per pointer and message; repeated list items collapse into one.
    seen: dict[tuple[str, str], Violation] = {}
    for violation in violations:
        seen.setdefault((violation.name, violation.message), violation)
    return tuple(seen.values())


def _split_conversion_message(message: str) -> tuple[str, str]:
    # Raw converter text reads "<title>; <reason>"; split before separators are normalized.
    stripped = strip_namespace_prefixes(message)
    head, separator, tail = stripped.partition(";")
    if not separator:
        return CONVERSION_FAILED_TITLE, sanitize(stripped)
    return sanitize(head) or CONVERSION_FAILED_TITLE, sanitize(tail)
