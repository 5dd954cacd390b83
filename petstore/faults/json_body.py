"""Classification of faults raised while decoding a JSON request body."""

from __future__ import annotations

from petstore.faults.models import BODY_FAULT_KINDS
from petstore.faults.models import Classification
from petstore.faults.models import Fault
from petstore.faults.models import FaultKind
from petstore.faults.sanitizer import has_location
from petstore.faults.sanitizer import reference_chain_fields
from petstore.faults.sanitizer import sanitize
from petstore.faults.sanitizer import strip_parentheticals
from petstore.schemas.error import InvalidParam

PARSE_ERROR_TITLE = "JSON Parse Error"
BODY_VALIDATION_TITLE = "Request body validation failed"
BODY_MISSING_DETAIL = "Required request body is missing"
BODY_UNTERMINATED_DETAIL = "Not well-formed for the JSON end. Missing brace?"
NOT_PARSABLE_DETAIL = "No parsable JSON. Opening brace missing?"

# Prefixes some decoders put in front of a field-level type mismatch.
STRUCTURAL_MISMATCH_MARKERS: tuple[str, ...] = ("Cannot deserialize ",)


def is_body_fault(fault: Fault) -> bool:
    """Return True for every fault raised while decoding the request body."""
    return fault.kind in BODY_FAULT_KINDS


def is_structural_mismatch(message: str) -> bool:
    """Recognize raw decoder text that describes a field-level mismatch."""
    return message.lstrip().startswith(STRUCTURAL_MISMATCH_MARKERS)


def field_pointer(field_path: tuple[str, ...]) -> str:
    """Render a dotted ``#/a.b.c`` pointer, outermost field first."""
    return "#/" + ".".join(field_path)


class JsonBodyFaultClassifier:
    """Split body decoding failures into syntactic (400) and semantic (422) problems."""

    def classify(self, fault: Fault) -> Classification:
        if fault.kind is FaultKind.BODY_MISSING:
            return Classification(400, PARSE_ERROR_TITLE, detail=BODY_MISSING_DETAIL)

        if fault.kind is FaultKind.BODY_UNTERMINATED:
            return Classification(400, PARSE_ERROR_TITLE, detail=BODY_UNTERMINATED_DETAIL)

        if fault.kind is FaultKind.BODY_SYNTAX_ERROR:
            return self._syntactic(fault)

        if fault.kind is FaultKind.BODY_SEMANTIC_VIOLATION:
            return self._semantic(fault)

        if fault.kind is FaultKind.BODY_TYPE_MISMATCH:
            if is_structural_mismatch(fault.message):
                return self._semantic(fault)
            return self._syntactic(fault)

        raise ValueError(f"Not a body decoding fault: {fault.kind.value}")

    def _syntactic(self, fault: Fault) -> Classification:
        detail = sanitize(fault.message) or NOT_PARSABLE_DETAIL
        return Classification(400, PARSE_ERROR_TITLE, detail=_with_location(detail, fault))

    def _semantic(self, fault: Fault) -> Classification:
        field_path = fault.field_path or reference_chain_fields(fault.message)
        if not field_path:
            # Without a field to point at the fault is reported like a syntax error.
            return self._syntactic(fault)
        reason = sanitize(strip_parentheticals(sanitize(fault.message)))
        invalid_param = InvalidParam(
            pointer=field_pointer(field_path),
            detail=_with_location(reason, fault),
        )
        return Classification(422, BODY_VALIDATION_TITLE, errors=(invalid_param,))


def _with_location(detail: str, fault: Fault) -> str:
    if fault.location is None or has_location(detail):
        return detail
    return f"{detail} at {fault.location.describe()}"
