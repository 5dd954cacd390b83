"""Unit tests for translating framework exceptions into faults."""

from __future__ import annotations

from fastapi.exceptions import RequestValidationError
from sqlalchemy.exc import IntegrityError
from starlette.exceptions import HTTPException as StarletteHTTPException

from petstore.faults.adapters import fault_from_http_exception
from petstore.faults.adapters import fault_from_integrity_error
from petstore.faults.adapters import fault_from_validation_error
from petstore.faults.adapters import is_coercion_error
from petstore.faults.adapters import line_and_column
from petstore.faults.adapters import render_constraint_message
from petstore.faults.adapters import unclassified_fault
from petstore.faults.models import FaultKind
from petstore.faults.models import ParameterSite
from petstore.faults.models import SourceLocation


def _json_invalid(document: str, position: int, message: str) -> RequestValidationError:
    return RequestValidationError(
        [
            {
                "type": "json_invalid",
                "loc": ("body", position),
                "msg": "JSON decode error",
                "input": {},
                "ctx": {"error": message},
            }
        ],
        body=document,
    )


def test_line_and_column_are_one_based() -> None:
    assert line_and_column('{"a":\n  x}', 8) == SourceLocation(line=2, column=3)
    assert line_and_column("x", 0) == SourceLocation(line=1, column=1)


def test_blank_document_is_a_missing_body() -> None:
    fault = fault_from_validation_error(_json_invalid("   ", 3, "Expecting value"))

    assert fault.kind is FaultKind.BODY_MISSING


def test_error_at_document_end_is_unterminated() -> None:
    document = '{"name": "Rex"'

    fault = fault_from_validation_error(_json_invalid(document, len(document), "Expecting ',' delimiter"))

    assert fault.kind is FaultKind.BODY_UNTERMINATED


def test_error_inside_document_is_a_syntax_error_with_location() -> None:
    document = '{\n  "name": x\n}'

    fault = fault_from_validation_error(_json_invalid(document, 12, "Expecting value"))

    assert fault.kind is FaultKind.BODY_SYNTAX_ERROR
    assert fault.message == "Expecting value"
    assert fault.location == SourceLocation(line=2, column=11)


def test_missing_body_error() -> None:
    exc = RequestValidationError([{"type": "missing", "loc": ("body",), "msg": "Field required", "input": None}])

    assert fault_from_validation_error(exc).kind is FaultKind.BODY_MISSING


def test_whole_body_of_wrong_shape_is_a_type_mismatch() -> None:
    exc = RequestValidationError(
        [
            {
                "type": "model_attributes_type",
                "loc": ("body",),
                "msg": "Input should be a valid dictionary or object to extract fields from",
                "input": [1, 2],
            }
        ]
    )

    fault = fault_from_validation_error(exc)

    assert fault.kind is FaultKind.BODY_TYPE_MISMATCH
    assert fault.message.startswith("Input should be a valid dictionary")


def test_field_coercion_failure_is_semantic_with_field_path() -> None:
    exc = RequestValidationError(
        [
            {
                "type": "string_type",
                "loc": ("body", "tags", 1),
                "msg": "Input should be a valid string",
                "input": 7,
            }
        ]
    )

    fault = fault_from_validation_error(exc)

    assert fault.kind is FaultKind.BODY_SEMANTIC_VIOLATION
    assert fault.field_path == ("tags",)


def test_parameter_coercion_failure_is_a_type_mismatch() -> None:
    exc = RequestValidationError(
        [
            {
                "type": "uuid_parsing",
                "loc": ("path", "petId"),
                "msg": "Input should be a valid UUID",
                "input": "abc",
                "ctx": {"error": "invalid character"},
            }
        ]
    )

    fault = fault_from_validation_error(exc)

    assert fault.kind is FaultKind.PARAMETER_TYPE_MISMATCH
    assert fault.parameter.name == "petId"
    assert fault.parameter.site is ParameterSite.PATH
    assert fault.parameter.required_type == "UUID"
    assert fault.parameter.reason == "Invalid UUID string: abc"


def test_range_failures_become_constraint_violations() -> None:
    exc = RequestValidationError(
        [
            {
                "type": "greater_than_equal",
                "loc": ("query", "size"),
                "msg": "Input should be greater than or equal to 10",
                "input": "5",
                "ctx": {"ge": 10},
            },
            {
                "type": "less_than_equal",
                "loc": ("query", "page"),
                "msg": "Input should be less than or equal to 5",
                "input": "9",
                "ctx": {"le": 5},
            },
        ]
    )

    fault = fault_from_validation_error(exc)

    assert fault.kind is FaultKind.PARAMETER_CONSTRAINT_VIOLATION
    assert [(v.name, v.message) for v in fault.violations] == [
        ("size", "must be greater than or equal to 10"),
        ("page", "must be less than or equal to 5"),
    ]


def test_missing_parameter_is_reported_last() -> None:
    exc = RequestValidationError(
        [{"type": "missing", "loc": ("header", "x-request-id"), "msg": "Field required", "input": None}]
    )

    fault = fault_from_validation_error(exc)

    assert fault.kind is FaultKind.MISSING_PARAMETER
    assert fault.parameter.name == "x-request-id"
    assert fault.parameter.site is ParameterSite.HEADER


def test_coercion_error_detection() -> None:
    assert is_coercion_error("int_parsing")
    assert is_coercion_error("enum")
    assert not is_coercion_error("greater_than_equal")


def test_render_constraint_message_falls_back_to_pydantic_text() -> None:
    assert render_constraint_message({"type": "custom_rule", "msg": "Value error, nope"}) == "Value error, nope"
    assert render_constraint_message({"type": "string_too_long", "ctx": {"max_length": 20}}) == "size must be at most 20"


def test_method_not_allowed_reads_allow_header() -> None:
    exc = StarletteHTTPException(status_code=405, headers={"Allow": "POST, GET"})

    fault = fault_from_http_exception(exc, method="PATCH")

    assert fault.kind is FaultKind.METHOD_NOT_SUPPORTED
    assert fault.method == "PATCH"
    assert fault.supported_methods == ("GET", "POST")


def test_unmapped_http_status_is_unclassified() -> None:
    fault = fault_from_http_exception(StarletteHTTPException(status_code=418, detail="teapot"))

    assert fault.kind is FaultKind.UNCLASSIFIED


def test_integrity_error_uses_driver_message() -> None:
    exc = IntegrityError("INSERT INTO pet_images", {}, Exception("UNIQUE constraint failed: pet_images.digest"))

    fault = fault_from_integrity_error(exc)

    assert fault.kind is FaultKind.UNIQUE_CONSTRAINT_CONFLICT
    assert fault.message == "UNIQUE constraint failed: pet_images.digest"
    assert fault.cause is exc


def test_unclassified_fault_keeps_cause() -> None:
    error = KeyError("boom")

    fault = unclassified_fault(error)

    assert fault.kind is FaultKind.UNCLASSIFIED
    assert fault.cause is error


def test_undecodable_body_is_a_syntax_error() -> None:
    exc = StarletteHTTPException(status_code=400, detail="There was an error parsing the body")

    fault = fault_from_http_exception(exc, method="POST", content_type="application/json")

    assert fault.kind is FaultKind.BODY_SYNTAX_ERROR
    assert fault.message == "There was an error parsing the body"
