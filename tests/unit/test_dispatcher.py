"""Unit tests for priority-ordered fault dispatch."""

from __future__ import annotations

import uuid

import pytest

from petstore.faults.dispatcher import CONFLICT_DETAIL
from petstore.faults.dispatcher import SERVER_FAULT_TITLE
from petstore.faults.dispatcher import FaultDispatcher
from petstore.faults.json_body import JsonBodyFaultClassifier
from petstore.faults.models import Classification
from petstore.faults.models import Fault
from petstore.faults.models import FaultKind
from petstore.faults.models import ParameterInfo
from petstore.faults.models import ParameterSite
from petstore.faults.models import RequestContext
from petstore.faults.models import Violation
from petstore.faults.problem import ProblemDetailBuilder

CONTEXT = RequestContext(path="/petstore/petservice/v1/pets", method="POST")


@pytest.fixture
def dispatcher() -> FaultDispatcher:
    return FaultDispatcher()


def test_routes_are_ordered_most_specific_first(dispatcher: FaultDispatcher) -> None:
    assert [route.name for route in dispatcher.routes] == [
        "method_not_supported",
        "media_type_not_supported",
        "body_decoding",
        "parameter_type_mismatch",
        "constraint_violation",
        "missing_parameter",
        "entity_not_found",
        "unique_constraint_conflict",
    ]


@pytest.mark.parametrize("kind", list(FaultKind))
def test_every_fault_kind_gets_exactly_one_classification(dispatcher: FaultDispatcher, kind: FaultKind) -> None:
    matching = [route.name for route in dispatcher.routes if route.matches(Fault(kind=kind))]

    assert len(matching) <= 1
    result = dispatcher.dispatch(Fault(kind=kind), CONTEXT)
    assert 400 <= result.http_status <= 599


def test_method_not_supported_lists_supported_methods(dispatcher: FaultDispatcher) -> None:
    fault = Fault(kind=FaultKind.METHOD_NOT_SUPPORTED, method="PATCH", supported_methods=("GET", "POST"))

    result = dispatcher.dispatch(fault, CONTEXT)

    assert result.http_status == 405
    assert result.problem.title == "Request method 'PATCH' not supported"
    assert result.problem.detail == "Supported method(s): [GET, POST]"


def test_media_type_not_supported_names_content_type(dispatcher: FaultDispatcher) -> None:
    fault = Fault(
        kind=FaultKind.MEDIA_TYPE_NOT_SUPPORTED,
        content_type="text/plain",
        supported_media_types=("application/json",),
    )

    result = dispatcher.dispatch(fault, CONTEXT)

    assert result.http_status == 415
    assert result.problem.title == "Content type 'text/plain' not supported"
    assert result.problem.detail == "Supported media type(s): [application/json]"


def test_media_type_without_header_reports_missing_header(dispatcher: FaultDispatcher) -> None:
    fault = Fault(kind=FaultKind.MEDIA_TYPE_NOT_SUPPORTED, supported_media_types=("application/json",))

    result = dispatcher.dispatch(fault, CONTEXT)

    assert result.problem.title == "Request header 'content-type' not found"


def test_missing_parameter_names_site_and_parameter(dispatcher: FaultDispatcher) -> None:
    fault = Fault(
        kind=FaultKind.MISSING_PARAMETER,
        parameter=ParameterInfo(name="size", site=ParameterSite.QUERY),
    )

    result = dispatcher.dispatch(fault, CONTEXT)

    assert result.http_status == 400
    assert result.problem.title == "Missing query parameter"
    assert result.problem.detail == "Required query parameter 'size' is not present"


def test_entity_not_found_keeps_message(dispatcher: FaultDispatcher) -> None:
    pet_id = uuid.uuid4()
    fault = Fault(kind=FaultKind.ENTITY_NOT_FOUND, message=f"Resource with ID {pet_id} not found in the persistence")

    result = dispatcher.dispatch(fault, CONTEXT)

    assert result.http_status == 404
    assert result.problem.title == "Not found"
    assert result.problem.detail == f"Resource with ID {pet_id} not found in the persistence"


def test_unique_conflict_is_409(dispatcher: FaultDispatcher) -> None:
    fault = Fault(
        kind=FaultKind.UNIQUE_CONSTRAINT_CONFLICT,
        message='duplicate key value violates unique constraint "uq_pet_images_pet_id_digest"',
    )

    result = dispatcher.dispatch(fault, CONTEXT)

    assert result.http_status == 409
    assert result.problem.title == "Entry already exists"
    assert result.problem.detail == CONFLICT_DETAIL


def test_other_integrity_errors_are_server_faults(dispatcher: FaultDispatcher) -> None:
    fault = Fault(
        kind=FaultKind.UNIQUE_CONSTRAINT_CONFLICT,
        message='insert or update on table "pet_tags" violates foreign key constraint',
    )

    result = dispatcher.dispatch(fault, CONTEXT)

    assert result.http_status == 500
    assert result.problem.title == SERVER_FAULT_TITLE


def test_unclassified_fault_never_leaks_its_message(dispatcher: FaultDispatcher) -> None:
    fault = Fault(kind=FaultKind.UNCLASSIFIED, message="psycopg.OperationalError: password authentication failed")

    result = dispatcher.dispatch(fault, CONTEXT)

    assert result.http_status == 500
    assert result.problem.title == SERVER_FAULT_TITLE
    assert result.problem.detail is None
    assert "password" not in result.problem.model_dump_json()


class _ExplodingClassifier(JsonBodyFaultClassifier):
    def classify(self, fault: Fault) -> Classification:
        raise RuntimeError("classifier bug")


def test_dispatch_never_rethrows_classifier_errors() -> None:
    dispatcher = FaultDispatcher(json_classifier=_ExplodingClassifier(), builder=ProblemDetailBuilder())

    result = dispatcher.dispatch(Fault(kind=FaultKind.BODY_SYNTAX_ERROR, message="x"), CONTEXT)

    assert result.http_status == 500
    assert result.problem.title == SERVER_FAULT_TITLE


def test_body_decoding_fault_with_mismatch_marker_points_at_field(dispatcher: FaultDispatcher) -> None:
    fault = Fault(
        kind=FaultKind.BODY_TYPE_MISMATCH,
        message=(
            'Cannot deserialize value of type `de.example.petstore.Category` from String "cats": '
            'not one of [DOG, CAT] (through reference chain: de.example.petstore.Pet["category"])'
        ),
    )

    result = dispatcher.dispatch(fault, CONTEXT)

    assert result.http_status == 422
    assert result.problem.title == "Request body validation failed"
    assert len(result.problem.errors) == 1
    error = result.problem.errors[0]
    assert error.pointer == "#/category"
    assert "de.example" not in error.detail
    assert "reference chain" not in error.detail
    assert error.detail.startswith("Cannot deserialize value of type `Category`")


def test_path_uuid_conversion_failure(dispatcher: FaultDispatcher) -> None:
    fault = Fault(
        kind=FaultKind.PARAMETER_TYPE_MISMATCH,
        parameter=ParameterInfo(
            name="petId",
            site=ParameterSite.PATH,
            value="1",
            required_type="UUID",
            reason="Invalid UUID string: 1",
        ),
    )

    result = dispatcher.dispatch(fault, CONTEXT)

    assert result.http_status == 400
    assert "Failed to convert value of type 'String' to required type 'UUID'" in result.problem.title
    assert result.problem.errors[0].pointer == "#/petId"
    assert result.problem.errors[0].detail == "Invalid UUID string: 1"


def test_query_range_violation_names_parameter(dispatcher: FaultDispatcher) -> None:
    fault = Fault(
        kind=FaultKind.PARAMETER_CONSTRAINT_VIOLATION,
        violations=(Violation(path=("query", "size"), message="must be greater than or equal to 10"),),
    )

    result = dispatcher.dispatch(fault, CONTEXT)

    assert result.http_status == 400
    assert "size" in result.problem.detail
    assert "greater than or equal to 10" in result.problem.detail
