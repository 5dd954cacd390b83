"""Priority-ordered selection of exactly one classifier per fault."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass

from petstore.faults.constraints import ConstraintFaultRouter
from petstore.faults.json_body import JsonBodyFaultClassifier
from petstore.faults.json_body import is_body_fault
from petstore.faults.models import Classification
from petstore.faults.models import ClassificationResult
from petstore.faults.models import Fault
from petstore.faults.models import FaultKind
from petstore.faults.models import RequestContext
from petstore.faults.problem import ProblemDetailBuilder
from petstore.faults.sanitizer import sanitize

logger = logging.getLogger(__name__)

SERVER_FAULT_TITLE = "Internal problem. Please contact the support."
NOT_FOUND_TITLE = "Not found"
CONFLICT_TITLE = "Entry already exists"
CONFLICT_DETAIL = "Unique constraint violated (already exist)"
MISSING_CONTENT_TYPE_TITLE = "Request header 'content-type' not found"

Predicate = Callable[[Fault], bool]
Classifier = Callable[[Fault], Classification]


@dataclass(frozen=True)
class Route:
    """One ``(predicate, classifier)`` entry of the dispatch chain."""

    name: str
    matches: Predicate
    classify: Classifier


def _kind_is(kind: FaultKind) -> Predicate:
    def _matches(fault: Fault) -> bool:
        return fault.kind is kind

    return _matches


def _bracketed(values: tuple[str, ...]) -> str:
    return "[" + ", ".join(values) + "]"


def server_fault() -> Classification:
    """Fixed, non-leaking classification for any fault the chain cannot name."""
    return Classification(500, SERVER_FAULT_TITLE)


def classify_method_not_supported(fault: Fault) -> Classification:
    method = fault.method or "UNKNOWN"
    return Classification(
        405,
        f"Request method '{method}' not supported",
        detail=f"Supported method(s): {_bracketed(fault.supported_methods)}",
    )


def classify_media_type_not_supported(fault: Fault) -> Classification:
    if fault.content_type:
        title = f"Content type '{fault.content_type}' not supported"
    else:
        title = MISSING_CONTENT_TYPE_TITLE
    return Classification(
        415,
        title,
        detail=f"Supported media type(s): {_bracketed(fault.supported_media_types)}",
    )


def classify_missing_parameter(fault: Fault) -> Classification:
    parameter = fault.parameter
    if parameter is None:
        return Classification(400, "Missing parameter", detail=sanitize(fault.message) or None)

    site = parameter.site.value
    return Classification(
        400,
        f"Missing {site} parameter",
        detail=f"Required {site} parameter '{parameter.name}' is not present",
    )


def classify_entity_not_found(fault: Fault) -> Classification:
    return Classification(404, NOT_FOUND_TITLE, detail=sanitize(fault.message) or None)


def classify_unique_conflict(fault: Fault) -> Classification:
    if "unique" in fault.message.lower():
        return Classification(409, CONFLICT_TITLE, detail=CONFLICT_DETAIL)
    return server_fault()


def classify_unclassified(_: Fault) -> Classification:
    return server_fault()


class FaultDispatcher:
    """Run a fault through the ordered route list; the first matching route wins.

    Order, most specific first: method, media type, body decoding, parameter
    type mismatch, constraint violations, missing parameter, entity not found,
    unique conflict. Anything left over gets the terminal server-fault result.
    """

    def __init__(
        self,
        *,
        builder: ProblemDetailBuilder | None = None,
        json_classifier: JsonBodyFaultClassifier | None = None,
        constraint_router: ConstraintFaultRouter | None = None,
    ) -> None:
        self._builder = builder or ProblemDetailBuilder()
        json_classifier = json_classifier or JsonBodyFaultClassifier()
        constraint_router = constraint_router or ConstraintFaultRouter()

        self._routes: tuple[Route, ...] = (
            Route(
                "method_not_supported",
                _kind_is(FaultKind.METHOD_NOT_SUPPORTED),
                classify_method_not_supported,
            ),
            Route(
                "media_type_not_supported",
                _kind_is(FaultKind.MEDIA_TYPE_NOT_SUPPORTED),
                classify_media_type_not_supported,
            ),
            Route("body_decoding", is_body_fault, json_classifier.classify),
            Route(
                "parameter_type_mismatch",
                _kind_is(FaultKind.PARAMETER_TYPE_MISMATCH),
                constraint_router.route_type_mismatch,
            ),
            Route(
                "constraint_violation",
                _kind_is(FaultKind.PARAMETER_CONSTRAINT_VIOLATION),
                constraint_router.route,
            ),
            Route("missing_parameter", _kind_is(FaultKind.MISSING_PARAMETER), classify_missing_parameter),
            Route("entity_not_found", _kind_is(FaultKind.ENTITY_NOT_FOUND), classify_entity_not_found),
            Route(
                "unique_constraint_conflict",
                _kind_is(FaultKind.UNIQUE_CONSTRAINT_CONFLICT),
                classify_unique_conflict,
            ),
        )

    @property
    def routes(self) -> tuple[Route, ...]:
        return self._routes

    def classify(self, fault: Fault) -> Classification:
        """Select one classifier for the fault and return its classification."""
        for route in self._routes:
            if route.matches(fault):
                return route.classify(fault)
        return classify_unclassified(fault)

    def dispatch(self, fault: Fault, context: RequestContext) -> ClassificationResult:
        """Classify the fault and build the correlated problem detail."""
        try:
            classification = self.classify(fault)
        except Exception:
            logger.exception("Fault classification failed for kind=%s", fault.kind.value)
            classification = server_fault()
        return self._builder.build(classification, context, fault)
