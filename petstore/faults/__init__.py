"""Fault classification and error-normalization engine."""

from petstore.faults.constraints import ConstraintFaultRouter
from petstore.faults.dispatcher import FaultDispatcher
from petstore.faults.json_body import JsonBodyFaultClassifier
from petstore.faults.models import Classification
from petstore.faults.models import ClassificationResult
from petstore.faults.models import Fault
from petstore.faults.models import FaultKind
from petstore.faults.models import ParameterInfo
from petstore.faults.models import ParameterSite
from petstore.faults.models import RequestContext
from petstore.faults.models import SourceLocation
from petstore.faults.models import Violation
from petstore.faults.problem import ProblemDetailBuilder
from petstore.faults.sanitizer import sanitize

__all__ = [
    "Classification",
    "ClassificationResult",
    "ConstraintFaultRouter",
    "Fault",
    "FaultDispatcher",
    "FaultKind",
    "JsonBodyFaultClassifier",
    "ParameterInfo",
    "ParameterSite",
    "ProblemDetailBuilder",
    "RequestContext",
    "SourceLocation",
    "Violation",
    "sanitize",
]
