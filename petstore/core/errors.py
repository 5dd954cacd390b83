"""Domain exceptions and problem-detail exception handler registration."""

from __future__ import annotations

from collections.abc import Awaitable
from collections.abc import Callable
from collections.abc import Sequence

from fastapi import FastAPI
from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.routing import Match

from petstore.faults.adapters import fault_from_http_exception
from petstore.faults.adapters import fault_from_integrity_error
from petstore.faults.adapters import fault_from_validation_error
from petstore.faults.adapters import unclassified_fault
from petstore.faults.dispatcher import FaultDispatcher
from petstore.faults.models import ClassificationResult
from petstore.faults.models import Fault
from petstore.faults.models import FaultKind
from petstore.faults.models import RequestContext
from petstore.faults.models import Violation
from petstore.schemas.error import PROBLEM_JSON_MEDIA_TYPE


class APIError(Exception):
    """Base application exception carrying the fault it signals."""

    def __init__(self, fault: Fault) -> None:
        super().__init__(fault.message or fault.kind.value)
        self.fault = fault


class NotFoundError(APIError):
    """Convenience exception for missing resources."""

    def __init__(self, *, message: str = "Resource not found") -> None:
        super().__init__(Fault(kind=FaultKind.ENTITY_NOT_FOUND, message=message))


class ConstraintViolationError(APIError):
    """Raised when named validators reject a bound request."""

    def __init__(self, violations: Sequence[Violation]) -> None:
        self.violations = tuple(violations)
        message = "; ".join(f"{'.'.join(v.path)}: {v.message}" for v in self.violations)
        super().__init__(
            Fault(
                kind=FaultKind.PARAMETER_CONSTRAINT_VIOLATION,
                message=message,
                violations=self.violations,
            )
        )


class UnsupportedMediaTypeError(APIError):
    """Raised when the request content type is not accepted by an endpoint."""

    def __init__(self, *, content_type: str | None, supported: Sequence[str]) -> None:
        super().__init__(
            Fault(
                kind=FaultKind.MEDIA_TYPE_NOT_SUPPORTED,
                message=f"Content type '{content_type or ''}' not supported",
                content_type=content_type,
                supported_media_types=tuple(supported),
            )
        )


class ProblemJSONResponse(JSONResponse):
    media_type = PROBLEM_JSON_MEDIA_TYPE


def request_context(request: Request) -> RequestContext:
    return RequestContext(path=request.url.path, method=request.method)


def allowed_methods(request: Request) -> tuple[str, ...]:
    """Collect the methods of every route whose path matches the request."""
    methods: set[str] = set()
    for route in request.app.router.routes:
        match, _ = route.matches(request.scope)
        route_methods = getattr(route, "methods", None)
        if match is not Match.NONE and route_methods:
            methods.update(route_methods)
    return tuple(sorted(methods))


def fault_from_exception(exc: Exception, request: Request) -> Fault:
    """Turn any exception reaching the API boundary into a fault value."""
    if isinstance(exc, APIError):
        return exc.fault
    if isinstance(exc, RequestValidationError):
        return fault_from_validation_error(exc)
    if isinstance(exc, StarletteHTTPException):
        return fault_from_http_exception(
            exc,
            method=request.method,
            content_type=request.headers.get("content-type"),
            supported_methods=allowed_methods(request) if exc.status_code == 405 else (),
        )
    if isinstance(exc, IntegrityError):
        return fault_from_integrity_error(exc)
    return unclassified_fault(exc)


def problem_response(result: ClassificationResult) -> ProblemJSONResponse:
    """Serialize a classification result as ``application/problem+json``."""
    return ProblemJSONResponse(
        status_code=result.http_status,
        content=result.problem.model_dump(exclude_none=True),
    )


def build_fault_handler(
    dispatcher: FaultDispatcher,
) -> Callable[[Request, Exception], Awaitable[JSONResponse]]:
    """Create the single exception handler shared by every registered exception type."""

    async def fault_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        fault = fault_from_exception(exc, request)
        result = dispatcher.dispatch(fault, request_context(request))
        return problem_response(result)

    return fault_exception_handler


def register_error_handlers(app: FastAPI, dispatcher: FaultDispatcher | None = None) -> None:
    """Attach the problem-detail handlers to a FastAPI app instance."""

    handler = build_fault_handler(dispatcher or FaultDispatcher())
    app.add_exception_handler(RequestValidationError, handler)
    app.add_exception_handler(StarletteHTTPException, handler)
    app.add_exception_handler(APIError, handler)
    app.add_exception_handler(IntegrityError, handler)
    app.add_exception_handler(Exception, handler)
