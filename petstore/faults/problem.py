"""Problem detail assembly and correlated fault logging."""

from __future__ import annotations

import logging
import uuid
from collections.abc import Callable

from petstore.faults.models import Classification
from petstore.faults.models import ClassificationResult
from petstore.faults.models import Fault
from petstore.faults.models import RequestContext
from petstore.schemas.error import ProblemDetail

logger = logging.getLogger(__name__)

INSTANCE_PREFIX = "urn:ERROR:"


def instance_urn(error_id: uuid.UUID) -> str:
    """Render the ``instance`` URN for an error identifier."""
    return f"{INSTANCE_PREFIX}{error_id}"


class ProblemDetailBuilder:
    """Wrap a classification into the wire payload and log it under the same id."""

    def __init__(
        self,
        *,
        id_factory: Callable[[], uuid.UUID] = uuid.uuid4,
        log: logging.Logger | None = None,
    ) -> None:
        self._id_factory = id_factory
        self._logger = log or logger

    def build(
        self,
        classification: Classification,
        context: RequestContext,
        fault: Fault | None = None,
    ) -> ClassificationResult:
        """Create a fresh problem detail for one classified fault."""
        error_id = self._id_factory()
        detail = classification.detail
        errors = list(classification.errors) if classification.errors else None

        # Server faults never carry detail or field errors.
        if classification.status >= 500:
            detail = None
            errors = None

        problem = ProblemDetail(
            type=context.path,
            title=classification.title,
            instance=instance_urn(error_id),
            detail=detail,
            errors=errors,
        )
        self._log(error_id, classification, context, fault)
        return ClassificationResult(http_status=classification.status, problem=problem)

    def _log(
        self,
        error_id: uuid.UUID,
        classification: Classification,
        context: RequestContext,
        fault: Fault | None,
    ) -> None:
        extra = {"error_id": str(error_id)}
        if classification.status >= 500:
            self._logger.error(
                "Internal error. ID: %s status=%s method=%s path=%s kind=%s message=%r",
                error_id,
                classification.status,
                context.method,
                context.path,
                fault.kind.value if fault else None,
                fault.message if fault else None,
                exc_info=fault.cause if fault and fault.cause else None,
                extra=extra,
            )
            return

        self._logger.warning(
            "Problems in request. ID: %s status=%s method=%s path=%s title=%s",
            error_id,
            classification.status,
            context.method,
            context.path,
            classification.title,
            extra=extra,
        )
