"""Shared request dependencies and route classes for API routes."""

from __future__ import annotations

from collections.abc import Callable
from collections.abc import Coroutine
from collections.abc import Iterator
from typing import Any

from fastapi import Request
from fastapi import Response
from fastapi.dependencies.models import Dependant
from fastapi.routing import APIRoute

from petstore.core.config import Settings
from petstore.core.config import get_settings
from petstore.core.errors import UnsupportedMediaTypeError

JSON_MEDIA_TYPE = "application/json"
IMAGE_MEDIA_TYPES = ("image/gif", "image/jpeg", "image/png")


def media_type_of(content_type: str | None) -> str | None:
    """Return the bare, lower-cased media type of a content-type header."""
    if not content_type:
        return None
    return content_type.split(";", 1)[0].strip().lower() or None


class MediaTypeRequirement:
    """Set of media types an endpoint accepts for its request body."""

    def __init__(self, *supported: str) -> None:
        self.supported = supported

    def check(self, request: Request) -> str:
        content_type = request.headers.get("content-type")
        media_type = media_type_of(content_type)
        if media_type not in self.supported:
            raise UnsupportedMediaTypeError(content_type=content_type, supported=self.supported)
        return media_type


def require_media_type(*supported: str) -> Callable[[Request], str]:
    """Build a dependency that rejects requests outside ``supported`` media types."""
    requirement = MediaTypeRequirement(*supported)

    def dependency(request: Request) -> str:
        return requirement.check(request)

    dependency.requirement = requirement  # type: ignore[attr-defined]
    return dependency


def _walk(dependant: Dependant) -> Iterator[Dependant]:
    for sub_dependant in dependant.dependencies:
        yield sub_dependant
        yield from _walk(sub_dependant)


class MediaTypeCheckedRoute(APIRoute):
    """Route that enforces its media-type requirements before the body is read.

    FastAPI decodes the body before it solves dependencies; the media-type
    check here runs ahead of both.
    """

    def get_route_handler(self) -> Callable[[Request], Coroutine[Any, Any, Response]]:
        handler = super().get_route_handler()
        requirements = [
            requirement
            for requirement in (getattr(sub.call, "requirement", None) for sub in _walk(self.dependant))
            if isinstance(requirement, MediaTypeRequirement)
        ]
        if not requirements:
            return handler

        async def media_type_checked_handler(request: Request) -> Response:
            for requirement in requirements:
                requirement.check(request)
            return await handler(request)

        return media_type_checked_handler


def settings_dependency() -> Settings:
    return get_settings()
