"""Problem detail schemas shared across API error responses."""

from __future__ import annotations

from pydantic import BaseModel

PROBLEM_JSON_MEDIA_TYPE = "application/problem+json"


class InvalidParam(BaseModel):
    """Single field-level or parameter-level violation."""

    pointer: str
    detail: str


class ProblemDetail(BaseModel):
    """Canonical problem detail payload returned for every failed request."""

    type: str
    title: str
    instance: str
    detail: str | None = None
    errors: list[InvalidParam] | None = None
