"""Pydantic schemas for pet API payloads."""

from __future__ import annotations

from uuid import UUID

from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic import Field
from pydantic import HttpUrl

from petstore.db.models.pet import CategoryEnum
from petstore.db.models.pet import PetStatusEnum


class PetPayload(BaseModel):
    """Pet body as bound from the request.

    Every field is optional at binding time; required-ness and sizes are
    checked afterwards by the named validators in ``petstore.validation``.
    """

    model_config = ConfigDict(populate_by_name=True)

    id: UUID | None = None
    category: CategoryEnum | None = None
    name: str | None = None
    photo_urls: list[HttpUrl] | None = Field(default=None, alias="photo-urls")
    tags: list[str] | None = None
    status: PetStatusEnum | None = None
    description: str | None = None


class Pet(BaseModel):
    """Pet response payload."""

    model_config = ConfigDict(populate_by_name=True)

    id: UUID
    category: CategoryEnum
    name: str
    photo_urls: list[str] = Field(default_factory=list, alias="photo-urls")
    tags: list[str] = Field(default_factory=list)
    status: PetStatusEnum
    description: str
