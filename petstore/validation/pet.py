"""Validation rules for pet bodies and pet images."""

from __future__ import annotations

from petstore.core.errors import ConstraintViolationError
from petstore.faults.models import Violation
from petstore.schemas.pet import PetPayload
from petstore.validation.rules import collect
from petstore.validation.rules import content_matches_media_type
from petstore.validation.rules import each_size_between
from petstore.validation.rules import must_be_null
from petstore.validation.rules import not_null
from petstore.validation.rules import size_between

BODY = "body"

PET_ID_MUST_BE_NULL = "POST request: The field pet.id must be null"
PHOTO_URLS_MUST_BE_NULL = "POST request: The field pet.photo-urls must be null"


def pet_id_null(pet: PetPayload) -> Violation | None:
    """New pets get their id from the service."""
    return must_be_null((BODY, "id"), pet.id, PET_ID_MUST_BE_NULL)


def photo_urls_null(pet: PetPayload) -> Violation | None:
    """Photo URLs only ever come from image uploads."""
    return must_be_null((BODY, "photo-urls"), pet.photo_urls, PHOTO_URLS_MUST_BE_NULL)


def validate_pet(pet: PetPayload) -> list[Violation]:
    """Field rules shared by create and overwrite."""
    return collect(
        not_null((BODY, "category"), pet.category),
        not_null((BODY, "name"), pet.name),
        size_between((BODY, "name"), pet.name, 3, 30),
        each_size_between((BODY, "tags"), pet.tags, 3, 20),
        not_null((BODY, "status"), pet.status),
        not_null((BODY, "description"), pet.description),
        size_between((BODY, "description"), pet.description, 30, 1_000),
    )


def validate_new_pet(pet: PetPayload) -> list[Violation]:
    return collect(pet_id_null(pet), photo_urls_null(pet), validate_pet(pet))


def validate_image(content: bytes, content_type: str | None, *, max_bytes: int) -> list[Violation]:
    return collect(
        size_between((BODY,), content, 1, max_bytes),
        content_matches_media_type((BODY,), content, content_type),
    )


def ensure_valid(violations: list[Violation]) -> None:
    """Raise a constraint violation error when any rule failed."""
    if violations:
        raise ConstraintViolationError(violations)
