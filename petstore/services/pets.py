"""Service helpers for pet API operations."""

from __future__ import annotations

import hashlib
import logging
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from petstore.core.config import Settings
from petstore.core.errors import NotFoundError
from petstore.db.models.pet import CategoryEnum
from petstore.db.models.pet import Pet as PetRecord
from petstore.db.models.pet import PetStatusEnum
from petstore.db.repository.pets import add_image
from petstore.db.repository.pets import create_pet
from petstore.db.repository.pets import delete_pet
from petstore.db.repository.pets import get_pet
from petstore.db.repository.pets import list_pets
from petstore.db.repository.pets import replace_pet
from petstore.schemas.pet import Pet
from petstore.schemas.pet import PetPayload
from petstore.validation.pet import ensure_valid
from petstore.validation.pet import validate_image
from petstore.validation.pet import validate_new_pet
from petstore.validation.pet import validate_pet

logger = logging.getLogger(__name__)

NOT_FOUND_MESSAGE = "Resource with ID {pet_id} not found in the persistence"


def to_pet(record: PetRecord) -> Pet:
    """Map a pet row onto the response schema."""
    return Pet(
        id=record.id,
        category=record.category,
        name=record.name,
        photo_urls=[image.url for image in record.images],
        tags=[tag.tag for tag in record.tags],
        status=record.status,
        description=record.description,
    )


def _get_pet_or_raise(session: Session, pet_id: UUID) -> PetRecord:
    pet = get_pet(session, pet_id)
    if pet is None:
        raise NotFoundError(message=NOT_FOUND_MESSAGE.format(pet_id=pet_id))
    return pet


def create_pet_service(session: Session, payload: PetPayload) -> UUID:
    """Validate and persist a new pet, returning its id."""
    ensure_valid(validate_new_pet(payload))
    pet = create_pet(
        session,
        category=payload.category,
        name=payload.name,
        status=payload.status,
        description=payload.description,
        tags=payload.tags,
    )
    session.commit()
    logger.info("Stored pet id=%s", pet.id)
    return pet.id


def get_pet_service(session: Session, pet_id: UUID) -> Pet:
    """Fetch a pet or raise not found."""
    return to_pet(_get_pet_or_raise(session, pet_id))


def list_pets_service(
    session: Session,
    *,
    page: int,
    size: int,
    tags: list[str] | None = None,
    status: PetStatusEnum | None = None,
    category: CategoryEnum | None = None,
) -> list[Pet]:
    """List one page of pets matching the optional filters."""
    records = list_pets(
        session,
        tags=tags,
        status=status,
        category=category,
        limit=size,
        offset=page * size,
    )
    return [to_pet(record) for record in records]


def update_pet_service(session: Session, pet_id: UUID, payload: PetPayload) -> None:
    """Overwrite an existing pet with a validated body."""
    pet = _get_pet_or_raise(session, pet_id)
    ensure_valid(validate_pet(payload))
    replace_pet(
        session,
        pet,
        category=payload.category,
        name=payload.name,
        status=payload.status,
        description=payload.description,
        tags=payload.tags,
    )
    session.commit()


def delete_pet_service(session: Session, pet_id: UUID) -> None:
    """Delete an existing pet."""
    pet = _get_pet_or_raise(session, pet_id)
    delete_pet(session, pet)
    session.commit()
    logger.info("Deleted pet id=%s", pet_id)


def store_image_service(
    session: Session,
    pet_id: UUID,
    *,
    content: bytes,
    content_type: str | None,
    settings: Settings,
) -> str:
    """Validate and attach an image to a pet, returning the image URL."""
    pet = _get_pet_or_raise(session, pet_id)
    ensure_valid(validate_image(content, content_type, max_bytes=settings.max_image_bytes))

    digest = hashlib.sha256(content).hexdigest()
    url = f"{settings.image_base_url}/{digest}"
    try:
        add_image(session, pet, digest=digest, content_type=content_type or "", data=content, url=url)
        session.commit()
    except IntegrityError:
        session.rollback()
        raise

    logger.info("Stored image digest=%s for pet id=%s", digest, pet_id)
    return url
