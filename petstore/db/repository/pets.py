"""Repository primitives for pet entities."""

from __future__ import annotations

from collections.abc import Sequence
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session
from sqlalchemy.orm import selectinload

from petstore.db.models.pet import CategoryEnum
from petstore.db.models.pet import Pet
from petstore.db.models.pet import PetImage
from petstore.db.models.pet import PetStatusEnum
from petstore.db.models.pet import PetTag


def _tag_rows(tags: Sequence[str] | None) -> list[PetTag]:
    return [PetTag(tag=tag, position=position) for position, tag in enumerate(tags or ())]


def create_pet(
    session: Session,
    *,
    category: CategoryEnum,
    name: str,
    status: PetStatusEnum,
    description: str,
    tags: Sequence[str] | None = None,
) -> Pet:
    """Create and return a pet row with its tags."""
    pet = Pet(
        category=category,
        name=name,
        status=status,
        description=description,
        tags=_tag_rows(tags),
    )
    session.add(pet)
    session.flush()
    return pet


def get_pet(session: Session, pet_id: UUID) -> Pet | None:
    """Fetch a pet by id."""
    return session.get(Pet, pet_id)


def list_pets(
    session: Session,
    *,
    tags: Sequence[str] | None = None,
    status: PetStatusEnum | None = None,
    category: CategoryEnum | None = None,
    limit: int = 20,
    offset: int = 0,
) -> list[Pet]:
    """List pets with optional tag, status and category filters, newest first."""
    stmt = select(Pet).options(selectinload(Pet.tags), selectinload(Pet.images))
    if status is not None:
        stmt = stmt.where(Pet.status == status)
    if category is not None:
        stmt = stmt.where(Pet.category == category)
    if tags:
        stmt = stmt.where(Pet.tags.any(PetTag.tag.in_(list(tags))))
    stmt = stmt.order_by(Pet.created_at.desc(), Pet.id).limit(limit).offset(offset)
    return list(session.scalars(stmt))


def replace_pet(
    session: Session,
    pet: Pet,
    *,
    category: CategoryEnum,
    name: str,
    status: PetStatusEnum,
    description: str,
    tags: Sequence[str] | None = None,
) -> Pet:
    """Overwrite every mutable pet field, replacing its tags."""
    pet.category = category
    pet.name = name
    pet.status = status
    pet.description = description
    pet.tags = _tag_rows(tags)
    session.flush()
    return pet


def delete_pet(session: Session, pet: Pet) -> None:
    """Delete a pet together with its tags and images."""
    session.delete(pet)
    session.flush()


def add_image(
    session: Session,
    pet: Pet,
    *,
    digest: str,
    content_type: str,
    data: bytes,
    url: str,
) -> PetImage:
    """Attach an image row; raises IntegrityError for an already stored image."""
    image = PetImage(
        pet_id=pet.id,
        digest=digest,
        content_type=content_type,
        size_bytes=len(data),
        url=url,
        data=data,
    )
    session.add(image)
    session.flush()
    return image
