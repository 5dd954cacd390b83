"""Pet API routes."""

from __future__ import annotations

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter
from fastapi import Body
from fastapi import Depends
from fastapi import Path
from fastapi import Query
from fastapi import Response
from pydantic import StringConstraints
from sqlalchemy.orm import Session

from petstore.api.dependencies import IMAGE_MEDIA_TYPES
from petstore.api.dependencies import JSON_MEDIA_TYPE
from petstore.api.dependencies import MediaTypeCheckedRoute
from petstore.api.dependencies import require_media_type
from petstore.api.dependencies import settings_dependency
from petstore.core.config import Settings
from petstore.core.config import get_settings
from petstore.db.base import get_db_session
from petstore.db.models.pet import CategoryEnum
from petstore.db.models.pet import PetStatusEnum
from petstore.schemas.pet import Pet
from petstore.schemas.pet import PetPayload
from petstore.services.pets import create_pet_service
from petstore.services.pets import delete_pet_service
from petstore.services.pets import get_pet_service
from petstore.services.pets import list_pets_service
from petstore.services.pets import store_image_service
from petstore.services.pets import update_pet_service

router = APIRouter(
    prefix=f"{get_settings().api_prefix}/pets",
    tags=["pets"],
    route_class=MediaTypeCheckedRoute,
)

PetId = Annotated[UUID, Path(alias="petId")]
Tag = Annotated[str, StringConstraints(min_length=3, max_length=20)]


@router.post("", status_code=201, dependencies=[Depends(require_media_type(JSON_MEDIA_TYPE))])
def create_pet_endpoint(
    payload: PetPayload,
    session: Session = Depends(get_db_session),
) -> Response:
    """Create a pet and point to it via ``Location``."""
    pet_id = create_pet_service(session, payload)
    return Response(status_code=201, headers={"Location": f"{router.prefix}/{pet_id}"})


@router.get("", response_model=list[Pet], response_model_by_alias=True)
def list_pets_endpoint(
    page: Annotated[int, Query(ge=0)] = 0,
    size: Annotated[int, Query(ge=10, le=1_000)] = 20,
    tags: Annotated[list[Tag] | None, Query()] = None,
    status: PetStatusEnum | None = None,
    category: CategoryEnum | None = None,
    session: Session = Depends(get_db_session),
) -> list[Pet]:
    """List pets page by page, newest first."""
    return list_pets_service(
        session,
        page=page,
        size=size,
        tags=tags,
        status=status,
        category=category,
    )


@router.get("/{petId}", response_model=Pet, response_model_by_alias=True)
def get_pet_endpoint(
    pet_id: PetId,
    session: Session = Depends(get_db_session),
) -> Pet:
    """Get a pet by id."""
    return get_pet_service(session, pet_id)


@router.put("/{petId}", status_code=204, dependencies=[Depends(require_media_type(JSON_MEDIA_TYPE))])
def update_pet_endpoint(
    pet_id: PetId,
    payload: PetPayload,
    session: Session = Depends(get_db_session),
) -> Response:
    """Overwrite a pet."""
    update_pet_service(session, pet_id, payload)
    return Response(status_code=204)


@router.delete("/{petId}", status_code=204)
def delete_pet_endpoint(
    pet_id: PetId,
    session: Session = Depends(get_db_session),
) -> Response:
    """Delete a pet by id."""
    delete_pet_service(session, pet_id)
    return Response(status_code=204)


@router.put("/{petId}/image", status_code=204)
def store_image_endpoint(
    pet_id: PetId,
    content: Annotated[bytes, Body(media_type=IMAGE_MEDIA_TYPES[-1])],
    media_type: str = Depends(require_media_type(*IMAGE_MEDIA_TYPES)),
    settings: Settings = Depends(settings_dependency),
    session: Session = Depends(get_db_session),
) -> Response:
    """Attach an image to a pet; its URL then shows up in ``photo-urls``."""
    url = store_image_service(
        session,
        pet_id,
        content=content,
        content_type=media_type,
        settings=settings,
    )
    return Response(status_code=204, headers={"Location": url})
