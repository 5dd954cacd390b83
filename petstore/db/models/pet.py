"""SQLAlchemy models for pets, their tags and their images."""

from __future__ import annotations

import uuid
from datetime import datetime
from datetime import timezone
from enum import Enum

from sqlalchemy import DateTime
from sqlalchemy import Enum as SAEnum
from sqlalchemy import ForeignKey
from sqlalchemy import Index
from sqlalchemy import Integer
from sqlalchemy import LargeBinary
from sqlalchemy import PrimaryKeyConstraint
from sqlalchemy import String
from sqlalchemy import Text
from sqlalchemy import UniqueConstraint
from sqlalchemy import Uuid
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.orm import Mapped
from sqlalchemy.orm import mapped_column
from sqlalchemy.orm import relationship


class Base(DeclarativeBase):
    """Declarative base for pet service ORM models."""


class _CaseInsensitiveEnum(str, Enum):
    @classmethod
    def _missing_(cls, value: object) -> _CaseInsensitiveEnum | None:
        if isinstance(value, str):
            return cls.__members__.get(value.upper())
        return None


class CategoryEnum(_CaseInsensitiveEnum):
    DOG = "DOG"
    CAT = "CAT"
    BIRD = "BIRD"
    MOUSE = "MOUSE"
    SPIDER = "SPIDER"


class PetStatusEnum(_CaseInsensitiveEnum):
    AVAILABLE = "AVAILABLE"
    PENDING = "PENDING"
    SOLD = "SOLD"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Pet(Base):
    """Pet record."""

    __tablename__ = "pets"
    __table_args__ = (
        PrimaryKeyConstraint("id", name="pk_pets"),
        Index("ix_pets_created_at", "created_at"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    category: Mapped[CategoryEnum] = mapped_column(
        SAEnum(CategoryEnum, name="pet_category"),
        nullable=False,
    )
    name: Mapped[str] = mapped_column(String(30), nullable=False)
    status: Mapped[PetStatusEnum] = mapped_column(
        SAEnum(PetStatusEnum, name="pet_status"),
        nullable=False,
    )
    description: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        onupdate=_utcnow,
    )

    tags: Mapped[list["PetTag"]] = relationship(
        "PetTag",
        back_populates="pet",
        cascade="all, delete-orphan",
        order_by="PetTag.position",
    )
    images: Mapped[list["PetImage"]] = relationship(
        "PetImage",
        back_populates="pet",
        cascade="all, delete-orphan",
        order_by="PetImage.created_at",
    )


class PetTag(Base):
    """Free-text tag attached to a pet."""

    __tablename__ = "pet_tags"
    __table_args__ = (
        PrimaryKeyConstraint("id", name="pk_pet_tags"),
        Index("ix_pet_tags_tag", "tag"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    pet_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("pets.id", name="fk_pet_tags_pet_id_pets", ondelete="CASCADE"),
        nullable=False,
    )
    tag: Mapped[str] = mapped_column(String(20), nullable=False)
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    pet: Mapped[Pet] = relationship("Pet", back_populates="tags")


class PetImage(Base):
    """Image uploaded for a pet; one row per distinct image content."""

    __tablename__ = "pet_images"
    __table_args__ = (
        PrimaryKeyConstraint("id", name="pk_pet_images"),
        UniqueConstraint("pet_id", "digest", name="uq_pet_images_pet_id_digest"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    pet_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("pets.id", name="fk_pet_images_pet_id_pets", ondelete="CASCADE"),
        nullable=False,
    )
    digest: Mapped[str] = mapped_column(String(64), nullable=False)
    content_type: Mapped[str] = mapped_column(String(64), nullable=False)
    size_bytes: Mapped[int] = mapped_column(Integer, nullable=False)
    url: Mapped[str] = mapped_column(String(512), nullable=False)
    data: Mapped[bytes] = mapped_column(LargeBinary, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=_utcnow)

    pet: Mapped[Pet] = relationship("Pet", back_populates="images")
