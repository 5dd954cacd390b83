"""Model module imports for SQLAlchemy relationship registration."""

from petstore.db.models.pet import Base
from petstore.db.models.pet import Pet
from petstore.db.models.pet import PetImage
from petstore.db.models.pet import PetTag

__all__ = [
    "Base",
    "Pet",
    "PetImage",
    "PetTag",
]
