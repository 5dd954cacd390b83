"""Create pet, pet tag and pet image tables."""

from typing import Sequence
from typing import Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "001_create_pets"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

pet_category_enum = postgresql.ENUM(
    "DOG",
    "CAT",
    "BIRD",
    "MOUSE",
    "SPIDER",
    name="pet_category",
)

pet_status_enum = postgresql.ENUM(
    "AVAILABLE",
    "PENDING",
    "SOLD",
    name="pet_status",
)


def upgrade() -> None:
    """Create pet tables, their enum types and lookup indexes."""
    bind = op.get_bind()
    pet_category_enum.create(bind, checkfirst=True)
    pet_status_enum.create(bind, checkfirst=True)

    op.create_table(
        "pets",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("category", postgresql.ENUM(name="pet_category", create_type=False), nullable=False),
        sa.Column("name", sa.String(length=30), nullable=False),
        sa.Column("status", postgresql.ENUM(name="pet_status", create_type=False), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            nullable=False,
            server_default=sa.text("now()"),
        ),
        sa.Column(
            "updated_at",
            sa.TIMESTAMP(timezone=True),
            nullable=False,
            server_default=sa.text("now()"),
        ),
        sa.PrimaryKeyConstraint("id", name="pk_pets"),
    )
    op.create_index("ix_pets_created_at", "pets", ["created_at"])

    op.create_table(
        "pet_tags",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("pet_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("tag", sa.String(length=20), nullable=False),
        sa.Column("position", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.ForeignKeyConstraint(
            ["pet_id"],
            ["pets.id"],
            name="fk_pet_tags_pet_id_pets",
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_pet_tags"),
    )
    op.create_index("ix_pet_tags_tag", "pet_tags", ["tag"])

    op.create_table(
        "pet_images",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("pet_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("digest", sa.String(length=64), nullable=False),
        sa.Column("content_type", sa.String(length=64), nullable=False),
        sa.Column("size_bytes", sa.Integer(), nullable=False),
        sa.Column("url", sa.String(length=512), nullable=False),
        sa.Column("data", sa.LargeBinary(), nullable=False),
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            nullable=False,
            server_default=sa.text("now()"),
        ),
        sa.ForeignKeyConstraint(
            ["pet_id"],
            ["pets.id"],
            name="fk_pet_images_pet_id_pets",
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_pet_images"),
        sa.UniqueConstraint("pet_id", "digest", name="uq_pet_images_pet_id_digest"),
    )


def downgrade() -> None:
    """Drop pet tables and enum types."""
    op.drop_table("pet_images")
    op.drop_index("ix_pet_tags_tag", table_name="pet_tags")
    op.drop_table("pet_tags")
    op.drop_index("ix_pets_created_at", table_name="pets")
    op.drop_table("pets")

    bind = op.get_bind()
    pet_status_enum.drop(bind, checkfirst=True)
    pet_category_enum.drop(bind, checkfirst=True)
