"""create properties table

Revision ID: 003
Revises: 002
Create Date: 2026-09-28 10:20:00.000000

"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "003"
down_revision: Union[str, None] = "002"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "properties",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("landlord_id", sa.Integer(), nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["landlord_id"], ["users.id"]),
    )
    op.create_index("ix_properties_id", "properties", ["id"], unique=False)
    op.create_index("ix_properties_landlord_id", "properties", ["landlord_id"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_properties_landlord_id", table_name="properties")
    op.drop_index("ix_properties_id", table_name="properties")
    op.drop_table("properties")
