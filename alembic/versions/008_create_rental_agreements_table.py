"""create rental agreements table

Revision ID: 008
Revises: 007
Create Date: 2026-09-28 11:10:00.000000

"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "008"
down_revision: Union[str, None] = "007"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "rental_agreements",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("reservation_id", sa.Integer(), nullable=False),
        sa.Column("property_id", sa.Integer(), nullable=False),
        sa.Column("tenant_id", sa.Integer(), nullable=False),
        sa.Column("landlord_id", sa.Integer(), nullable=False),
        sa.Column("policies", sa.JSON(), nullable=False),
        sa.Column("terms_accepted", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("accepted_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("accepted_by", sa.Integer(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["reservation_id"], ["reservations.id"]),
        sa.ForeignKeyConstraint(["property_id"], ["properties.id"]),
        sa.ForeignKeyConstraint(["tenant_id"], ["users.id"]),
        sa.ForeignKeyConstraint(["landlord_id"], ["users.id"]),
        sa.ForeignKeyConstraint(["accepted_by"], ["users.id"]),
        # One agreement per reservation; concurrent builds collide here
        sa.UniqueConstraint("reservation_id", name="uq_rental_agreements_reservation_id"),
    )
    op.create_index("ix_rental_agreements_id", "rental_agreements", ["id"], unique=False)
    op.create_index("ix_rental_agreements_property_id", "rental_agreements", ["property_id"], unique=False)
    op.create_index("ix_rental_agreements_tenant_id", "rental_agreements", ["tenant_id"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_rental_agreements_tenant_id", table_name="rental_agreements")
    op.drop_index("ix_rental_agreements_property_id", table_name="rental_agreements")
    op.drop_index("ix_rental_agreements_id", table_name="rental_agreements")
    op.drop_table("rental_agreements")
