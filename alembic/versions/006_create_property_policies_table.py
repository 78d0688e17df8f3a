"""create property policies table

Revision ID: 006
Revises: 005
Create Date: 2026-09-28 10:50:00.000000

"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "006"
down_revision: Union[str, None] = "005"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "property_policies",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("property_id", sa.Integer(), nullable=False),
        sa.Column("policy_id", sa.Integer(), nullable=False),
        sa.Column("custom_value", sa.Text(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("version", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["property_id"], ["properties.id"]),
        sa.ForeignKeyConstraint(["policy_id"], ["policy_templates.id"]),
        sa.UniqueConstraint("property_id", "policy_id", name="uq_property_policies_property_policy"),
    )
    op.create_index("ix_property_policies_id", "property_policies", ["id"], unique=False)
    op.create_index("ix_property_policies_property_id", "property_policies", ["property_id"], unique=False)
    op.create_index("ix_property_policies_policy_id", "property_policies", ["policy_id"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_property_policies_policy_id", table_name="property_policies")
    op.drop_index("ix_property_policies_property_id", table_name="property_policies")
    op.drop_index("ix_property_policies_id", table_name="property_policies")
    op.drop_table("property_policies")
