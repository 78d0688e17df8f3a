"""create policy updates table

Revision ID: 007
Revises: 006
Create Date: 2026-09-28 11:00:00.000000

"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "007"
down_revision: Union[str, None] = "006"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # policy_id deliberately has no foreign key so the log survives template deletion
    op.create_table(
        "policy_updates",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("property_id", sa.Integer(), nullable=False),
        sa.Column("policy_id", sa.Integer(), nullable=False),
        sa.Column("old_value", sa.Text(), nullable=False),
        sa.Column("new_value", sa.Text(), nullable=False),
        sa.Column("updated_by", sa.Integer(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("notification_sent", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["property_id"], ["properties.id"]),
        sa.ForeignKeyConstraint(["updated_by"], ["users.id"]),
    )
    op.create_index("ix_policy_updates_id", "policy_updates", ["id"], unique=False)
    op.create_index("ix_policy_updates_property_id", "policy_updates", ["property_id"], unique=False)
    op.create_index("ix_policy_updates_policy_id", "policy_updates", ["policy_id"], unique=False)
    op.create_index("ix_policy_updates_updated_at", "policy_updates", ["updated_at"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_policy_updates_updated_at", table_name="policy_updates")
    op.drop_index("ix_policy_updates_policy_id", table_name="policy_updates")
    op.drop_index("ix_policy_updates_property_id", table_name="policy_updates")
    op.drop_index("ix_policy_updates_id", table_name="policy_updates")
    op.drop_table("policy_updates")
