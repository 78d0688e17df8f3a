"""create policy templates table and seed system templates

Revision ID: 005
Revises: 004
Create Date: 2026-09-28 10:40:00.000000

"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "005"
down_revision: Union[str, None] = "004"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

CATEGORIES = (
    "pets",
    "smoking",
    "guests",
    "cleaning",
    "cancellation",
    "rental_terms",
    "house_rules",
    "maintenance",
    "security",
    "utilities",
    "custom",
)

SYSTEM_TEMPLATES = [
    ("Pet Policy", "Rules regarding pets in the property", "pets", "No pets allowed"),
    ("Smoking Policy", "Rules regarding smoking in the property", "smoking", "No smoking inside the property"),
    ("Guest Policy", "Rules regarding guests and visitors", "guests", "Guests allowed until 10 PM with prior notice"),
    (
        "Cleaning Policy",
        "Cleaning responsibilities and requirements",
        "cleaning",
        "Tenant responsible for regular cleaning, deep cleaning upon move-out",
    ),
    ("Cancellation Policy", "Terms for reservation cancellation", "cancellation", "48-hour notice required for cancellation"),
    ("Noise Policy", "Rules regarding noise levels", "house_rules", "Quiet hours from 10 PM to 7 AM"),
    ("Utility Policy", "Utility usage and payment terms", "utilities", "Utilities included up to reasonable usage limits"),
    (
        "Security Deposit",
        "Security deposit terms and conditions",
        "rental_terms",
        "Security deposit equal to one month rent, refundable upon satisfactory inspection",
    ),
    (
        "Maintenance Policy",
        "Maintenance and repair responsibilities",
        "maintenance",
        "Landlord responsible for major repairs, tenant responsible for minor maintenance",
    ),
    ("Key Policy", "Key management and security rules", "security", "No duplicate keys without permission, lost keys incur replacement fee"),
]


def upgrade() -> None:
    category_list = ", ".join(f"'{c}'" for c in CATEGORIES)
    policy_templates = op.create_table(
        "policy_templates",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("category", sa.String(50), nullable=False),
        sa.Column("default_value", sa.Text(), nullable=False, server_default=""),
        sa.Column("is_required", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("is_system_template", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("landlord_id", sa.Integer(), nullable=True),
        sa.Column("version", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["landlord_id"], ["users.id"]),
        sa.CheckConstraint(f"category IN ({category_list})", name="ck_policy_templates_category"),
        # System templates have no owner, private ones always do
        sa.CheckConstraint(
            "(is_system_template AND landlord_id IS NULL) OR "
            "(NOT is_system_template AND landlord_id IS NOT NULL)",
            name="ck_policy_templates_owner",
        ),
    )
    op.create_index("ix_policy_templates_id", "policy_templates", ["id"], unique=False)
    op.create_index("ix_policy_templates_category", "policy_templates", ["category"], unique=False)
    op.create_index(
        "ix_policy_templates_is_system_template", "policy_templates", ["is_system_template"], unique=False
    )
    op.create_index("ix_policy_templates_landlord_id", "policy_templates", ["landlord_id"], unique=False)

    op.bulk_insert(
        policy_templates,
        [
            {
                "title": title,
                "description": description,
                "category": category,
                "default_value": default_value,
                "is_required": False,
                "is_system_template": True,
                "landlord_id": None,
                "version": 1,
            }
            for title, description, category, default_value in SYSTEM_TEMPLATES
        ],
    )


def downgrade() -> None:
    op.drop_index("ix_policy_templates_landlord_id", table_name="policy_templates")
    op.drop_index("ix_policy_templates_is_system_template", table_name="policy_templates")
    op.drop_index("ix_policy_templates_category", table_name="policy_templates")
    op.drop_index("ix_policy_templates_id", table_name="policy_templates")
    op.drop_table("policy_templates")
