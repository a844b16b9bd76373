"""create subscriptions table

Revision ID: 20251110_0001
Revises:
Create Date: 2025-11-10 12:10:28
"""

import sqlalchemy as sa

from alembic import op

revision = "20251110_0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "subscriptions",
        sa.Column("id", sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column("service_name", sa.String(), nullable=False),
        sa.Column("price", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Uuid(as_uuid=True), nullable=False),
        sa.Column("start_month", sa.Date(), nullable=False),
        sa.Column("end_month", sa.Date(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint(
            "length(trim(service_name)) > 0",
            name="ck_subscriptions_service_name_not_blank",
        ),
        sa.CheckConstraint(
            "price >= 0",
            name="ck_subscriptions_price_non_negative",
        ),
        sa.CheckConstraint(
            "end_month IS NULL OR end_month >= start_month",
            name="ck_subscriptions_end_after_start",
        ),
    )
    op.create_index(
        "ix_subscriptions_user_id",
        "subscriptions",
        ["user_id"],
    )


def downgrade() -> None:
    op.drop_index("ix_subscriptions_user_id", table_name="subscriptions")
    op.drop_table("subscriptions")
