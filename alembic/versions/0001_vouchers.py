"""Vouchers table

Revision ID: 0001_vouchers
Revises: 
Create Date: 2026-10-19 00:00:00.000000
"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op


revision = "0001_vouchers"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    discount_type = sa.Enum("percentage", "fixed", name="discount_type")

    bind = op.get_bind()
    discount_type.create(bind, checkfirst=True)

    op.create_table(
        "vouchers",
        sa.Column("id", sa.Uuid(), primary_key=True, nullable=False),
        sa.Column("code", sa.String(length=64), nullable=False),
        sa.Column("discount_amount", sa.Float(), nullable=False),
        sa.Column("discount_type", discount_type, nullable=False),
        sa.Column("expiry_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("is_active", sa.Boolean(), server_default=sa.true(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.UniqueConstraint("code", name="uq_vouchers_code"),
    )
    op.create_index("ix_vouchers_created_at", "vouchers", ["created_at"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_vouchers_created_at", table_name="vouchers")
    op.drop_table("vouchers")
    sa.Enum(name="discount_type").drop(op.get_bind(), checkfirst=True)
