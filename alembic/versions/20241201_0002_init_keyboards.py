"""init keyboards

Revision ID: 20241201_0002
Revises: 20241201_0001
Create Date: 2024-12-01
"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op

revision = "20241201_0002"
down_revision = "20241201_0001"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "keyboards",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("price", sa.Float(), nullable=False),
        sa.Column("brand", sa.String(length=255), nullable=False),
        sa.Column("layout", sa.String(length=64), nullable=False),
        sa.Column("switches", sa.String(length=255), nullable=True),
        sa.Column("keycaps", sa.String(length=255), nullable=True),
        sa.Column("wireless", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("rgb", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("image_url", sa.String(length=2048), nullable=True),
        sa.Column("in_stock", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("stock_count", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("CURRENT_TIMESTAMP"),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("CURRENT_TIMESTAMP"),
        ),
    )


def downgrade() -> None:
    op.drop_table("keyboards")
