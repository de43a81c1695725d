"""create users and token_data

Revision ID: 0001
Revises:
Create Date: 2025-01-01 00:00:01.000000

"""
from __future__ import annotations

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "0001"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create account and per-slot record tables."""
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("email"),
    )
    op.create_table(
        "token_data",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("time_slot_id", sa.String(length=50), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("time_slot", sa.String(length=5), nullable=False),
        sa.Column("entries", sa.JSON(), nullable=False),
        sa.Column("counts", sa.JSON(), nullable=False),
        sa.Column("saved_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("user_id", "time_slot_id", name="uq_token_data_user_slot"),
    )
    op.create_index("ix_token_data_user_id", "token_data", ["user_id"])
    op.create_index("ix_token_data_date", "token_data", ["date"])
    op.create_index("ix_token_data_time_slot", "token_data", ["time_slot"])
    op.create_index("ix_token_data_date_time_slot", "token_data", ["date", "time_slot"])


def downgrade() -> None:
    """Drop the record tables."""
    op.drop_index("ix_token_data_date_time_slot", table_name="token_data")
    op.drop_index("ix_token_data_time_slot", table_name="token_data")
    op.drop_index("ix_token_data_date", table_name="token_data")
    op.drop_index("ix_token_data_user_id", table_name="token_data")
    op.drop_table("token_data")
    op.drop_table("users")
