# ruff: noqa: I001
"""Household ledger transactions table.

Revision ID: 0001_transactions
Revises: None
Create Date: 2025-11-02
"""

from __future__ import annotations

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op


# revision identifiers, used by Alembic.
revision: str = "0001_transactions"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "transactions",
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column("amount", sa.Numeric(18, 2), nullable=False),
        sa.Column("type", sa.String(), nullable=False, server_default=sa.text("'expense'")),
        sa.Column("category_id", sa.String(), nullable=True),
        sa.Column("account_id", sa.String(), nullable=True),
        # Fixed-width ISO-8601 UTC string; ordering relies on the format.
        sa.Column("date", sa.String(24), nullable=False),
        sa.Column("note", sa.Text(), nullable=True),
        sa.Column("embedding", sa.JSON(), nullable=True),
        sa.Column("user_id", sa.String(), nullable=True),
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
        sa.CheckConstraint("type in ('income','expense')", name="ck_tx_type"),
        sa.CheckConstraint("amount >= 0", name="ck_tx_amount_non_negative"),
    )

    # Date-range and recency queries both filter/order on ``date``.
    op.create_index("ix_transactions_date", "transactions", ["date"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_transactions_date", table_name="transactions")
    op.drop_table("transactions")
