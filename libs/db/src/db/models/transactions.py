from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Any

from sqlalchemy import (
    JSON,
    CheckConstraint,
    DateTime,
    Numeric,
    String,
    Text,
    text,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    pass


# ---------------------------
# Core: transactions
# ---------------------------


class Transaction(Base):
    __tablename__ = "transactions"

    # Opaque client-assigned identifier (document id in the app).
    id: Mapped[str] = mapped_column(String, primary_key=True)
    amount: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False)
    type: Mapped[str] = mapped_column(String, nullable=False, server_default=text("'expense'"))
    # Soft reference; categories live with the app and may be deleted
    # independently, so there is no FK here.
    category_id: Mapped[str | None] = mapped_column(String, nullable=True)
    account_id: Mapped[str | None] = mapped_column(String, nullable=True)
    # ISO-8601 UTC string (``YYYY-MM-DDTHH:MM:SS.mmmZ``). Range and recency
    # queries compare/order on the string, so every writer must use the same
    # fixed-width format.
    date: Mapped[str] = mapped_column(String(24), nullable=False, index=True)
    note: Mapped[str | None] = mapped_column(Text, nullable=True)
    # Embedding vector as a JSON list of floats; NULL until indexed.
    embedding: Mapped[list[float] | None] = mapped_column(JSON(none_as_null=True), nullable=True)
    user_id: Mapped[str | None] = mapped_column(String, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=text("CURRENT_TIMESTAMP")
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=text("CURRENT_TIMESTAMP")
    )

    __table_args__ = (
        CheckConstraint("type in ('income','expense')", name="ck_tx_type"),
        CheckConstraint("amount >= 0", name="ck_tx_amount_non_negative"),
    )

    def as_record(self) -> dict[str, Any]:
        """Return the row as a plain mapping keyed by application field names."""

        return {
            "id": self.id,
            "amount": self.amount,
            "type": self.type,
            "category_id": self.category_id,
            "account_id": self.account_id,
            "date": self.date,
            "note": self.note,
            "embedding": self.embedding,
            "user_id": self.user_id,
        }


__all__ = [
    "Base",
    "Transaction",
]
