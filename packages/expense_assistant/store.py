"""Transaction store interface and its SQLAlchemy implementation.

The question-answering pipeline only reads from the store; the single write
is :meth:`TransactionStore.set_embedding`, used by indexing and backfill.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime
from typing import Protocol

from sqlalchemy import func, select, update
from sqlalchemy.orm import Session

from db.client import session_scope
from db.models.transactions import Transaction as TransactionRow

from .embeddings import cosine_distance
from .logging_setup import get_logger
from .models import Transaction
from .time_ranges import to_store_timestamp

_logger = get_logger("expense_assistant.store")


class TransactionStore(Protocol):
    def list_all(self) -> list[Transaction]: ...

    def list_between(self, start: datetime, end: datetime) -> list[Transaction]:
        """Transactions with ``start <= date <= end``, newest first."""
        ...

    def list_recent(self, limit: int) -> list[Transaction]: ...

    def find_nearest(self, vector: Sequence[float], limit: int) -> list[Transaction]:
        """Up to ``limit`` embedded transactions by ascending cosine distance."""
        ...

    def set_embedding(self, transaction_id: str, vector: Sequence[float]) -> None: ...


def rank_by_cosine(
    candidates: Sequence[Transaction], vector: Sequence[float], limit: int
) -> list[Transaction]:
    """Rank ``candidates`` by cosine distance to ``vector`` (stable on ties).

    Candidates whose embedding is missing or has a different length are not
    comparable and are left out; a count is logged so stale vectors show up.
    """

    comparable: list[tuple[float, Transaction]] = []
    skipped = 0
    for tx in candidates:
        if tx.embedding is None or len(tx.embedding) != len(vector):
            skipped += 1
            continue
        comparable.append((cosine_distance(vector, tx.embedding), tx))
    if skipped:
        _logger.warning(
            "store:nearest_skipped count=%d expected_dims=%d", skipped, len(vector)
        )
    comparable.sort(key=lambda pair: pair[0])
    return [tx for _dist, tx in comparable[:limit]]


class SqlTransactionStore:
    """``TransactionStore`` over the shared ``transactions`` table."""

    def __init__(self, *, database_url: str | None = None) -> None:
        self._database_url = database_url

    def _rows(self, session: Session, stmt) -> list[Transaction]:
        return [
            Transaction.model_validate(row.as_record()) for row in session.scalars(stmt).all()
        ]

    def list_all(self) -> list[Transaction]:
        with session_scope(database_url=self._database_url) as session:
            return self._rows(session, select(TransactionRow))

    def list_between(self, start: datetime, end: datetime) -> list[Transaction]:
        stmt = (
            select(TransactionRow)
            .where(TransactionRow.date >= to_store_timestamp(start))
            .where(TransactionRow.date <= to_store_timestamp(end))
            .order_by(TransactionRow.date.desc())
        )
        with session_scope(database_url=self._database_url) as session:
            return self._rows(session, stmt)

    def list_recent(self, limit: int) -> list[Transaction]:
        stmt = select(TransactionRow).order_by(TransactionRow.date.desc()).limit(limit)
        with session_scope(database_url=self._database_url) as session:
            return self._rows(session, stmt)

    def find_nearest(self, vector: Sequence[float], limit: int) -> list[Transaction]:
        # Scored in-process: the household ledger is small and the JSON column
        # keeps the schema portable across Postgres and SQLite.
        stmt = (
            select(TransactionRow)
            .where(TransactionRow.embedding.isnot(None))
            .order_by(TransactionRow.date.desc())
        )
        with session_scope(database_url=self._database_url) as session:
            candidates = self._rows(session, stmt)
        return rank_by_cosine(candidates, vector, limit)

    def set_embedding(self, transaction_id: str, vector: Sequence[float]) -> None:
        stmt = (
            update(TransactionRow)
            .where(TransactionRow.id == transaction_id)
            .values(
                embedding=[float(x) for x in vector],
                updated_at=func.current_timestamp(),
            )
        )
        with session_scope(database_url=self._database_url) as session:
            result = session.execute(stmt)
            if result.rowcount == 0:
                raise LookupError(f"transaction {transaction_id!r} not found")


__all__ = ["SqlTransactionStore", "TransactionStore", "rank_by_cosine"]
