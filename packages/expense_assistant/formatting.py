"""Render retrieved transactions as the plain-text prompt context.

Dates are rendered in the same time zone as the ``now`` the resolver and the
prompt anchors use, so a record inside "today" is printed with today's date.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import UTC, date, datetime, tzinfo
from typing import Any

from .models import Transaction

NO_TRANSACTIONS = "No transactions found for this time period."
UNKNOWN_DATE = "Unknown"
_MISSING = "N/A"


def format_date(value: Any, tz: tzinfo | None = None) -> str:
    """Render a stored date as ``YYYY-MM-DD``; anything unparseable is ``Unknown``.

    Aware datetimes (and ISO strings with an offset or ``Z``) are converted to
    ``tz`` (UTC when omitted) before taking the calendar date. Naive values are
    rendered as-is.
    """

    if value is None or value == "":
        return UNKNOWN_DATE
    if isinstance(value, str):
        try:
            value = datetime.fromisoformat(value.strip())
        except ValueError:
            return UNKNOWN_DATE
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(tz or UTC)
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    return UNKNOWN_DATE


def format_transaction(tx: Transaction, tz: tzinfo | None = None) -> str:
    return (
        f"Date: {format_date(tx.date, tz)}, "
        f"Amount: {tx.amount}, "
        f"Category: {tx.category_id or _MISSING}, "
        f"Note: {tx.note or _MISSING}"
    )


def format_transactions(transactions: Iterable[Transaction], tz: tzinfo | None = None) -> str:
    """One line per transaction, or :data:`NO_TRANSACTIONS` when empty."""

    lines = [format_transaction(tx, tz) for tx in transactions]
    if not lines:
        return NO_TRANSACTIONS
    return "\n".join(lines)


__all__ = [
    "NO_TRANSACTIONS",
    "format_date",
    "format_transaction",
    "format_transactions",
]
