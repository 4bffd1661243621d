"""Shared SQLAlchemy models registry for the workspace database.

Currently holds the household ledger used by ``expense_assistant``.
"""

from .transactions import Base, Transaction

__all__ = [
    "Base",
    "Transaction",
]
