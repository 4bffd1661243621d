"""Data models for ``expense_assistant``.

``Transaction`` mirrors a ledger record as stored by the app. Field names are
snake_case in Python; the camelCase names written by the web client
(``categoryId``, ``accountId``, ``userId``) are accepted as aliases so raw
documents validate without renaming.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import StrEnum
from typing import Any, Literal, NamedTuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

# ---------------------------------------------------------------------------
# Ledger records
# ---------------------------------------------------------------------------


class Transaction(BaseModel):
    """A single income/expense record.

    ``date`` is kept as delivered by the store: either a ``datetime`` or an
    ISO-8601 string. Rendering normalizes it (see
    :func:`expense_assistant.formatting.format_date`).

    ``embedding`` is absent until the record has been indexed; a record is
    eligible for semantic retrieval only when its vector has the configured
    dimensionality.
    """

    model_config = ConfigDict(
        frozen=True, extra="ignore", populate_by_name=True, str_strip_whitespace=True
    )

    id: str
    amount: Decimal = Field(ge=0)
    type: Literal["income", "expense"] = "expense"
    category_id: str | None = Field(default=None, alias="categoryId")
    account_id: str | None = Field(default=None, alias="accountId")
    date: datetime | str | None = None
    note: str | None = None
    embedding: tuple[float, ...] | None = None
    user_id: str | None = Field(default=None, alias="userId")

    @field_validator("embedding", mode="before")
    @classmethod
    def _empty_embedding_is_none(cls, v: Any) -> Any:
        if v is None:
            return None
        if len(v) == 0:
            return None
        return v

    @field_validator("note", "category_id")
    @classmethod
    def _blank_is_none(cls, v: str | None) -> str | None:
        if v is None or not v:
            return None
        return v

    def has_embedding(self, dimensions: int) -> bool:
        """True when the record carries a vector of exactly ``dimensions`` floats."""

        return self.embedding is not None and len(self.embedding) == dimensions


# ---------------------------------------------------------------------------
# Retrieval
# ---------------------------------------------------------------------------


class RetrievalMode(StrEnum):
    DATE_RANGE = "date_range"
    RECENCY = "recency"
    SEMANTIC = "semantic"


class DateRange(NamedTuple):
    """An inclusive ``[start, end]`` interval resolved from a question."""

    start: datetime
    end: datetime


@dataclass(frozen=True, slots=True)
class RetrievalResult:
    """Transactions selected for one question, in store order."""

    transactions: tuple[Transaction, ...]
    mode: RetrievalMode
    date_range: DateRange | None = None

    @property
    def is_empty(self) -> bool:
        return not self.transactions

    def __len__(self) -> int:
        return len(self.transactions)


# ---------------------------------------------------------------------------
# Callers and requests
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class AuthContext:
    """Identity already verified by the hosting framework."""

    uid: str
    claims: Mapping[str, Any] = field(default_factory=dict)

    @property
    def email(self) -> str | None:
        val = self.claims.get("email")
        return val if isinstance(val, str) and val else None


@dataclass(frozen=True, slots=True)
class CallableRequest:
    """A callable invocation: payload, optional verified identity, raw headers."""

    data: Mapping[str, Any] = field(default_factory=dict)
    auth: AuthContext | None = None
    headers: Mapping[str, str] = field(default_factory=dict)

    def header(self, name: str) -> str | None:
        """Case-insensitive header lookup."""

        wanted = name.lower()
        for key, val in self.headers.items():
            if key.lower() == wanted:
                return val
        return None


@dataclass(frozen=True, slots=True)
class Caller:
    uid: str
    email: str


@dataclass(frozen=True, slots=True)
class BackfillReport:
    success: bool
    processed: int

    def as_dict(self) -> dict[str, Any]:
        return {"success": self.success, "processed": self.processed}


__all__ = [
    "AuthContext",
    "BackfillReport",
    "CallableRequest",
    "Caller",
    "DateRange",
    "RetrievalMode",
    "RetrievalResult",
    "Transaction",
]
