"""Embedding text composition and vector math.

Indexed transactions and incoming questions must land in the same vector
space: both go through :func:`compose_embedding_text` and the same
:class:`Embedder`. The text rule is ``note + " " + category_id + " " + amount``
with empty parts omitted; a question is embedded as the note part alone.
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from decimal import Decimal
from typing import Any, Protocol

from .errors import EmbeddingDimensionError
from .models import Transaction


class Embedder(Protocol):
    """Anything that turns one string into one fixed-length vector."""

    @property
    def dimensions(self) -> int: ...

    def embed(self, text: str) -> list[float]: ...


def _render_part(value: Any) -> str:
    # Falsy values (None, "", 0) are dropped entirely.
    if not value:
        return ""
    if isinstance(value, Decimal):
        return format(value.normalize(), "f")
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()


def compose_embedding_text(note: Any, category_id: Any, amount: Any) -> str:
    parts = (_render_part(note), _render_part(category_id), _render_part(amount))
    return " ".join(p for p in parts if p)


def transaction_embedding_text(tx: Transaction) -> str:
    return compose_embedding_text(tx.note, tx.category_id, tx.amount)


def question_embedding_text(question: str) -> str:
    return compose_embedding_text(question, None, None)


def is_indexable(tx: Transaction) -> bool:
    """Records with neither a note nor an amount carry nothing worth embedding."""

    return bool(tx.note) or bool(tx.amount)


def cosine_distance(a: Sequence[float], b: Sequence[float]) -> float:
    """Return ``1 - cosine_similarity(a, b)``.

    Zero vectors are treated as maximally unrelated (distance 1.0).
    """

    if len(a) != len(b):
        raise EmbeddingDimensionError(
            f"cannot compare embeddings of different dimensionality ({len(a)} vs {len(b)})"
        )
    dot = sum(x * y for x, y in zip(a, b, strict=True))
    norm_a = math.sqrt(sum(x * x for x in a))
    norm_b = math.sqrt(sum(y * y for y in b))
    if norm_a == 0 or norm_b == 0:
        return 1.0
    return 1.0 - dot / (norm_a * norm_b)


def check_dimensions(vector: Sequence[float], expected: int, *, source: str) -> None:
    if len(vector) != expected:
        raise EmbeddingDimensionError(
            f"{source} produced a {len(vector)}-dimensional embedding; "
            f"configured dimensionality is {expected}"
        )


__all__ = [
    "Embedder",
    "check_dimensions",
    "compose_embedding_text",
    "cosine_distance",
    "is_indexable",
    "question_embedding_text",
    "transaction_embedding_text",
]
