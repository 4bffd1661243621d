"""Retrieval router: choose date-range, recency or semantic fetch per question.

Decision order:

1. An explicit range from :func:`~expense_assistant.time_ranges.resolve_date_range`
   fetches every transaction inside it (no cap).
2. Otherwise a generic time keyword (``recent``, ``lately``, ...) fetches the
   newest ``recent_limit`` transactions.
3. Otherwise the question is embedded and the ``semantic_limit`` nearest
   transactions are fetched.

Exactly one path runs per question. Store and embedding failures surface as
:class:`~expense_assistant.errors.UpstreamUnavailable`; an answer built on
missing data would be misleading.
"""

from __future__ import annotations

import time
from collections.abc import Callable
from datetime import datetime
from typing import TypeVar

from .embeddings import Embedder, check_dimensions, question_embedding_text
from .errors import AssistantError, UpstreamUnavailable
from .logging_setup import get_logger
from .models import DateRange, RetrievalMode, RetrievalResult, Transaction
from .store import TransactionStore
from .time_ranges import mentions_time, resolve_date_range

_logger = get_logger("expense_assistant.retrieval")

T = TypeVar("T")


def choose_mode(question: str, now: datetime) -> tuple[RetrievalMode, DateRange | None]:
    """Decide the retrieval path without touching any collaborator."""

    date_range = resolve_date_range(question, now)
    if date_range is not None:
        return RetrievalMode.DATE_RANGE, date_range
    if mentions_time(question):
        return RetrievalMode.RECENCY, None
    return RetrievalMode.SEMANTIC, None


def _upstream(what: str, fn: Callable[[], T]) -> T:
    try:
        return fn()
    except AssistantError:
        raise
    except Exception as e:  # noqa: BLE001 - any store/SDK failure is an upstream outage
        _logger.error("retrieval:upstream_failed step=%s error=%s", what, e.__class__.__name__)
        raise UpstreamUnavailable(f"{what} failed: {e}") from e


class TransactionRetriever:
    def __init__(
        self,
        store: TransactionStore,
        embedder: Embedder,
        *,
        recent_limit: int,
        semantic_limit: int,
    ) -> None:
        self._store = store
        self._embedder = embedder
        self._recent_limit = recent_limit
        self._semantic_limit = semantic_limit

    def retrieve(self, question: str, now: datetime) -> RetrievalResult:
        mode, date_range = choose_mode(question, now)
        t0 = time.perf_counter()

        txns: list[Transaction]
        if mode is RetrievalMode.DATE_RANGE:
            assert date_range is not None
            txns = _upstream(
                "date range query",
                lambda: self._store.list_between(date_range.start, date_range.end),
            )
            _logger.info(
                "retrieval:date_range start=%s end=%s count=%d",
                date_range.start.isoformat(),
                date_range.end.isoformat(),
                len(txns),
            )
        elif mode is RetrievalMode.RECENCY:
            txns = _upstream(
                "recency query", lambda: self._store.list_recent(self._recent_limit)
            )
            _logger.info(
                "retrieval:recency limit=%d count=%d", self._recent_limit, len(txns)
            )
        else:
            txns = self._semantic(question)

        _logger.debug(
            "retrieval:done mode=%s latency_ms=%.2f", mode, (time.perf_counter() - t0) * 1000.0
        )
        return RetrievalResult(transactions=tuple(txns), mode=mode, date_range=date_range)

    def _semantic(self, question: str) -> list[Transaction]:
        text = question_embedding_text(question)
        vector = _upstream("question embedding", lambda: self._embedder.embed(text))
        # Guard the query side too; a fake or misconfigured embedder must not
        # be compared against indexed vectors of another size.
        check_dimensions(vector, self._embedder.dimensions, source="question embedder")
        txns = _upstream(
            "vector query", lambda: self._store.find_nearest(vector, self._semantic_limit)
        )
        _logger.info("retrieval:semantic limit=%d count=%d", self._semantic_limit, len(txns))
        return txns


__all__ = ["TransactionRetriever", "choose_mode"]
