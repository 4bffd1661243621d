"""Callable entry points.

These are the stable import surface used by the CLI and the HTTP app:

- :func:`analyze_transactions`: guarded natural-language question answering.
- :func:`backfill_embeddings`: administrative re-indexing pass.
- :func:`on_transaction_created`: write-time indexing hook.
"""

from __future__ import annotations

from datetime import datetime

from . import backfill as _backfill
from .access import require_question
from .logging_setup import get_logger
from .models import BackfillReport, CallableRequest, Transaction
from .pipeline import Services, answer_question

_logger = get_logger("expense_assistant.api")


def analyze_transactions(
    request: CallableRequest, services: Services, *, now: datetime | None = None
) -> str:
    """Answer ``request.data["question"]`` for an authorized caller.

    Raises ``Unauthenticated``/``PermissionDenied``/``InvalidArgument`` before
    any store or model call; ``UpstreamUnavailable``/``GenerationFailed`` from
    the pipeline propagate unchanged.
    """

    caller = services.guard.authorize(request)
    question = require_question(request.data)
    _logger.info("analyze:start uid=%s chars=%d", caller.uid, len(question))
    return answer_question(question, now or services.now(), services)


def backfill_embeddings(request: CallableRequest, services: Services) -> BackfillReport:
    """Embed every transaction that lacks a usable vector (authorized callers only)."""

    caller = services.guard.authorize(request)
    _logger.info("backfill:start uid=%s", caller.uid)
    return _backfill.backfill_embeddings(store=services.store, embedder=services.embedder)


def on_transaction_created(transaction: Transaction, services: Services) -> bool:
    """Index a newly written transaction; never raises."""

    return _backfill.index_transaction(
        transaction, store=services.store, embedder=services.embedder
    )


__all__ = ["analyze_transactions", "backfill_embeddings", "on_transaction_created"]
