"""Embedding indexing: the write-time hook and the one-shot backfill.

Both paths compose the text with
:func:`~expense_assistant.embeddings.transaction_embedding_text` and use the
same embedder as question retrieval, keeping indexed and query vectors in one
space.
"""

from __future__ import annotations

from .embeddings import Embedder, is_indexable, transaction_embedding_text
from .logging_setup import get_logger
from .models import BackfillReport, Transaction
from .store import TransactionStore

_logger = get_logger("expense_assistant.backfill")


def embed_and_store(tx: Transaction, *, store: TransactionStore, embedder: Embedder) -> None:
    vector = embedder.embed(transaction_embedding_text(tx))
    store.set_embedding(tx.id, vector)


def index_transaction(
    tx: Transaction, *, store: TransactionStore, embedder: Embedder
) -> bool:
    """Embed a freshly written transaction.

    Returns ``True`` when a vector was stored. Failures are logged and reported
    as ``False``; indexing must never block the write that triggered it (the
    backfill picks the record up later).
    """

    if not is_indexable(tx):
        _logger.debug("index:skipped_empty id=%s", tx.id)
        return False
    try:
        embed_and_store(tx, store=store, embedder=embedder)
    except Exception as e:  # noqa: BLE001
        _logger.error("index:failed id=%s error=%s: %s", tx.id, e.__class__.__name__, e)
        return False
    _logger.info("index:embedded id=%s", tx.id)
    return True


def backfill_embeddings(*, store: TransactionStore, embedder: Embedder) -> BackfillReport:
    """Embed every transaction that lacks a usable vector.

    Single sequential pass over the store. Records already carrying a vector of
    the configured dimensionality are skipped; records whose vector has another
    size are re-embedded since semantic search cannot see them. A failure on one
    record is logged and the pass continues.
    """

    processed = 0
    failed = 0
    transactions = store.list_all()
    for tx in transactions:
        if tx.has_embedding(embedder.dimensions):
            continue
        if not is_indexable(tx):
            continue
        try:
            embed_and_store(tx, store=store, embedder=embedder)
        except Exception as e:  # noqa: BLE001
            failed += 1
            _logger.error("backfill:failed id=%s error=%s: %s", tx.id, e.__class__.__name__, e)
            continue
        processed += 1
        _logger.info("backfill:embedded id=%s", tx.id)

    _logger.info(
        "backfill:done scanned=%d processed=%d failed=%d", len(transactions), processed, failed
    )
    return BackfillReport(success=True, processed=processed)


__all__ = ["backfill_embeddings", "embed_and_store", "index_transaction"]
