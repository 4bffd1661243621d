from __future__ import annotations

import pytest

from expense_assistant.api import backfill_embeddings, on_transaction_created
from expense_assistant.backfill import backfill_embeddings as run_backfill
from expense_assistant.backfill import index_transaction
from expense_assistant.errors import PermissionDenied
from expense_assistant.models import AuthContext, CallableRequest

from tests.helpers.fakes import DIMS, FakeEmbedder, FakeStore, make_services, tx

ALICE = AuthContext(uid="u-alice", claims={"email": "alice@example.com"})


def _by_id(store: FakeStore) -> dict:
    return {t.id: t for t in store.transactions}


def test_backfill_embeds_only_records_without_a_usable_vector():
    store = FakeStore(
        [
            tx("done", 10, "2024-03-01T00:00:00.000Z", note="coffee", embedding=[1.0, 0, 0, 0.1]),
            tx("missing", 900, "2024-03-02T00:00:00.000Z", category_id="groceries", note="market"),
            tx("stale", 40, "2024-03-03T00:00:00.000Z", note="uber", embedding=[0.5, 0.5]),
            tx("empty", 0, "2024-03-04T00:00:00.000Z", category_id=None, note=None),
        ]
    )
    embedder = FakeEmbedder()

    report = run_backfill(store=store, embedder=embedder)

    assert report.as_dict() == {"success": True, "processed": 2}
    assert embedder.texts == ["market groceries 900", "uber food 40"]
    rows = _by_id(store)
    assert rows["missing"].has_embedding(DIMS)
    assert rows["stale"].has_embedding(DIMS)
    assert rows["empty"].embedding is None


def test_backfill_continues_past_a_failing_record():
    store = FakeStore(
        [
            tx("a", 1, "2024-03-01T00:00:00.000Z", note="a"),
            tx("b", 2, "2024-03-02T00:00:00.000Z", note="b"),
            tx("c", 3, "2024-03-03T00:00:00.000Z", note="c"),
        ]
    )
    store.fail_set_embedding_for = {"b"}

    report = run_backfill(store=store, embedder=FakeEmbedder())

    assert report.success is True
    assert report.processed == 2
    rows = _by_id(store)
    assert rows["a"].embedding is not None
    assert rows["b"].embedding is None
    assert rows["c"].embedding is not None


def test_second_backfill_is_a_no_op():
    store = FakeStore([tx("a", 5, "2024-03-01T00:00:00.000Z", note="taxi")])
    embedder = FakeEmbedder()
    assert run_backfill(store=store, embedder=embedder).processed == 1
    assert run_backfill(store=store, embedder=embedder).processed == 0
    assert len(embedder.texts) == 1


def test_backfill_entry_point_is_guarded():
    store = FakeStore([tx("a", 5, "2024-03-01T00:00:00.000Z", note="taxi")])
    services = make_services(store=store)
    mallory = AuthContext(uid="u-m", claims={"email": "mallory@example.com"})

    with pytest.raises(PermissionDenied):
        backfill_embeddings(CallableRequest(auth=mallory), services)
    assert store.calls == []

    report = backfill_embeddings(CallableRequest(auth=ALICE), services)
    assert report.processed == 1


def test_index_hook_embeds_new_transaction():
    store = FakeStore([tx("new", 250, "2024-03-15T10:00:00.000Z", category_id="coffee", note="Latte")])
    embedder = FakeEmbedder()
    services = make_services(store=store, embedder=embedder)

    assert on_transaction_created(store.transactions[0], services) is True
    assert embedder.texts == ["Latte coffee 250"]
    assert _by_id(store)["new"].has_embedding(DIMS)


def test_index_hook_skips_empty_records():
    store = FakeStore()
    embedder = FakeEmbedder()
    record = tx("blank", 0, "2024-03-15T10:00:00.000Z", category_id=None, note=None)

    assert index_transaction(record, store=store, embedder=embedder) is False
    assert embedder.texts == []


def test_index_hook_never_raises():
    store = FakeStore()
    record = tx("x", 10, "2024-03-15T10:00:00.000Z", note="cab")
    assert index_transaction(record, store=store, embedder=FakeEmbedder(fail=True)) is False
