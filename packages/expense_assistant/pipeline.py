"""Question-answering pipeline and its collaborator wiring.

``answer_question`` is the unauthenticated core (Router -> Formatter ->
Answer Generator). Entry points in :mod:`expense_assistant.api` put the access
guard in front of it.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from functools import cached_property

from .access import AccessGuard, FirebaseTokenVerifier, IdentityVerifier
from .answer import LanguageModel, generate_answer
from .embeddings import Embedder
from .formatting import format_transactions
from .logging_setup import get_logger
from .openai_client import OpenAIEmbedder, OpenAIResponsesModel
from .retrieval import TransactionRetriever
from .settings import Settings
from .store import SqlTransactionStore, TransactionStore

_logger = get_logger("expense_assistant.pipeline")


@dataclass(frozen=True)
class Services:
    """Collaborators for one process. Stateless across requests."""

    settings: Settings
    store: TransactionStore
    embedder: Embedder
    llm: LanguageModel
    verifier: IdentityVerifier

    @cached_property
    def guard(self) -> AccessGuard:
        return AccessGuard(self.verifier, self.settings.allowed_emails)

    @cached_property
    def retriever(self) -> TransactionRetriever:
        return TransactionRetriever(
            self.store,
            self.embedder,
            recent_limit=self.settings.recent_limit,
            semantic_limit=self.settings.semantic_limit,
        )

    def now(self) -> datetime:
        return datetime.now(self.settings.tzinfo)


def build_services(settings: Settings) -> Services:
    """Wire the production collaborators (SQL store, OpenAI, Firebase auth)."""

    return Services(
        settings=settings,
        store=SqlTransactionStore(database_url=settings.database_url),
        embedder=OpenAIEmbedder(
            settings.embedding_model,
            settings.embedding_dimensions,
            base_url=settings.model_base_url,
        ),
        llm=OpenAIResponsesModel(base_url=settings.model_base_url),
        verifier=FirebaseTokenVerifier(),
    )


def answer_question(question: str, now: datetime, services: Services) -> str:
    """Retrieve, format and answer ``question`` as of ``now``.

    An empty retrieval still reaches the model with the "no transactions"
    context so it can say so. Dates in the context are rendered in ``now``'s
    time zone, the one the resolver and the prompt anchors use.
    """

    result = services.retriever.retrieve(question, now)
    context = format_transactions(result.transactions, now.tzinfo)
    _logger.info("pipeline:context mode=%s count=%d", result.mode, len(result))
    return generate_answer(
        question,
        context,
        now,
        llm=services.llm,
        model=services.settings.generation_model,
        currency_symbol=services.settings.currency_symbol,
    )


__all__ = ["Services", "answer_question", "build_services"]
