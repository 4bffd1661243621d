"""Public interface for the ``expense_assistant`` package.

Re-exports the callable entry points, the pipeline wiring and the public
models. No runtime logic lives here.
"""

from .api import analyze_transactions, backfill_embeddings, on_transaction_created
from .errors import (
    AssistantError,
    EmbeddingDimensionError,
    GenerationFailed,
    InvalidArgument,
    PermissionDenied,
    Unauthenticated,
    UpstreamUnavailable,
)
from .models import (
    AuthContext,
    BackfillReport,
    CallableRequest,
    Caller,
    DateRange,
    RetrievalMode,
    RetrievalResult,
    Transaction,
)
from .pipeline import Services, answer_question, build_services
from .settings import Settings, load_settings

__all__ = [
    # API
    "analyze_transactions",
    "answer_question",
    "backfill_embeddings",
    "build_services",
    "load_settings",
    "on_transaction_created",
    "Services",
    "Settings",
    # Models / types
    "AuthContext",
    "BackfillReport",
    "CallableRequest",
    "Caller",
    "DateRange",
    "RetrievalMode",
    "RetrievalResult",
    "Transaction",
    # Errors
    "AssistantError",
    "EmbeddingDimensionError",
    "GenerationFailed",
    "InvalidArgument",
    "PermissionDenied",
    "Unauthenticated",
    "UpstreamUnavailable",
]
