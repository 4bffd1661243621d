"""Error taxonomy for the question-answering pipeline.

Every failure that can reach a caller is an :class:`AssistantError` subclass
with a stable ``code`` (the callable-protocol status in lower-kebab form) and
the HTTP status used by :mod:`expense_assistant.server`.
"""

from __future__ import annotations


class AssistantError(Exception):
    """Base class for caller-visible failures."""

    code: str = "internal"
    http_status: int = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    @property
    def status(self) -> str:
        """Upper-snake status name used on the wire (e.g. ``PERMISSION_DENIED``)."""

        return self.code.replace("-", "_").upper()


class Unauthenticated(AssistantError):
    code = "unauthenticated"
    http_status = 401


class PermissionDenied(AssistantError):
    code = "permission-denied"
    http_status = 403


class InvalidArgument(AssistantError):
    code = "invalid-argument"
    http_status = 400


class UpstreamUnavailable(AssistantError):
    """The transaction store or the embedding service could not be reached."""

    code = "unavailable"
    http_status = 503


class GenerationFailed(AssistantError):
    """The language model call failed or produced no text."""

    code = "internal"
    http_status = 500


class EmbeddingDimensionError(AssistantError):
    """Vectors from different embedding spaces were about to be compared.

    Raised instead of returning meaningless distances; it points at a model or
    ``EXPENSE_ASSISTANT_EMBEDDING_DIMENSIONS`` misconfiguration.
    """

    code = "failed-precondition"
    http_status = 500


__all__ = [
    "AssistantError",
    "EmbeddingDimensionError",
    "GenerationFailed",
    "InvalidArgument",
    "PermissionDenied",
    "Unauthenticated",
    "UpstreamUnavailable",
]
