"""Access guard for the callable entry points.

Resolution order for the caller identity:

1. an :class:`~expense_assistant.models.AuthContext` attached by the hosting
   framework (already verified);
2. otherwise a ``Authorization: Bearer <token>`` header, verified with the
   identity provider. A verification failure is logged and the request is
   treated as unauthenticated; it does not raise at that point.

Then the email must be on the configured allow-list. The guard runs before any
retrieval or model call, so a rejected request costs nothing downstream.
"""

from __future__ import annotations

import threading
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any, Protocol

from .errors import InvalidArgument, PermissionDenied, Unauthenticated
from .logging_setup import get_logger
from .models import CallableRequest, Caller

_logger = get_logger("expense_assistant.access")

_BEARER_PREFIX = "Bearer "


@dataclass(frozen=True, slots=True)
class VerifiedToken:
    uid: str
    email: str | None


class IdentityVerifier(Protocol):
    def verify(self, token: str) -> VerifiedToken:
        """Return the token's identity or raise on an invalid/expired token."""
        ...


class FirebaseTokenVerifier:
    """Verify Firebase ID tokens with ``firebase_admin``.

    The default app is initialised on first use from the ambient Google
    credentials (``GOOGLE_APPLICATION_CREDENTIALS`` or the runtime's service
    account).
    """

    _init_lock = threading.Lock()

    def __init__(self, *, project_id: str | None = None) -> None:
        self._project_id = project_id

    def _ensure_app(self) -> None:
        import firebase_admin

        with self._init_lock:
            try:
                firebase_admin.get_app()
            except ValueError:
                options = {"projectId": self._project_id} if self._project_id else None
                firebase_admin.initialize_app(options=options)

    def verify(self, token: str) -> VerifiedToken:
        from firebase_admin import auth

        self._ensure_app()
        decoded: Mapping[str, Any] = auth.verify_id_token(token)
        email = decoded.get("email")
        return VerifiedToken(uid=str(decoded["uid"]), email=email if email else None)


def bearer_token(header_value: str | None) -> str | None:
    if not header_value or not header_value.startswith(_BEARER_PREFIX):
        return None
    token = header_value[len(_BEARER_PREFIX) :].strip()
    return token or None


class AccessGuard:
    """Authenticate and authorize a :class:`CallableRequest`."""

    def __init__(self, verifier: IdentityVerifier, allowed_emails: Iterable[str]) -> None:
        self._verifier = verifier
        self._allowed = frozenset(e.strip().lower() for e in allowed_emails if e.strip())
        if not self._allowed:
            _logger.warning("access:empty_allow_list every caller will be denied")

    def _identify(self, request: CallableRequest) -> tuple[str | None, str | None]:
        if request.auth is not None and request.auth.uid:
            return request.auth.uid, request.auth.email

        token = bearer_token(request.header("authorization"))
        if token is None:
            return None, None
        try:
            verified = self._verifier.verify(token)
        except Exception as e:  # noqa: BLE001 - any verifier failure means "not authenticated"
            _logger.warning("access:token_rejected error=%s", e.__class__.__name__)
            return None, None
        return verified.uid, verified.email

    def authorize(self, request: CallableRequest) -> Caller:
        uid, email = self._identify(request)
        if not uid:
            _logger.warning("access:unauthenticated")
            raise Unauthenticated("The function must be called while authenticated.")
        if not email or email.strip().lower() not in self._allowed:
            _logger.warning("access:denied uid=%s email=%s", uid, email)
            raise PermissionDenied(f"User {email} is not authorized to use this feature.")
        _logger.info("access:granted uid=%s email=%s", uid, email)
        return Caller(uid=uid, email=email)


def require_question(data: Mapping[str, Any]) -> str:
    """Return ``data["question"]`` or raise :class:`InvalidArgument`."""

    question = data.get("question") if isinstance(data, Mapping) else None
    if not isinstance(question, str) or not question.strip():
        raise InvalidArgument('The function must be called with a "question" argument.')
    return question


__all__ = [
    "AccessGuard",
    "FirebaseTokenVerifier",
    "IdentityVerifier",
    "VerifiedToken",
    "bearer_token",
    "require_question",
]
