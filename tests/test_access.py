from __future__ import annotations

import logging

import pytest

from expense_assistant.access import AccessGuard, VerifiedToken, bearer_token, require_question
from expense_assistant.errors import InvalidArgument, PermissionDenied, Unauthenticated
from expense_assistant.models import AuthContext, CallableRequest

from tests.helpers.fakes import FakeVerifier

ALICE = VerifiedToken(uid="u-alice", email="alice@example.com")
MALLORY = VerifiedToken(uid="u-mallory", email="mallory@example.com")


def _guard(allowed=("alice@example.com",)) -> tuple[AccessGuard, FakeVerifier]:
    verifier = FakeVerifier({"good": ALICE, "other": MALLORY})
    return AccessGuard(verifier, allowed), verifier


def test_framework_auth_context_is_trusted_without_verifying():
    guard, verifier = _guard()
    req = CallableRequest(auth=AuthContext(uid="u-alice", claims={"email": "alice@example.com"}))

    caller = guard.authorize(req)

    assert caller.uid == "u-alice"
    assert caller.email == "alice@example.com"
    assert verifier.calls == []


def test_bearer_header_is_verified():
    guard, verifier = _guard()
    req = CallableRequest(headers={"authorization": "Bearer good"})

    assert guard.authorize(req).uid == "u-alice"
    assert verifier.calls == ["good"]


def test_missing_identity_is_unauthenticated():
    guard, _ = _guard()
    with pytest.raises(Unauthenticated):
        guard.authorize(CallableRequest())


def test_rejected_token_is_unauthenticated_and_logged(caplog: pytest.LogCaptureFixture):
    guard, _ = _guard()
    caplog.set_level(logging.WARNING, logger="expense_assistant")
    with pytest.raises(Unauthenticated):
        guard.authorize(CallableRequest(headers={"Authorization": "Bearer expired"}))
    assert any("access:token_rejected" in r.getMessage() for r in caplog.records)


def test_email_outside_allow_list_is_denied():
    guard, _ = _guard()
    with pytest.raises(PermissionDenied) as ei:
        guard.authorize(CallableRequest(headers={"Authorization": "Bearer other"}))
    assert ei.value.message == "User mallory@example.com is not authorized to use this feature."
    assert ei.value.status == "PERMISSION_DENIED"


def test_authenticated_without_email_is_denied():
    guard, _ = _guard()
    with pytest.raises(PermissionDenied):
        guard.authorize(CallableRequest(auth=AuthContext(uid="u-anon")))


def test_allow_list_comparison_ignores_case():
    guard, _ = _guard(allowed=("Alice@Example.COM",))
    req = CallableRequest(auth=AuthContext(uid="u1", claims={"email": "ALICE@example.com"}))
    assert guard.authorize(req).uid == "u1"


def test_empty_allow_list_denies_everyone(caplog: pytest.LogCaptureFixture):
    caplog.set_level(logging.WARNING, logger="expense_assistant")
    guard, _ = _guard(allowed=())
    assert any("access:empty_allow_list" in r.getMessage() for r in caplog.records)
    with pytest.raises(PermissionDenied):
        guard.authorize(CallableRequest(headers={"Authorization": "Bearer good"}))


@pytest.mark.parametrize(
    "header, expected",
    [
        ("Bearer abc.def", "abc.def"),
        ("Bearer   ", None),
        ("Basic abc", None),
        ("", None),
        (None, None),
    ],
)
def test_bearer_token(header, expected):
    assert bearer_token(header) == expected


def test_require_question_returns_text_verbatim():
    assert require_question({"question": " How much? "}) == " How much? "


@pytest.mark.parametrize("data", [{}, {"question": ""}, {"question": "   "}, {"question": 42}])
def test_require_question_rejects_missing_or_blank(data):
    with pytest.raises(InvalidArgument):
        require_question(data)
