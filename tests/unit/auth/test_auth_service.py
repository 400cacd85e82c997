from datetime import datetime, timedelta, timezone

import jwt
import pytest

from src.clipvault.auth.auth_service import AuthGuard
from src.clipvault.exceptions import Unauthorized
from tests.helpers.identity import TEST_JWT_SECRET


def test_authenticate_returns_subject_for_valid_token(guard: AuthGuard) -> None:
    token = guard.issue_token("user-42")

    assert guard.authenticate(token) == "user-42"


def test_authenticate_accepts_sub_claim(guard: AuthGuard) -> None:
    now = datetime.now(timezone.utc)
    token = jwt.encode(
        {"sub": "user-7", "exp": int((now + timedelta(minutes=5)).timestamp())},
        TEST_JWT_SECRET,
        algorithm="HS256",
    )

    assert guard.authenticate(token) == "user-7"


@pytest.mark.parametrize("token", [None, ""], ids=["none", "empty"])
def test_authenticate_rejects_missing_token(guard: AuthGuard, token: str | None) -> None:
    with pytest.raises(Unauthorized):
        guard.authenticate(token)


def test_authenticate_rejects_expired_token(guard: AuthGuard) -> None:
    token = guard.issue_token("user-1", timedelta(seconds=-60))

    with pytest.raises(Unauthorized):
        guard.authenticate(token)


def test_authenticate_rejects_token_signed_with_other_key(guard: AuthGuard) -> None:
    forged = AuthGuard(signing_key="another-secret-of-sufficient-length-000").issue_token("user-1")

    with pytest.raises(Unauthorized):
        guard.authenticate(forged)


def test_authenticate_rejects_tampered_payload(guard: AuthGuard) -> None:
    header, _payload, signature = guard.issue_token("user-1").split(".")
    other_payload = guard.issue_token("admin").split(".")[1]

    with pytest.raises(Unauthorized):
        guard.authenticate(f"{header}.{other_payload}.{signature}")


def test_authenticate_rejects_token_without_subject(guard: AuthGuard) -> None:
    now = datetime.now(timezone.utc)
    token = jwt.encode(
        {"exp": int((now + timedelta(minutes=5)).timestamp())},
        TEST_JWT_SECRET,
        algorithm="HS256",
    )

    with pytest.raises(Unauthorized):
        guard.authenticate(token)


def test_require_present_accepts_any_non_empty_token(guard: AuthGuard) -> None:
    assert guard.require_present("not-even-a-jwt") == "not-even-a-jwt"


def test_require_present_rejects_missing_token(guard: AuthGuard) -> None:
    with pytest.raises(Unauthorized):
        guard.require_present(None)


def test_authenticate_accepts_token_without_expiry(guard: AuthGuard) -> None:
    token = jwt.encode({"id": "user-8"}, TEST_JWT_SECRET, algorithm="HS256")

    assert guard.authenticate(token) == "user-8"
