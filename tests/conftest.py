from __future__ import annotations

import os
from datetime import timedelta

import pytest

from tests.helpers.identity import TEST_JWT_SECRET, TEST_PRIVATE_KEY

os.environ.setdefault("CLIPVAULT_JWT_SECRET", TEST_JWT_SECRET)
os.environ.setdefault("CLIPVAULT_IMAGEKIT_PRIVATE_KEY", TEST_PRIVATE_KEY)

from src.clipvault.auth.auth_service import AuthGuard  # noqa: E402


@pytest.fixture
def guard() -> AuthGuard:
    return AuthGuard(signing_key=TEST_JWT_SECRET)


@pytest.fixture
def token_for(guard: AuthGuard):
    """Return a helper minting identity tokens for a subject."""

    def _factory(subject_id: str = "user-1", ttl: timedelta = timedelta(hours=1)) -> str:
        return guard.issue_token(subject_id, ttl)

    return _factory
