"""FastAPI dependencies that extract identity tokens and run the guard.

The guard never looks at the request itself: these helpers pull the raw
token out of the transport (cookie first, then ``Authorization: Bearer``)
and pass it explicitly.
"""

from __future__ import annotations

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from .auth_service import AuthGuard, SubjectId

security = HTTPBearer(auto_error=False)


def get_auth_guard(request: Request) -> AuthGuard:
    try:
        return request.app.state.auth_guard  # type: ignore[attr-defined]
    except AttributeError as exc:  # pragma: no cover - wiring error
        raise RuntimeError("AuthGuard is not configured") from exc


def extract_identity_token(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
) -> str | None:
    """Return the caller's identity token, or ``None`` when absent."""

    config = getattr(request.app.state, "config", None)
    cookie_name = getattr(config, "auth_cookie_name", "token")
    token = request.cookies.get(cookie_name)
    if token:
        return token
    if credentials is not None and credentials.scheme.lower() == "bearer":
        return credentials.credentials or None
    return None


def require_subject(
    token: str | None = Depends(extract_identity_token),
    guard: AuthGuard = Depends(get_auth_guard),
) -> SubjectId:
    """Strict check: the token must be present and verify."""

    return guard.authenticate(token)


def require_token_present(
    token: str | None = Depends(extract_identity_token),
    guard: AuthGuard = Depends(get_auth_guard),
) -> str:
    """Weak check used by browsing endpoints."""

    return guard.require_present(token)


__all__ = [
    "extract_identity_token",
    "get_auth_guard",
    "require_subject",
    "require_token_present",
]
