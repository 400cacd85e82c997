"""Identity-token verification for ClipVault handlers."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any

import jwt
import structlog
from jwt import ExpiredSignatureError
from jwt import InvalidTokenError as PyJWTInvalidTokenError

from ..exceptions import Unauthorized

logger = structlog.get_logger(__name__)

SubjectId = str


def _utcnow() -> datetime:
    """Return timezone-aware UTC now."""
    return datetime.now(tz=timezone.utc)


@dataclass(slots=True)
class AuthGuard:
    """Verify opaque bearer tokens and yield the subject they identify.

    Two checks exist on purpose: :meth:`authenticate` fully verifies the
    token and is required for writes and credential issuance, while
    :meth:`require_present` only checks that a token was supplied and gates
    browsing. Both reject with the same :class:`Unauthorized` error; the
    distinction between "absent" and "invalid" is only visible in logs.
    """

    signing_key: str
    algorithm: str = "HS256"

    def authenticate(self, token: str | None) -> SubjectId:
        """Verify ``token`` and return its subject id."""
        if not token:
            logger.warning("auth.reject", reason="missing_token", check="strict")
            raise Unauthorized("Unauthorized")
        try:
            payload: dict[str, Any] = jwt.decode(
                token,
                self.signing_key,
                algorithms=[self.algorithm],
            )
        except ExpiredSignatureError as exc:
            logger.warning("auth.reject", reason="token_expired", check="strict")
            raise Unauthorized("Invalid or expired token") from exc
        except PyJWTInvalidTokenError as exc:
            logger.warning("auth.reject", reason="invalid_token", check="strict")
            raise Unauthorized("Invalid or expired token") from exc

        subject = payload.get("id") or payload.get("sub")
        if not subject:
            logger.warning("auth.reject", reason="missing_subject", check="strict")
            raise Unauthorized("Invalid or expired token")
        return str(subject)

    def require_present(self, token: str | None) -> str:
        """Weak check for the read path: only the token's presence matters."""
        if not token:
            logger.warning("auth.reject", reason="missing_token", check="presence")
            raise Unauthorized("Unauthorized")
        return token

    def issue_token(
        self,
        subject_id: SubjectId,
        ttl: timedelta = timedelta(hours=1),
        *,
        issued_at: datetime | None = None,
    ) -> str:
        """Mint a token for ``subject_id`` (tooling and tests; login is external)."""
        now = issued_at or _utcnow()
        payload: dict[str, Any] = {
            "id": subject_id,
            "iat": int(now.timestamp()),
            "exp": int((now + ttl).timestamp()),
        }
        return jwt.encode(payload, self.signing_key, algorithm=self.algorithm)


__all__ = ["AuthGuard", "SubjectId"]
