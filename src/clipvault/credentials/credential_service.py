"""Short-lived upload credentials for direct-to-object-store uploads."""

from __future__ import annotations

import hashlib
import hmac
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable

import structlog

from ..config import MAX_CREDENTIAL_TTL_SECONDS
from ..exceptions import ServerError

logger = structlog.get_logger(__name__)


def _default_clock() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True, slots=True)
class UploadCredential:
    """Signed, time-boxed value authorising exactly one upload attempt."""

    token: str
    expire: int
    signature: str

    def as_dict(self) -> dict[str, object]:
        return {"token": self.token, "expire": self.expire, "signature": self.signature}


def sign_upload_token(private_key: str, token: str, expire: int) -> str:
    """Return the object store's HMAC-SHA1 signature over ``token + expire``."""

    message = f"{token}{expire}".encode("utf-8")
    return hmac.new(private_key.encode("utf-8"), message, hashlib.sha1).hexdigest()


@dataclass(slots=True)
class UploadCredentialIssuer:
    """Mint fresh upload credentials for callers that passed the strict guard."""

    private_key: str
    ttl_seconds: int = 30 * 60
    clock: Callable[[], datetime] = field(default=_default_clock)
    token_factory: Callable[[], str] = field(default=lambda: uuid.uuid4().hex)

    def issue(self, subject_id: str) -> UploadCredential:
        if not self.private_key:
            logger.error("credential.signing_key_missing", subject_id=subject_id)
            raise ServerError("Upload signing is not configured")

        ttl = max(1, min(self.ttl_seconds, MAX_CREDENTIAL_TTL_SECONDS))
        token = self.token_factory()
        expire = int(self.clock().timestamp()) + ttl
        try:
            signature = sign_upload_token(self.private_key, token, expire)
        except (TypeError, ValueError) as exc:
            logger.error("credential.signing_failed", subject_id=subject_id, error=str(exc))
            raise ServerError("Failed to sign upload credential") from exc

        logger.info("credential.issued", subject_id=subject_id, expire=expire)
        return UploadCredential(token=token, expire=expire, signature=signature)


__all__ = ["UploadCredential", "UploadCredentialIssuer", "sign_upload_token"]
