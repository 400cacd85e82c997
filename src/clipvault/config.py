"""Application configuration for ClipVault.

Values are read from ``CLIPVAULT_*`` environment variables (and an optional
``.env`` file). The database URL is intentionally optional here: its absence
is reported by the connection cache on first use rather than at import time.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Any, cast

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Upload ceilings enforced client side, in bytes.
MAX_VIDEO_BYTES = 100 * 1024 * 1024
MAX_IMAGE_BYTES = 10 * 1024 * 1024

# The object store refuses credentials expiring more than an hour ahead.
MAX_CREDENTIAL_TTL_SECONDS = 3600


class AppConfig(BaseSettings):
    """Pydantic settings container for the service layer."""

    model_config = cast(
        Any,
        SettingsConfigDict(
            env_prefix="CLIPVAULT_",
            env_file=".env",
            env_file_encoding="utf-8",
            extra="ignore",
        ),
    )

    database_url: str | None = Field(
        default=None,
        description="SQLAlchemy async DSN for the metadata store (mandatory at first connect).",
    )
    create_schema: bool = Field(
        default=True,
        description="Create the videos table when the connection is first established.",
    )
    jwt_secret: str = Field(
        default="change-me",
        min_length=1,
        description="Secret used to verify identity tokens.",
    )
    jwt_algorithm: str = Field(default="HS256", description="Identity token signing algorithm.")
    auth_cookie_name: str = Field(
        default="token",
        description="Cookie carrying the identity token.",
    )
    imagekit_public_key: str = Field(
        default="",
        description="Public identifier of the object-store client.",
    )
    imagekit_private_key: str = Field(
        default="",
        description="Private key used to sign upload credentials.",
    )
    imagekit_upload_url: str = Field(
        default="https://upload.imagekit.io/api/v1/files/upload",
        description="Object-store upload endpoint used by the upload client.",
    )
    credential_ttl_seconds: int = Field(
        default=30 * 60,
        ge=1,
        le=MAX_CREDENTIAL_TTL_SECONDS,
        description="Lifetime of an upload credential in seconds.",
    )
    base_url: str = Field(
        default="http://localhost:8000",
        description="Base URL used for same-origin internal calls.",
    )
    log_level: str = Field(default="INFO", description="Root log level.")

    @classmethod
    def build_default(cls) -> "AppConfig":
        """Construct configuration from the environment."""

        return cls()


@lru_cache()
def load_config() -> AppConfig:
    return AppConfig.build_default()


__all__ = [
    "AppConfig",
    "MAX_CREDENTIAL_TTL_SECONDS",
    "MAX_IMAGE_BYTES",
    "MAX_VIDEO_BYTES",
    "load_config",
]
