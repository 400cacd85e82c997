"""Typed HTTP client for the ClipVault REST API."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from httpx import AsyncClient, Response

from ..exceptions import (
    AppError,
    DatabaseConnectionError,
    NotFound,
    ServerError,
    Unauthorized,
    ValidationError,
)

_ERRORS_BY_KIND: dict[str, type[AppError]] = {
    Unauthorized.kind: Unauthorized,
    ValidationError.kind: ValidationError,
    NotFound.kind: NotFound,
    DatabaseConnectionError.kind: DatabaseConnectionError,
    ServerError.kind: ServerError,
}

_ERRORS_BY_STATUS: dict[int, type[AppError]] = {
    400: ValidationError,
    401: Unauthorized,
    404: NotFound,
}


def raise_for_envelope(response: Response) -> None:
    """Raise the :class:`AppError` matching a failed response."""

    if response.is_success:
        return
    kind = None
    message = None
    try:
        error = response.json().get("error") or {}
        kind = error.get("kind")
        message = error.get("message")
    except (ValueError, AttributeError):
        pass
    error_type = _ERRORS_BY_KIND.get(kind or "") or _ERRORS_BY_STATUS.get(
        response.status_code, ServerError
    )
    raise error_type(message or f"Request failed with status {response.status_code}")


@dataclass(slots=True)
class IngestClient:
    """Convenience wrapper around :class:`httpx.AsyncClient` bound to ``base_url``.

    The identity token is passed explicitly on every call.
    """

    http: AsyncClient
    base_url: str

    def _url(self, path: str) -> str:
        return f"{self.base_url.rstrip('/')}{path}"

    @staticmethod
    def _auth(identity_token: str | None) -> dict[str, str]:
        if not identity_token:
            return {}
        return {"Authorization": f"Bearer {identity_token}"}

    @property
    def credential_url(self) -> str:
        return self._url("/upload-credential")

    async def fetch_upload_credential(self, identity_token: str) -> dict[str, Any]:
        """Request a fresh upload credential."""

        response = await self.http.get(self.credential_url, headers=self._auth(identity_token))
        raise_for_envelope(response)
        return response.json()

    async def create_video(
        self,
        identity_token: str,
        *,
        title: str,
        description: str,
        video_url: str,
        thumbnail_url: str,
        transformation: Any,
    ) -> dict[str, Any]:
        """Register metadata for an uploaded video and return the stored record."""

        response = await self.http.post(
            self._url("/videos"),
            headers=self._auth(identity_token),
            json={
                "title": title,
                "description": description,
                "videoUrl": video_url,
                "thumbnailUrl": thumbnail_url,
                "transformation": transformation,
            },
        )
        raise_for_envelope(response)
        return response.json()["data"]

    async def list_videos(self, identity_token: str) -> list[dict[str, Any]]:
        """Return all videos, newest first."""

        response = await self.http.get(self._url("/videos"), headers=self._auth(identity_token))
        raise_for_envelope(response)
        return response.json()["data"]

    async def get_video(self, video_id: str) -> dict[str, Any]:
        response = await self.http.get(self._url(f"/videos/{video_id}"))
        raise_for_envelope(response)
        return response.json()["data"]


__all__ = ["IngestClient", "raise_for_envelope"]
