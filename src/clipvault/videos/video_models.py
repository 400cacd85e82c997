"""Data structures for video metadata."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any

REQUIRED_FIELDS = ("title", "description", "video_url", "thumbnail_url", "transformation")


@dataclass(frozen=True, slots=True)
class VideoDetails:
    """Descriptive fields supplied by the client when registering a video.

    Every attribute is optional here so that incomplete payloads reach the
    service, which reports them uniformly as a validation failure.
    """

    title: str | None = None
    description: str | None = None
    video_url: str | None = None
    thumbnail_url: str | None = None
    transformation: Any = None

    def missing_fields(self) -> list[str]:
        missing = []
        for name in REQUIRED_FIELDS:
            value = getattr(self, name)
            if isinstance(value, str):
                value = value.strip()
            if not value:
                missing.append(name)
        return missing


@dataclass(frozen=True, slots=True)
class VideoRecord:
    """Persisted, write-once video metadata."""

    id: str
    title: str
    description: str
    video_url: str
    thumbnail_url: str
    transformation: Any
    user_id: str
    created_at: datetime

    def to_payload(self) -> dict[str, Any]:
        """Return the wire representation (camelCase keys)."""
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "videoUrl": self.video_url,
            "thumbnailUrl": self.thumbnail_url,
            "transformation": self.transformation,
            "userId": self.user_id,
            "createdAt": self.created_at.isoformat(),
        }


__all__ = ["REQUIRED_FIELDS", "VideoDetails", "VideoRecord"]
