"""Ingestion service: validated creation and retrieval of video records."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable

import structlog

from ..exceptions import NotFound, ValidationError
from .video_models import VideoDetails, VideoRecord
from .video_repository import VideoRepository

logger = structlog.get_logger(__name__)


def _default_clock() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(slots=True)
class VideoService:
    """Turn verified upload results into records and serve them back out.

    Callers are expected to have run the strict auth check before
    :meth:`create`; the subject id it produced is stored as the owner.
    """

    repo: VideoRepository
    clock: Callable[[], datetime] = field(default=_default_clock)

    async def create(self, subject_id: str, details: VideoDetails) -> VideoRecord:
        missing = details.missing_fields()
        if missing:
            logger.warning("videos.create.incomplete", subject_id=subject_id, missing=missing)
            raise ValidationError("Incomplete video details")

        record = await self.repo.create(
            title=str(details.title),
            description=str(details.description),
            video_url=str(details.video_url),
            thumbnail_url=str(details.thumbnail_url),
            transformation=details.transformation,
            user_id=subject_id,
            created_at=self.clock(),
        )
        logger.info("videos.create.success", video_id=record.id, subject_id=subject_id)
        return record

    async def list_videos(self) -> list[VideoRecord]:
        records = await self.repo.list_newest_first()
        if not records:
            raise NotFound("Videos not found")
        return records

    async def get_video(self, video_id: str) -> VideoRecord:
        if not video_id or not video_id.strip():
            raise ValidationError("Video ID is required")
        record = await self.repo.get(video_id)
        if record is None:
            raise NotFound("Video not found")
        return record


__all__ = ["VideoService"]
