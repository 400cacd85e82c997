"""Persistence layer for video records."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

from sqlalchemy import select

from ..db.db_models import VideoModel
from ..db.db_session import ConnectionCache
from ..exceptions import handle_sqlalchemy_errors
from .video_models import VideoRecord


class VideoRepository:
    """Typed repository over the ``videos`` table."""

    def __init__(self, connections: ConnectionCache) -> None:
        self._connections = connections

    async def create(
        self,
        *,
        title: str,
        description: str,
        video_url: str,
        thumbnail_url: str,
        transformation: object,
        user_id: str,
        created_at: datetime,
    ) -> VideoRecord:
        model = VideoModel(
            id=uuid.uuid4().hex,
            title=title,
            description=description,
            video_url=video_url,
            thumbnail_url=thumbnail_url,
            transformation=transformation,
            user_id=user_id,
            created_at=created_at,
        )
        async with handle_sqlalchemy_errors(entity="video"):
            async with self._connections.session() as session:
                async with session.begin():
                    session.add(model)
        return self._to_domain(model)

    async def list_newest_first(self) -> list[VideoRecord]:
        async with handle_sqlalchemy_errors(entity="video"):
            async with self._connections.session() as session:
                result = await session.execute(
                    select(VideoModel).order_by(VideoModel.created_at.desc())
                )
                return [self._to_domain(row) for row in result.scalars().all()]

    async def get(self, video_id: str) -> VideoRecord | None:
        async with handle_sqlalchemy_errors(entity="video"):
            async with self._connections.session() as session:
                model = await session.get(VideoModel, video_id)
                if model is None:
                    return None
                return self._to_domain(model)

    @staticmethod
    def _to_domain(model: VideoModel) -> VideoRecord:
        created_at = model.created_at
        if created_at.tzinfo is None:
            # SQLite drops the offset; values are always written in UTC
            created_at = created_at.replace(tzinfo=timezone.utc)
        return VideoRecord(
            id=model.id,
            title=model.title,
            description=model.description,
            video_url=model.video_url,
            thumbnail_url=model.thumbnail_url,
            transformation=model.transformation,
            user_id=model.user_id,
            created_at=created_at,
        )


__all__ = ["VideoRepository"]
