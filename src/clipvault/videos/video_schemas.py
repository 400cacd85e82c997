"""Request schemas for the videos API."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from .video_models import VideoDetails


class VideoCreateRequest(BaseModel):
    """Body of ``POST /videos``.

    Fields are optional at the schema level; completeness is enforced by the
    service so that every gap yields the same validation error.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    title: str | None = None
    description: str | None = None
    video_url: str | None = Field(default=None, alias="videoUrl")
    thumbnail_url: str | None = Field(default=None, alias="thumbnailUrl")
    transformation: Any = None

    def to_details(self) -> VideoDetails:
        return VideoDetails(
            title=self.title,
            description=self.description,
            video_url=self.video_url,
            thumbnail_url=self.thumbnail_url,
            transformation=self.transformation,
        )
