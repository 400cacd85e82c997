"""HTTP routes for video metadata."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse

from ..auth.auth_dependencies import require_subject, require_token_present
from ..auth.auth_service import SubjectId
from .video_schemas import VideoCreateRequest
from .video_service import VideoService

router = APIRouter(prefix="/videos", tags=["videos"])


def get_video_service(request: Request) -> VideoService:
    """Fetch video service from application state."""
    try:
        return request.app.state.video_service  # type: ignore[attr-defined]
    except AttributeError as exc:  # pragma: no cover - wiring error
        raise RuntimeError("VideoService is not configured") from exc


@router.get("")
async def list_videos(
    _token: str = Depends(require_token_present),
    service: VideoService = Depends(get_video_service),
) -> dict[str, object]:
    records = await service.list_videos()
    return {"success": True, "data": [record.to_payload() for record in records]}


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_video(
    payload: VideoCreateRequest,
    subject_id: SubjectId = Depends(require_subject),
    service: VideoService = Depends(get_video_service),
) -> JSONResponse:
    record = await service.create(subject_id, payload.to_details())
    return JSONResponse(
        status_code=status.HTTP_201_CREATED,
        content={
            "success": True,
            "message": "Video uploaded successfully",
            "data": record.to_payload(),
        },
    )


@router.get("/{video_id}")
async def get_video(
    video_id: str,
    service: VideoService = Depends(get_video_service),
) -> dict[str, object]:
    record = await service.get_video(video_id)
    return {"success": True, "message": "Video found", "data": record.to_payload()}
