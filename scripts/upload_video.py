"""Upload a video and its thumbnail, then register the metadata."""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable

import httpx

from src.clipvault.client.ingest_client import IngestClient
from src.clipvault.config import load_config
from src.clipvault.exceptions import AppError, ServerError, Unauthorized, ValidationError
from src.clipvault.logging import configure_logging
from src.clipvault.uploads import (
    FileSelection,
    MediaKind,
    UploadErrorKind,
    UploadFailed,
    UploadOrchestrator,
    UploadProgress,
    UploadSucceeded,
)

_ERRORS_BY_UPLOAD_KIND: dict[UploadErrorKind, type[AppError]] = {
    UploadErrorKind.VALIDATION: ValidationError,
    UploadErrorKind.UNAUTHORIZED: Unauthorized,
}


@dataclass(slots=True)
class PublishRequest:
    video: FileSelection
    thumbnail: FileSelection
    title: str
    description: str
    transformation: Any


async def _upload_one(
    orchestrator: UploadOrchestrator,
    selection: FileSelection,
    kind: MediaKind,
    identity_token: str,
    on_progress: Callable[[MediaKind, int], None] | None,
) -> UploadSucceeded:
    outcome = None
    async for event in orchestrator.upload(selection, kind, identity_token=identity_token):
        if isinstance(event, UploadProgress):
            if on_progress is not None:
                on_progress(kind, event.percent)
            continue
        outcome = event
    if isinstance(outcome, UploadSucceeded):
        return outcome
    message = outcome.message if outcome is not None else "Upload produced no outcome."
    if isinstance(outcome, UploadFailed):
        raise _ERRORS_BY_UPLOAD_KIND.get(outcome.kind, ServerError)(message)
    raise ServerError(message)


async def publish_video(
    http: httpx.AsyncClient,
    *,
    base_url: str,
    upload_url: str,
    public_key: str,
    identity_token: str,
    request: PublishRequest,
    on_progress: Callable[[MediaKind, int], None] | None = None,
) -> dict[str, Any]:
    """Upload both files and create the record; returns the stored record."""
    client = IngestClient(http=http, base_url=base_url)
    orchestrator = UploadOrchestrator(
        http=http,
        credential_url=client.credential_url,
        upload_url=upload_url,
        public_key=public_key,
    )
    video = await _upload_one(orchestrator, request.video, MediaKind.VIDEO, identity_token, on_progress)
    thumbnail = await _upload_one(
        orchestrator, request.thumbnail, MediaKind.IMAGE, identity_token, on_progress
    )
    return await client.create_video(
        identity_token,
        title=request.title,
        description=request.description,
        video_url=video.url,
        thumbnail_url=thumbnail.url,
        transformation=request.transformation,
    )


def parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Upload a video to the object store and register it.")
    parser.add_argument("video", type=Path, help="Video file to upload.")
    parser.add_argument("--thumbnail", type=Path, required=True, help="Thumbnail image.")
    parser.add_argument("--title", required=True)
    parser.add_argument("--description", required=True)
    parser.add_argument(
        "--transformation",
        default='{"height": 1920, "width": 1080, "quality": 100}',
        help="JSON transformation descriptor.",
    )
    parser.add_argument("--token", required=True, help="Identity token of the uploading user.")
    return parser.parse_args(argv)


async def _main(args: argparse.Namespace) -> dict[str, Any]:
    config = load_config()

    def _report(kind: MediaKind, percent: int) -> None:
        print(f"\r{kind.value}: {percent:3d}%", end="", file=sys.stderr, flush=True)

    request = PublishRequest(
        video=FileSelection.from_path(args.video),
        thumbnail=FileSelection.from_path(args.thumbnail),
        title=args.title,
        description=args.description,
        transformation=json.loads(args.transformation),
    )
    async with httpx.AsyncClient(timeout=httpx.Timeout(30.0, write=None)) as http:
        return await publish_video(
            http,
            base_url=config.base_url,
            upload_url=config.imagekit_upload_url,
            public_key=config.imagekit_public_key,
            identity_token=args.token,
            request=request,
            on_progress=_report,
        )


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv if argv is not None else sys.argv[1:])
    configure_logging("WARNING")
    try:
        record = asyncio.run(_main(args))
    except AppError as exc:
        print(f"\nupload failed ({exc.kind}): {exc.message}", file=sys.stderr)
        return 2
    except json.JSONDecodeError as exc:
        print(f"invalid --transformation: {exc}", file=sys.stderr)
        return 2

    print(f"\nvideo registered, id={record['id']}", file=sys.stdout)
    return 0


if __name__ == "__main__":
    sys.exit(main())
