"""Data structures for client-side uploads."""

from __future__ import annotations

import asyncio
import io
import mimetypes
from dataclasses import dataclass, field
from enum import StrEnum
from pathlib import Path
from typing import BinaryIO, Callable, Union

from ..config import MAX_IMAGE_BYTES, MAX_VIDEO_BYTES


class MediaKind(StrEnum):
    """Declared kind of the selected file."""

    IMAGE = "image"
    VIDEO = "video"

    @property
    def mime_prefix(self) -> str:
        return f"{self.value}/"

    @property
    def max_bytes(self) -> int:
        return MAX_VIDEO_BYTES if self is MediaKind.VIDEO else MAX_IMAGE_BYTES

    @property
    def folder(self) -> str:
        return "/videos" if self is MediaKind.VIDEO else "/images"


class UploadState(StrEnum):
    """Lifecycle of a single orchestrated upload."""

    IDLE = "idle"
    VALIDATING = "validating"
    REQUESTING_CREDENTIAL = "requesting_credential"
    UPLOADING = "uploading"
    SUCCEEDED = "succeeded"
    ABORTED = "aborted"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in {UploadState.SUCCEEDED, UploadState.ABORTED, UploadState.FAILED}


class UploadErrorKind(StrEnum):
    """Closed set of upload failure categories."""

    VALIDATION = "validation"
    UNAUTHORIZED = "unauthorized"
    NETWORK = "network"
    SERVER = "server"
    ABORT = "abort"


FileOpener = Callable[[], BinaryIO]


@dataclass(frozen=True, slots=True)
class FileSelection:
    """A file picked for upload.

    ``open_file`` returns a fresh binary handle positioned at the start; it
    is called once per upload attempt and the caller closes the handle.
    """

    name: str
    content_type: str
    size_bytes: int
    open_file: FileOpener

    @classmethod
    def from_path(cls, path: Path, content_type: str | None = None) -> "FileSelection":
        guessed, _ = mimetypes.guess_type(path.name)
        resolved_type = content_type or guessed or "application/octet-stream"

        return cls(
            name=path.name,
            content_type=resolved_type,
            size_bytes=path.stat().st_size,
            open_file=lambda: path.open("rb"),
        )

    @classmethod
    def from_bytes(cls, name: str, data: bytes, content_type: str) -> "FileSelection":
        return cls(
            name=name,
            content_type=content_type,
            size_bytes=len(data),
            open_file=lambda: io.BytesIO(data),
        )


@dataclass(slots=True)
class CancellationHandle:
    """Caller-owned token that aborts an in-flight upload."""

    _event: asyncio.Event = field(default_factory=asyncio.Event)

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    async def wait(self) -> None:
        await self._event.wait()


@dataclass(frozen=True, slots=True)
class UploadProgress:
    """Percentage of bytes sent, in ``[0, 100]``."""

    percent: int
    sent_bytes: int
    total_bytes: int


@dataclass(frozen=True, slots=True)
class UploadSucceeded:
    """Object store locators for the uploaded file."""

    url: str
    file_id: str | None = None
    name: str | None = None
    thumbnail_url: str | None = None
    raw: dict[str, object] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class UploadAborted:
    kind: UploadErrorKind = UploadErrorKind.ABORT
    message: str = "Upload aborted."


@dataclass(frozen=True, slots=True)
class UploadFailed:
    kind: UploadErrorKind
    message: str


UploadOutcome = Union[UploadSucceeded, UploadAborted, UploadFailed]
UploadEvent = Union[UploadProgress, UploadSucceeded, UploadAborted, UploadFailed]


__all__ = [
    "CancellationHandle",
    "FileSelection",
    "MediaKind",
    "UploadAborted",
    "UploadErrorKind",
    "UploadEvent",
    "UploadFailed",
    "UploadOutcome",
    "UploadProgress",
    "UploadState",
    "UploadSucceeded",
]
