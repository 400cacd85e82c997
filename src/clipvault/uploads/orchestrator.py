"""Client-side upload orchestration.

One :class:`UploadOrchestrator` drives a single upload at a time through
``IDLE -> VALIDATING -> REQUESTING_CREDENTIAL -> UPLOADING`` and ends in
``SUCCEEDED``, ``ABORTED`` or ``FAILED``. Progress and the terminal outcome
are delivered as one finite async stream of events.
"""

from __future__ import annotations

import asyncio
import contextlib
from dataclasses import dataclass, field
from typing import Any, AsyncIterator, BinaryIO, Callable

import httpx
import structlog

from ..exceptions import UploadInProgressError, ValidationError
from .upload_models import (
    CancellationHandle,
    FileSelection,
    MediaKind,
    UploadAborted,
    UploadErrorKind,
    UploadEvent,
    UploadFailed,
    UploadOutcome,
    UploadProgress,
    UploadState,
    UploadSucceeded,
)
from .validation import validate_selection

logger = structlog.get_logger(__name__)

# Object-store statuses that mean the request itself was rejected.
INVALID_REQUEST_STATUSES = frozenset({400, 401, 403, 404, 409, 413, 415, 422})

_MESSAGES = {
    UploadErrorKind.VALIDATION: "Invalid upload request.",
    UploadErrorKind.SERVER: "Server error. Try again later.",
    UploadErrorKind.NETWORK: "Network error during upload.",
    UploadErrorKind.UNAUTHORIZED: "Not authorised to upload.",
}


def classify_upload_status(status_code: int) -> UploadErrorKind:
    """Collapse an object-store failure status into an error kind."""

    if status_code in INVALID_REQUEST_STATUSES:
        return UploadErrorKind.VALIDATION
    return UploadErrorKind.SERVER


def _percent(sent: int, total: int) -> int:
    if total <= 0:
        return 100
    return max(0, min(100, round(sent * 100 / total)))


async def _cancel_and_wait(*tasks: asyncio.Future[Any]) -> None:
    for task in tasks:
        if not task.done():
            task.cancel()
    for task in tasks:
        with contextlib.suppress(asyncio.CancelledError, Exception):
            await task


class CountingReader:
    """Binary file wrapper reporting the read position after every ``read``.

    httpx pulls multipart file fields through ``read`` in fixed-size chunks
    and sizes them with ``tell``/``seek``, so the position after each read is
    the number of file bytes handed to the request body so far.
    """

    def __init__(self, handle: BinaryIO, on_read: Callable[[int], None]) -> None:
        self._handle = handle
        self._on_read = on_read

    def read(self, size: int = -1) -> bytes:
        chunk = self._handle.read(size)
        self._on_read(self._handle.tell())
        return chunk

    def tell(self) -> int:
        return self._handle.tell()

    def seek(self, offset: int, whence: int = 0) -> int:
        return self._handle.seek(offset, whence)


@dataclass(slots=True)
class UploadOrchestrator:
    """Validate, obtain a credential and stream a file to the object store."""

    http: httpx.AsyncClient
    credential_url: str
    upload_url: str
    public_key: str
    state: UploadState = field(default=UploadState.IDLE)
    _active: object | None = field(default=None, init=False, repr=False)

    @property
    def in_flight(self) -> bool:
        """True while an upload stream is being consumed."""
        return self._active is not None

    def reset(self) -> None:
        """Re-arm the orchestrator for the next selection."""
        if self.in_flight:
            raise UploadInProgressError()
        self.state = UploadState.IDLE

    def upload(
        self,
        selection: FileSelection | None,
        kind: MediaKind,
        *,
        identity_token: str,
        cancellation: CancellationHandle | None = None,
    ) -> AsyncIterator[UploadEvent]:
        """Start an upload and return its event stream.

        Validation runs synchronously here, before any network call. The
        returned stream yields :class:`UploadProgress` events followed by
        exactly one terminal outcome. Starting a stream while another one is
        being consumed raises :class:`UploadInProgressError`; a stream that is
        dropped without being iterated leaves the orchestrator reusable.
        """
        if self.in_flight:
            logger.warning("upload.rejected.in_flight", state=self.state.value)
            raise UploadInProgressError()

        self.state = UploadState.VALIDATING
        try:
            validated = validate_selection(selection, kind)
        except ValidationError as exc:
            self.state = UploadState.FAILED
            return self._single(UploadFailed(UploadErrorKind.VALIDATION, exc.message))

        return self._run(validated, kind, identity_token, cancellation or CancellationHandle())

    async def _single(self, outcome: UploadOutcome) -> AsyncIterator[UploadEvent]:
        yield outcome

    async def _run(
        self,
        selection: FileSelection,
        kind: MediaKind,
        identity_token: str,
        cancellation: CancellationHandle,
    ) -> AsyncIterator[UploadEvent]:
        if self.in_flight:
            logger.warning("upload.rejected.in_flight", state=self.state.value)
            raise UploadInProgressError()
        run = self._active = object()
        finished = False
        try:
            if cancellation.cancelled:
                finished = True
                self._release(run)
                yield self._abort()
                return

            self.state = UploadState.REQUESTING_CREDENTIAL
            credential_task = asyncio.ensure_future(self._request_credential(identity_token))
            cancel_task = asyncio.ensure_future(cancellation.wait())
            try:
                await asyncio.wait(
                    {credential_task, cancel_task},
                    return_when=asyncio.FIRST_COMPLETED,
                )
            finally:
                await _cancel_and_wait(credential_task, cancel_task)

            if cancellation.cancelled:
                finished = True
                self._release(run)
                yield self._abort()
                return
            credential = credential_task.result()
            if isinstance(credential, UploadFailed):
                self.state = UploadState.FAILED
                finished = True
                self._release(run)
                yield credential
                return

            self.state = UploadState.UPLOADING
            events = self._stream(selection, kind, credential, cancellation)
            async with contextlib.aclosing(events):
                async for event in events:
                    if not isinstance(event, UploadProgress):
                        finished = True
                        self._release(run)
                    yield event
        finally:
            self._release(run)
            if not finished:
                # consumer stopped iterating before the outcome
                self.state = UploadState.ABORTED

    def _release(self, run: object) -> None:
        # a newer run may already own the orchestrator
        if self._active is run:
            self._active = None

    def _abort(self) -> UploadAborted:
        self.state = UploadState.ABORTED
        logger.info("upload.aborted")
        return UploadAborted()

    async def _request_credential(self, identity_token: str) -> dict[str, Any] | UploadFailed:
        try:
            response = await self.http.get(
                self.credential_url,
                headers={"Authorization": f"Bearer {identity_token}"},
            )
        except httpx.TransportError as exc:
            logger.error("upload.credential.network_error", error=str(exc))
            return UploadFailed(UploadErrorKind.NETWORK, "Could not reach the credential service.")

        if response.status_code in (401, 403):
            logger.warning("upload.credential.unauthorized", status=response.status_code)
            return UploadFailed(UploadErrorKind.UNAUTHORIZED, _MESSAGES[UploadErrorKind.UNAUTHORIZED])
        if not response.is_success:
            logger.error("upload.credential.failed", status=response.status_code)
            return UploadFailed(UploadErrorKind.SERVER, "Failed to obtain an upload credential.")

        try:
            payload = response.json()
            credential = {key: payload[key] for key in ("token", "signature", "expire")}
        except (ValueError, KeyError, TypeError):
            logger.error("upload.credential.malformed")
            return UploadFailed(UploadErrorKind.SERVER, "Malformed upload credential.")
        return credential

    async def _stream(
        self,
        selection: FileSelection,
        kind: MediaKind,
        credential: dict[str, Any],
        cancellation: CancellationHandle,
    ) -> AsyncIterator[UploadEvent]:
        total = selection.size_bytes
        progress: asyncio.Queue[int] = asyncio.Queue()
        handle = selection.open_file()
        request_task = asyncio.ensure_future(
            self.http.post(
                self.upload_url,
                data={
                    "fileName": selection.name,
                    "publicKey": self.public_key,
                    "signature": str(credential["signature"]),
                    "expire": str(credential["expire"]),
                    "token": str(credential["token"]),
                    "folder": kind.folder,
                },
                files={
                    "file": (
                        selection.name,
                        CountingReader(handle, progress.put_nowait),
                        selection.content_type,
                    )
                },
            )
        )
        cancel_task = asyncio.ensure_future(cancellation.wait())
        last_percent = -1
        carried: list[int] = []
        logger.info("upload.start", name=selection.name, size_bytes=total, kind=kind.value)

        try:
            while True:
                if cancellation.cancelled:
                    yield self._abort()
                    return

                backlog, carried = carried, []
                while not progress.empty():
                    backlog.append(progress.get_nowait())
                for sent in backlog:
                    percent = _percent(sent, total)
                    if percent > last_percent:
                        last_percent = percent
                        yield UploadProgress(percent=percent, sent_bytes=sent, total_bytes=total)
                        if cancellation.cancelled:
                            yield self._abort()
                            return

                if request_task.done():
                    break

                getter = asyncio.ensure_future(progress.get())
                await asyncio.wait(
                    {getter, request_task, cancel_task},
                    return_when=asyncio.FIRST_COMPLETED,
                )
                getter.cancel()
                with contextlib.suppress(asyncio.CancelledError):
                    await getter
                if not getter.cancelled():
                    carried.append(getter.result())
        finally:
            await _cancel_and_wait(request_task, cancel_task)
            handle.close()

        yield self._finish(request_task)

    def _finish(self, request_task: asyncio.Future[httpx.Response]) -> UploadOutcome:
        exc = request_task.exception()
        if isinstance(exc, httpx.TransportError):
            self.state = UploadState.FAILED
            logger.error("upload.network_error", error=str(exc))
            return UploadFailed(UploadErrorKind.NETWORK, _MESSAGES[UploadErrorKind.NETWORK])
        if exc is not None:
            self.state = UploadState.FAILED
            logger.error("upload.unexpected_error", error=repr(exc))
            return UploadFailed(UploadErrorKind.SERVER, "Something went wrong.")

        response = request_task.result()
        if not response.is_success:
            kind = classify_upload_status(response.status_code)
            self.state = UploadState.FAILED
            logger.warning("upload.rejected", status=response.status_code, kind=kind.value)
            return UploadFailed(kind, _MESSAGES[kind])

        try:
            payload = response.json()
        except ValueError:
            payload = {}
        url = payload.get("url") if isinstance(payload, dict) else None
        if not url:
            self.state = UploadState.FAILED
            logger.error("upload.malformed_response", status=response.status_code)
            return UploadFailed(UploadErrorKind.SERVER, _MESSAGES[UploadErrorKind.SERVER])

        self.state = UploadState.SUCCEEDED
        logger.info("upload.succeeded", file_id=payload.get("fileId"))
        return UploadSucceeded(
            url=url,
            file_id=payload.get("fileId"),
            name=payload.get("name"),
            thumbnail_url=payload.get("thumbnailUrl"),
            raw=payload,
        )


__all__ = ["CountingReader", "UploadOrchestrator", "classify_upload_status"]
