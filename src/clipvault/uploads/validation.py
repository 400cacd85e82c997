"""Client-side file validation, run before any network call."""

from __future__ import annotations

import structlog

from ..exceptions import ValidationError
from .upload_models import FileSelection, MediaKind

logger = structlog.get_logger(__name__)


def validate_selection(selection: FileSelection | None, kind: MediaKind) -> FileSelection:
    """Return ``selection`` if it may be uploaded as ``kind``.

    Raises :class:`ValidationError` when nothing was selected, the MIME type
    does not belong to ``kind`` or the file exceeds the kind's ceiling.
    """

    if selection is None:
        raise ValidationError("Please select a file.")

    label = kind.value.capitalize()
    if not (selection.content_type or "").startswith(kind.mime_prefix):
        logger.warning(
            "upload.validation.unsupported_media",
            content_type=selection.content_type,
            kind=kind.value,
        )
        raise ValidationError(f"Only {kind.value} files are allowed.")

    if selection.size_bytes > kind.max_bytes:
        logger.warning(
            "upload.validation.too_large",
            size_bytes=selection.size_bytes,
            limit_bytes=kind.max_bytes,
        )
        raise ValidationError(f"{label} size must be under {kind.max_bytes // (1024 * 1024)}MB.")

    return selection


__all__ = ["validate_selection"]
