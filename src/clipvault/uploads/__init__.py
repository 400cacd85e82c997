"""Client-side upload orchestration."""

from .orchestrator import UploadOrchestrator, classify_upload_status
from .upload_models import (
    CancellationHandle,
    FileSelection,
    MediaKind,
    UploadAborted,
    UploadErrorKind,
    UploadFailed,
    UploadProgress,
    UploadState,
    UploadSucceeded,
)
from .validation import validate_selection

__all__ = [
    "CancellationHandle",
    "FileSelection",
    "MediaKind",
    "UploadAborted",
    "UploadErrorKind",
    "UploadFailed",
    "UploadOrchestrator",
    "UploadProgress",
    "UploadState",
    "UploadSucceeded",
    "classify_upload_status",
    "validate_selection",
]
