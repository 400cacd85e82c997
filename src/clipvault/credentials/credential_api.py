"""Upload-credential endpoint."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request

from ..auth.auth_dependencies import require_subject
from ..auth.auth_service import SubjectId
from .credential_service import UploadCredentialIssuer

router = APIRouter(tags=["uploads"])


def get_credential_issuer(request: Request) -> UploadCredentialIssuer:
    """Fetch the credential issuer from application state."""
    try:
        return request.app.state.credential_issuer  # type: ignore[attr-defined]
    except AttributeError as exc:  # pragma: no cover - wiring error
        raise RuntimeError("UploadCredentialIssuer is not configured") from exc


@router.get("/upload-credential")
def issue_upload_credential(
    subject_id: SubjectId = Depends(require_subject),
    issuer: UploadCredentialIssuer = Depends(get_credential_issuer),
) -> dict[str, object]:
    return issuer.issue(subject_id).as_dict()
