from datetime import timedelta

from fastapi import FastAPI
from fastapi.testclient import TestClient

from src.clipvault.api.errors import install_error_handlers
from src.clipvault.auth.auth_service import AuthGuard
from src.clipvault.credentials.credential_api import router
from src.clipvault.credentials.credential_service import (
    UploadCredentialIssuer,
    sign_upload_token,
)
from tests.helpers.identity import TEST_PRIVATE_KEY


def build_client(guard: AuthGuard) -> TestClient:
    app = FastAPI()
    install_error_handlers(app)
    app.include_router(router)
    app.state.auth_guard = guard
    app.state.credential_issuer = UploadCredentialIssuer(private_key=TEST_PRIVATE_KEY)
    return TestClient(app)


def test_credential_is_issued_for_authenticated_caller(guard, token_for) -> None:
    client = build_client(guard)

    response = client.get(
        "/upload-credential", headers={"Authorization": f"Bearer {token_for('user-1')}"}
    )

    assert response.status_code == 200
    body = response.json()
    assert set(body) == {"token", "signature", "expire"}
    assert body["signature"] == sign_upload_token(TEST_PRIVATE_KEY, body["token"], body["expire"])


def test_credential_accepts_token_cookie(guard, token_for) -> None:
    client = build_client(guard)
    response = client.get("/upload-credential", headers={"Cookie": f"token={token_for('user-1')}"})

    assert response.status_code == 200


def test_credential_requires_a_token(guard) -> None:
    client = build_client(guard)

    response = client.get("/upload-credential")

    assert response.status_code == 401
    assert response.json() == {
        "success": False,
        "error": {"kind": "unauthorized", "message": "Unauthorized"},
    }


def test_credential_rejects_expired_token(guard, token_for) -> None:
    client = build_client(guard)
    expired = token_for("user-1", timedelta(seconds=-30))

    response = client.get("/upload-credential", headers={"Authorization": f"Bearer {expired}"})

    assert response.status_code == 401
    assert response.json()["error"]["kind"] == "unauthorized"
