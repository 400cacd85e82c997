import pytest
from fastapi.testclient import TestClient

from src.clipvault.config import AppConfig
from src.clipvault.credentials.credential_service import sign_upload_token
from src.clipvault.main import create_app
from tests.helpers.identity import MEMORY_DSN, TEST_JWT_SECRET, TEST_PRIVATE_KEY

pytestmark = pytest.mark.integration

PAYLOAD = {
    "title": "Sunset",
    "description": "Timelapse over the bay",
    "videoUrl": "https://cdn.example/videos/sunset.mp4",
    "thumbnailUrl": "https://cdn.example/images/sunset.jpg",
    "transformation": {"height": 1920, "width": 1080, "quality": 100},
}


def build_config(**overrides) -> AppConfig:
    params = {
        "database_url": MEMORY_DSN,
        "jwt_secret": TEST_JWT_SECRET,
        "imagekit_private_key": TEST_PRIVATE_KEY,
        "imagekit_public_key": "public_test_key",
    }
    params.update(overrides)
    return AppConfig(**params)


@pytest.fixture
def client():
    with TestClient(create_app(build_config())) as test_client:
        yield test_client


def bearer(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


def test_publish_browse_and_fetch(client: TestClient, token_for) -> None:
    token = token_for("user-1")

    empty = client.get("/videos", headers=bearer(token))
    assert empty.status_code == 404

    credential = client.get("/upload-credential", headers=bearer(token)).json()
    assert credential["signature"] == sign_upload_token(
        TEST_PRIVATE_KEY, credential["token"], credential["expire"]
    )

    created_ids = []
    for title in ("first", "second"):
        response = client.post("/videos", json={**PAYLOAD, "title": title}, headers=bearer(token))
        assert response.status_code == 201
        created_ids.append(response.json()["data"]["id"])

    listing = client.get("/videos", headers=bearer(token))
    assert listing.status_code == 200
    data = listing.json()["data"]
    assert [item["id"] for item in data] == list(reversed(created_ids))
    assert all(item["userId"] == "user-1" for item in data)

    fetched = client.get(f"/videos/{created_ids[0]}")
    assert fetched.status_code == 200
    assert fetched.json()["data"] == data[1]


def test_healthz_reports_ready_store(client: TestClient) -> None:
    response = client.get("/healthz")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_missing_database_url_surfaces_connection_error(token_for) -> None:
    with TestClient(create_app(build_config(database_url=None))) as client:
        listing = client.get("/videos", headers=bearer(token_for()))
        health = client.get("/healthz")

    assert listing.status_code == 500
    assert listing.json()["error"]["kind"] == "connection_error"
    assert health.status_code == 503
    assert health.json()["kind"] == "connection_error"
