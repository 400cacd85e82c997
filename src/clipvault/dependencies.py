"""Dependency wiring helpers."""

from fastapi import FastAPI

from .api.errors import install_error_handlers
from .api.health import router as health_router
from .auth.auth_service import AuthGuard
from .config import AppConfig
from .credentials.credential_api import router as credential_router
from .credentials.credential_service import UploadCredentialIssuer
from .db.db_session import ConnectionCache
from .videos.video_api import router as videos_router
from .videos.video_repository import VideoRepository
from .videos.video_service import VideoService


def include_routers(
    app: FastAPI,
    config: AppConfig,
    *,
    connections: ConnectionCache | None = None,
) -> None:
    """Mount module routers and attach services."""
    connections = connections or ConnectionCache(
        config.database_url, create_schema=config.create_schema
    )
    video_repo = VideoRepository(connections)

    app.state.config = config
    app.state.connections = connections
    app.state.auth_guard = AuthGuard(
        signing_key=config.jwt_secret, algorithm=config.jwt_algorithm
    )
    app.state.credential_issuer = UploadCredentialIssuer(
        private_key=config.imagekit_private_key,
        ttl_seconds=config.credential_ttl_seconds,
    )
    app.state.video_service = VideoService(repo=video_repo)

    install_error_handlers(app)
    app.include_router(videos_router)
    app.include_router(credential_router)
    app.include_router(health_router)
