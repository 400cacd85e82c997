"""FastAPI application entry point."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from .config import AppConfig, load_config
from .db.db_session import ConnectionCache
from .dependencies import include_routers
from .logging import configure_logging


@asynccontextmanager
async def _lifespan(app: FastAPI) -> AsyncIterator[None]:
    yield
    # the connection lives for the whole process and is only released here
    await app.state.connections.dispose()


def create_app(
    config: AppConfig | None = None,
    *,
    connections: ConnectionCache | None = None,
) -> FastAPI:
    """Build FastAPI instance with configured dependencies."""
    cfg = config or load_config()
    configure_logging(cfg.log_level)
    app = FastAPI(title="ClipVault", lifespan=_lifespan)
    include_routers(app, cfg, connections=connections)
    return app


app = create_app()
