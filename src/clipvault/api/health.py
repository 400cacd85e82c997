"""Readiness probe backed by the shared connection."""

from __future__ import annotations

import structlog
from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse

from ..exceptions import AppError

router = APIRouter(tags=["health"])
logger = structlog.get_logger(__name__)


@router.get("/healthz")
async def healthz(request: Request) -> JSONResponse:
    connections = request.app.state.connections
    try:
        await connections.ping()
    except AppError as exc:
        logger.warning("health.degraded", kind=exc.kind, message=exc.message)
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "unavailable", "kind": exc.kind},
        )
    return JSONResponse(status_code=status.HTTP_200_OK, content={"status": "ok"})
