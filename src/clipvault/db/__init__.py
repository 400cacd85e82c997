"""Persistence primitives for video metadata."""

from .db_models import Base, VideoModel
from .db_session import Connection, ConnectionCache, open_connection

__all__ = [
    "Base",
    "Connection",
    "ConnectionCache",
    "VideoModel",
    "open_connection",
]
