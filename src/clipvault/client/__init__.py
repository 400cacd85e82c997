"""HTTP client for the ClipVault API."""

from .ingest_client import IngestClient, raise_for_envelope

__all__ = ["IngestClient", "raise_for_envelope"]
