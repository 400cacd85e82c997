"""ClipVault: video metadata service with direct-to-object-store uploads.

The server side lives in :mod:`src.clipvault.main`; the async upload client
in :mod:`src.clipvault.uploads` and :mod:`src.clipvault.client`.
"""
