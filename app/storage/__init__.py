"""Blob storage for raw uploaded files"""

from app.storage.blob_store import LocalBlobStore, build_blob_key

__all__ = ["LocalBlobStore", "build_blob_key"]
