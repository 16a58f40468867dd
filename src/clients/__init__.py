"""Client modules for storage backends."""

from src.clients.sqlite_client import SqliteClient
from src.clients.blob_store import (
    BlobNotFoundError,
    BlobStore,
    BlobStoreError,
    LocalBlobStore,
)

__all__ = [
    "SqliteClient",
    "BlobNotFoundError",
    "BlobStore",
    "BlobStoreError",
    "LocalBlobStore",
]
