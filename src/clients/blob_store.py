"""Blob storage for uploaded product images."""

import logging
import uuid
from pathlib import Path
from typing import Optional, Protocol, runtime_checkable

logger = logging.getLogger(__name__)

_EXTENSIONS = {
    "image/jpeg": "jpg",
    "image/png": "png",
    "image/gif": "gif",
    "image/svg+xml": "svg",
}


class BlobStoreError(Exception):
    """Raised when the blob store cannot read or write a blob."""

    pass


class BlobNotFoundError(BlobStoreError):
    """Raised when a blob key does not resolve to a stored blob."""

    pass


@runtime_checkable
class BlobStore(Protocol):
    """Blob storage protocol.

    Blobs are addressed by the key returned from ``put``. The key already
    carries the area name, so reads and deletes need only the key.
    """

    def put(self, area: str, data: bytes, media_type: Optional[str] = None) -> str:
        """Store bytes under a fresh key inside ``area`` and return the key."""
        ...

    def get(self, key: str) -> bytes:
        """Return the bytes stored under ``key``."""
        ...

    def exists(self, key: str) -> bool:
        """Check whether a blob is stored under ``key``."""
        ...

    def delete(self, key: str) -> bool:
        """Delete a blob. Return ``True`` when deleted, ``False`` when absent."""
        ...

    def public_path(self, key: str) -> str:
        """Return the public path a stored blob is served under."""
        ...


class LocalBlobStore:
    """File-system-based blob store.

    Each area is a sub-directory of the root; blobs are stored as
    ``<area>/<random hex>.<ext>`` and that relative path is the key.
    """

    def __init__(self, root: str | Path, public_prefix: str = "storage") -> None:
        """Initialize with a root directory, creating it if needed."""
        self._root = Path(root)
        self._root.mkdir(parents=True, exist_ok=True)
        self._public_prefix = public_prefix.strip("/")

    @property
    def root(self) -> Path:
        """Return the root directory path."""
        return self._root

    def _resolve(self, key: str) -> Optional[Path]:
        """Resolve a key to a path and ensure it stays under the store root."""
        root = self._root.resolve()
        candidate = (self._root / key).resolve()
        try:
            candidate.relative_to(root)
        except ValueError:
            return None
        if candidate == root:
            return None
        return candidate

    def put(self, area: str, data: bytes, media_type: Optional[str] = None) -> str:
        extension = _EXTENSIONS.get(media_type or "", "bin")
        key = f"{area.strip('/')}/{uuid.uuid4().hex}.{extension}"
        path = self._resolve(key)
        if path is None:
            raise BlobStoreError(f"Invalid storage area: {area!r}")

        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(data)
        except OSError as e:
            raise BlobStoreError(f"Failed to write blob {key}: {e}") from e

        logger.debug(f"Stored blob {key} ({len(data)} bytes)")
        return key

    def get(self, key: str) -> bytes:
        path = self._resolve(key)
        if path is None or not path.is_file():
            raise BlobNotFoundError(f"Blob not found: {key}")
        try:
            return path.read_bytes()
        except OSError as e:
            raise BlobStoreError(f"Failed to read blob {key}: {e}") from e

    def exists(self, key: str) -> bool:
        path = self._resolve(key)
        return path is not None and path.is_file()

    def delete(self, key: str) -> bool:
        path = self._resolve(key)
        if path is None or not path.is_file():
            return False
        try:
            path.unlink()
        except FileNotFoundError:
            return False
        except OSError as e:
            raise BlobStoreError(f"Failed to delete blob {key}: {e}") from e

        logger.debug(f"Deleted blob {key}")
        return True

    def public_path(self, key: str) -> str:
        return f"/{self._public_prefix}/{key}"
