"""Serves stored product images under their public path."""

import mimetypes

from fastapi import APIRouter, Depends, HTTPException, Response, status

from src.api.dependencies import get_blob_store
from src.clients import BlobNotFoundError, BlobStore

SVG_CONTENT_SECURITY_POLICY = "default-src 'none'; style-src 'unsafe-inline'; sandbox"


def create_storage_router(public_prefix: str = "storage") -> APIRouter:
    """Create the router serving blobs at ``/<public_prefix>/<key>``."""
    router = APIRouter(prefix=f"/{public_prefix.strip('/')}", tags=["storage"])

    @router.get("/{key:path}")
    def get_blob(key: str, blob_store: BlobStore = Depends(get_blob_store)) -> Response:
        try:
            data = blob_store.get(key)
        except BlobNotFoundError as e:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Not found") from e

        media_type, _ = mimetypes.guess_type(key)
        headers = {"X-Content-Type-Options": "nosniff"}
        if media_type == "image/svg+xml":
            # Scripts inside an uploaded SVG must not run on this origin
            headers["Content-Security-Policy"] = SVG_CONTENT_SECURITY_POLICY
        return Response(
            content=data,
            media_type=media_type or "application/octet-stream",
            headers=headers,
        )

    return router
