"""Shared fixtures and sample uploads."""

import os
import tempfile

import pytest

from src.clients import LocalBlobStore, SqliteClient
from src.config import (
    AppConfig,
    DatabaseConfig,
    LoggingConfig,
    ProductPolicyConfig,
    SessionConfig,
    StorageConfig,
    UploadConfig,
)
from src.models import ImageUpload

JPEG_BYTES = b"\xff\xd8\xff\xe0\x00\x10JFIF\x00\x01\x01\x00" + b"\x00" * 64 + b"\xff\xd9"
PNG_BYTES = b"\x89PNG\r\n\x1a\n\x00\x00\x00\rIHDR" + b"\x00" * 64
GIF_BYTES = b"GIF89a\x01\x00\x01\x00\x80\x00\x00" + b"\x00" * 32
SVG_BYTES = b'<?xml version="1.0"?><svg xmlns="http://www.w3.org/2000/svg" width="1" height="1"></svg>'
TEXT_BYTES = b"This is not an image, just some notes about a chair."


def jpeg_upload(filename: str = "chair.jpg") -> ImageUpload:
    return ImageUpload(filename=filename, content_type="image/jpeg", data=JPEG_BYTES)


def png_upload(filename: str = "chair.png") -> ImageUpload:
    return ImageUpload(filename=filename, content_type="image/png", data=PNG_BYTES)


@pytest.fixture
def temp_db_path():
    """Create a temporary database file for testing."""
    fd, path = tempfile.mkstemp(suffix=".db")
    os.close(fd)
    yield path
    # Cleanup
    if os.path.exists(path):
        os.remove(path)


@pytest.fixture
def sqlite_client(temp_db_path):
    client = SqliteClient(temp_db_path)
    yield client
    client.close()


@pytest.fixture
def blob_store(tmp_path):
    return LocalBlobStore(tmp_path / "public")


@pytest.fixture
def app_config(tmp_path, temp_db_path):
    """Build an application config pointing at temporary storage."""

    def build(update_requires_image: bool = True, delete_replaced_image: bool = True) -> AppConfig:
        return AppConfig(
            database=DatabaseConfig(path=temp_db_path),
            storage=StorageConfig(
                root=str(tmp_path / "storage"),
                area="product_images",
                public_prefix="storage",
            ),
            uploads=UploadConfig(
                max_image_kb=2048,
                allowed_image_types=("jpeg", "png", "jpg", "gif", "svg"),
            ),
            products=ProductPolicyConfig(
                update_requires_image=update_requires_image,
                delete_replaced_image=delete_replaced_image,
            ),
            session=SessionConfig(secret_key="test-secret", cookie_name="test_session"),
            logging=LoggingConfig(level="DEBUG"),
        )

    return build
