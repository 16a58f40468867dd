"""Product listing models."""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class Product:
    """A product listing as stored in the products table."""

    id: int
    title: str
    description: str
    price: float
    image: str  # Blob store key of the listing image
    owner_id: int  # Set from the session at creation, never changed
    created_at: datetime
    updated_at: datetime


@dataclass(frozen=True)
class ImageUpload:
    """An uploaded image file as received from the client."""

    filename: str
    content_type: Optional[str]
    data: bytes

    @property
    def size(self) -> int:
        return len(self.data)


@dataclass(frozen=True)
class ProductFields:
    """Validated, normalized product input.

    ``image_type`` is the MIME type detected from the upload content and is
    only set when ``image`` is.
    """

    title: str
    description: str
    price: float
    image: Optional[ImageUpload] = None
    image_type: Optional[str] = None


@dataclass(frozen=True)
class ProductDeletion:
    """Outcome of deleting a product."""

    product: Product
    image_deleted: bool  # False when the image blob could not be removed
