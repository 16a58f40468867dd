"""Product listing service.

Orchestrates the product lifecycle around the repository and blob store:
- Only the owner of a product may edit, update or delete it
- Images are written to the blob store before the row that references them
- Replaced and deleted images are removed from the blob store
"""

import logging
import sqlite3
from typing import Optional

from ..clients import BlobStore, BlobStoreError
from ..models import Product, ProductDeletion, ProductFields
from .product_repository import ProductRepository

logger = logging.getLogger(__name__)

DEFAULT_IMAGE_AREA = "product_images"

_PERMISSION_MESSAGES = {
    "edit": "No tienes permiso para editar este anuncio",
    "delete": "No tienes permiso para eliminar este anuncio",
}


class ProductNotFoundError(Exception):
    """Raised when a product ID does not exist."""

    def __init__(self, product_id: int):
        self.product_id = product_id
        super().__init__(f"Product {product_id} not found")


class ProductAuthorizationError(Exception):
    """Raised when a caller tries to modify a product they do not own."""

    def __init__(self, product_id: int, caller_id: int, action: str):
        self.product_id = product_id
        self.caller_id = caller_id
        self.action = action
        super().__init__(_PERMISSION_MESSAGES[action])


class ProductStorageError(Exception):
    """Raised when the row store or blob store fails during an operation."""

    pass


def is_owner(product: Product, user_id: Optional[int]) -> bool:
    """Return whether ``user_id`` owns ``product``."""
    return user_id is not None and product.owner_id == user_id


class ProductService:
    """Service for creating, reading, updating and deleting product listings."""

    def __init__(
        self,
        repository: ProductRepository,
        blob_store: BlobStore,
        image_area: str = DEFAULT_IMAGE_AREA,
        update_requires_image: bool = True,
        delete_replaced_image: bool = True,
    ):
        """Initialize the product service.

        Args:
            repository: Row storage for products.
            blob_store: Storage for product images.
            image_area: Blob store area images are written to.
            update_requires_image: Whether every update must supply a new image.
            delete_replaced_image: Whether an update that stores a new image
                removes the previous one.
        """
        self._repository = repository
        self._blob_store = blob_store
        self._image_area = image_area
        self.update_requires_image = update_requires_image
        self.delete_replaced_image = delete_replaced_image

    # --- Queries ---

    def view(self, product_id: int) -> Product:
        """Get any product by ID, regardless of owner.

        Raises:
            ProductNotFoundError: If the product does not exist.
        """
        product = self._repository.find_by_id(product_id)
        if product is None:
            raise ProductNotFoundError(product_id)
        return product

    def list_mine(self, owner_id: int) -> list[Product]:
        """List the products owned by ``owner_id``."""
        return self._repository.list_by_owner(owner_id)

    def get_for_edit(self, product_id: int, caller_id: int) -> Product:
        """Get a product the caller is allowed to edit.

        Raises:
            ProductNotFoundError: If the product does not exist.
            ProductAuthorizationError: If the caller is not the owner.
        """
        return self._get_owned(product_id, caller_id, action="edit")

    # --- Mutations ---

    def create(self, owner_id: int, fields: ProductFields) -> Product:
        """Create a product owned by ``owner_id``.

        The image is stored first; the row is only inserted once the blob
        exists, and the blob is removed again if the insert fails.

        Raises:
            ValueError: If ``fields`` carries no image.
            ProductStorageError: If the blob or row could not be written.
        """
        if fields.image is None:
            raise ValueError("An image is required to create a product")

        image_key = self._store_image(fields)

        try:
            product = self._repository.insert(
                owner_id=owner_id,
                title=fields.title,
                description=fields.description,
                price=fields.price,
                image=image_key,
            )
        except sqlite3.Error as e:
            self._discard_image(image_key)
            raise ProductStorageError(f"Failed to save product: {e}") from e

        logger.info(f"User {owner_id} created product {product.id}")
        return product

    def update(self, product_id: int, caller_id: int, fields: ProductFields) -> Product:
        """Replace a product's title, description, price and image.

        When ``fields.image`` is None and images are optional on update, the
        current image is kept.

        Raises:
            ProductNotFoundError: If the product does not exist.
            ProductAuthorizationError: If the caller is not the owner.
            ValueError: If an image is required and ``fields`` carries none.
            ProductStorageError: If the blob or row could not be written.
        """
        product = self._get_owned(product_id, caller_id, action="edit")

        if fields.image is None:
            if self.update_requires_image:
                raise ValueError("An image is required to update a product")
            image_key = product.image
        else:
            image_key = self._store_image(fields)
        stored_new_image = image_key != product.image

        try:
            updated = self._repository.replace(
                product_id,
                title=fields.title,
                description=fields.description,
                price=fields.price,
                image=image_key,
            )
        except sqlite3.Error as e:
            if stored_new_image:
                self._discard_image(image_key)
            raise ProductStorageError(f"Failed to update product {product_id}: {e}") from e

        if updated is None:
            # Deleted by a concurrent request after the ownership check
            if stored_new_image:
                self._discard_image(image_key)
            raise ProductNotFoundError(product_id)

        if stored_new_image and self.delete_replaced_image and product.image:
            self._discard_image(product.image)

        logger.info(f"User {caller_id} updated product {product_id}")
        return updated

    def destroy(self, product_id: int, caller_id: int) -> ProductDeletion:
        """Delete a product and its image.

        Removing the image is best-effort: a blob store failure is logged and
        reported through ``ProductDeletion.image_deleted`` but the row is
        still deleted.

        Raises:
            ProductNotFoundError: If the product does not exist.
            ProductAuthorizationError: If the caller is not the owner.
            ProductStorageError: If the row could not be deleted.
        """
        product = self._get_owned(product_id, caller_id, action="delete")

        image_deleted = True
        if product.image:
            image_deleted = self._discard_image(product.image)

        try:
            removed = self._repository.remove(product_id)
        except sqlite3.Error as e:
            raise ProductStorageError(f"Failed to delete product {product_id}: {e}") from e

        if not removed:
            raise ProductNotFoundError(product_id)

        logger.info(f"User {caller_id} deleted product {product_id}")
        return ProductDeletion(product=product, image_deleted=image_deleted)

    # --- Helpers ---

    def _get_owned(self, product_id: int, caller_id: int, action: str) -> Product:
        """Load a product and check the caller owns it.

        Every mutating operation goes through here before touching storage.
        """
        product = self.view(product_id)
        if not is_owner(product, caller_id):
            logger.warning(
                f"User {caller_id} denied {action} on product {product_id} "
                f"owned by user {product.owner_id}"
            )
            raise ProductAuthorizationError(product_id, caller_id, action)
        return product

    def _store_image(self, fields: ProductFields) -> str:
        try:
            return self._blob_store.put(self._image_area, fields.image.data, fields.image_type)
        except BlobStoreError as e:
            raise ProductStorageError(f"Failed to store product image: {e}") from e

    def _discard_image(self, image_key: str) -> bool:
        """Delete an image blob, logging instead of raising on failure.

        Returns:
            True if the blob no longer exists, False if deletion failed.
        """
        try:
            if not self._blob_store.delete(image_key):
                logger.warning(f"Image {image_key} was already missing from the blob store")
        except BlobStoreError as e:
            logger.warning(f"Failed to delete image {image_key}: {e}")
            return False
        return True
