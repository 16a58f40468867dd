"""HTTP controller for the product listings of the signed-in user."""

import logging
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile, status
from pydantic import BaseModel

from src.api.dependencies import (
    current_user_id,
    get_blob_store,
    get_product_service,
    get_product_validator,
)
from src.clients import BlobStore
from src.models import ImageUpload, Product
from src.services import ProductService, ProductValidator

logger = logging.getLogger(__name__)

# Every listing route needs a signed-in user, including the detail view
router = APIRouter(
    prefix="/products",
    tags=["products"],
    dependencies=[Depends(current_user_id)],
)


class ProductResponse(BaseModel):
    """A product as returned to the client."""

    id: int
    title: str
    description: str
    price: float
    image: str
    image_url: str
    owner_id: int
    created_at: datetime
    updated_at: datetime


class ProductListResponse(BaseModel):
    products: list[ProductResponse]


class ProductMessageResponse(BaseModel):
    """Result of a mutating operation with its user-facing message."""

    message: str
    product: ProductResponse


class EditProductResponse(BaseModel):
    """Data needed by the edit form."""

    product: ProductResponse
    image_required: bool


def _to_response(product: Product, blob_store: BlobStore) -> ProductResponse:
    return ProductResponse(
        id=product.id,
        title=product.title,
        description=product.description,
        price=product.price,
        image=product.image,
        image_url=blob_store.public_path(product.image),
        owner_id=product.owner_id,
        created_at=product.created_at,
        updated_at=product.updated_at,
    )


def _read_upload(upload: Optional[UploadFile], max_bytes: int) -> Optional[ImageUpload]:
    """Read an upload, stopping one byte past the size limit.

    The extra byte is enough for validation to reject the file as too large
    without holding the rest of it in memory.
    """
    if upload is None:
        return None
    return ImageUpload(
        filename=upload.filename or "",
        content_type=upload.content_type,
        data=upload.file.read(max_bytes + 1),
    )


@router.get("", response_model=ProductListResponse)
def list_products(
    user_id: int = Depends(current_user_id),
    service: ProductService = Depends(get_product_service),
    blob_store: BlobStore = Depends(get_blob_store),
) -> ProductListResponse:
    """List the products of the signed-in user."""
    products = service.list_mine(user_id)
    return ProductListResponse(products=[_to_response(p, blob_store) for p in products])


@router.post("", response_model=ProductMessageResponse, status_code=status.HTTP_201_CREATED)
def store_product(
    title: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    price: Optional[str] = Form(None),
    image: Optional[UploadFile] = File(None),
    user_id: int = Depends(current_user_id),
    service: ProductService = Depends(get_product_service),
    validator: ProductValidator = Depends(get_product_validator),
    blob_store: BlobStore = Depends(get_blob_store),
) -> ProductMessageResponse:
    """Create a product owned by the signed-in user."""
    fields = validator.validate(
        {"title": title, "description": description, "price": price},
        _read_upload(image, validator.max_image_bytes),
        require_image=True,
    )
    product = service.create(user_id, fields)
    return ProductMessageResponse(
        message="Anuncio creado correctamente",
        product=_to_response(product, blob_store),
    )


@router.get("/{product_id}", response_model=ProductResponse)
def show_product(
    product_id: int,
    service: ProductService = Depends(get_product_service),
    blob_store: BlobStore = Depends(get_blob_store),
) -> ProductResponse:
    """Show any product by ID."""
    return _to_response(service.view(product_id), blob_store)


@router.get("/{product_id}/edit", response_model=EditProductResponse)
def edit_product(
    product_id: int,
    user_id: int = Depends(current_user_id),
    service: ProductService = Depends(get_product_service),
    blob_store: BlobStore = Depends(get_blob_store),
) -> EditProductResponse:
    """Return a product for its edit form, for the owner only."""
    product = service.get_for_edit(product_id, user_id)
    return EditProductResponse(
        product=_to_response(product, blob_store),
        image_required=service.update_requires_image,
    )


@router.put("/{product_id}", response_model=ProductMessageResponse)
def update_product(
    product_id: int,
    title: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    price: Optional[str] = Form(None),
    image: Optional[UploadFile] = File(None),
    user_id: int = Depends(current_user_id),
    service: ProductService = Depends(get_product_service),
    validator: ProductValidator = Depends(get_product_validator),
    blob_store: BlobStore = Depends(get_blob_store),
) -> ProductMessageResponse:
    """Replace a product's fields, for the owner only."""
    fields = validator.validate(
        {"title": title, "description": description, "price": price},
        _read_upload(image, validator.max_image_bytes),
        require_image=service.update_requires_image,
    )
    product = service.update(product_id, user_id, fields)
    return ProductMessageResponse(
        message="Anuncio actualizado correctamente",
        product=_to_response(product, blob_store),
    )


@router.delete("/{product_id}", response_model=ProductMessageResponse)
def destroy_product(
    product_id: int,
    user_id: int = Depends(current_user_id),
    service: ProductService = Depends(get_product_service),
    blob_store: BlobStore = Depends(get_blob_store),
) -> ProductMessageResponse:
    """Delete a product and its image, for the owner only."""
    deletion = service.destroy(product_id, user_id)
    if not deletion.image_deleted:
        logger.warning(
            f"Product {product_id} deleted but image {deletion.product.image} remains in storage"
        )
    return ProductMessageResponse(
        message="Producto eliminado correctamente",
        product=_to_response(deletion.product, blob_store),
    )
