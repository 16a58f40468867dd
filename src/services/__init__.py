"""Service layer: validation, storage access and product lifecycle."""

from src.services.product_repository import ProductRepository
from src.services.product_service import (
    ProductAuthorizationError,
    ProductNotFoundError,
    ProductService,
    ProductStorageError,
    is_owner,
)
from src.services.product_validator import (
    ProductValidationError,
    ProductValidator,
    detect_image_type,
)
from src.services.user_service import (
    AuthenticationError,
    UserRegistrationError,
    UserService,
)

__all__ = [
    "AuthenticationError",
    "ProductAuthorizationError",
    "ProductNotFoundError",
    "ProductRepository",
    "ProductService",
    "ProductStorageError",
    "ProductValidationError",
    "ProductValidator",
    "UserRegistrationError",
    "UserService",
    "detect_image_type",
    "is_owner",
]
