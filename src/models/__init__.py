"""Data models module."""

from src.models.product import ImageUpload, Product, ProductDeletion, ProductFields
from src.models.user import User

__all__ = ["ImageUpload", "Product", "ProductDeletion", "ProductFields", "User"]
