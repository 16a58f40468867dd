"""API controllers."""

from src.api.controller.auth_controller import router as auth_router
from src.api.controller.product_controller import router as product_router
from src.api.controller.storage_controller import create_storage_router

__all__ = ["auth_router", "create_storage_router", "product_router"]
