"""Request-scoped dependencies shared by the controllers."""

from fastapi import HTTPException, Request, status

from src.clients import BlobStore
from src.services import ProductService, ProductValidator, UserService

SESSION_USER_KEY = "user_id"


def current_user_id(request: Request) -> int:
    """Return the authenticated user's ID from the session, or fail with 401."""
    user_id = request.session.get(SESSION_USER_KEY)
    if user_id is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Debes iniciar sesión para continuar.",
        )
    return int(user_id)


def get_product_service(request: Request) -> ProductService:
    return request.app.state.product_service


def get_product_validator(request: Request) -> ProductValidator:
    return request.app.state.product_validator


def get_user_service(request: Request) -> UserService:
    return request.app.state.user_service


def get_blob_store(request: Request) -> BlobStore:
    return request.app.state.blob_store
