"""FastAPI application setup."""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from starlette.middleware.sessions import SessionMiddleware

from src.api.controller import auth_router, create_storage_router, product_router
from src.api.errors import register_exception_handlers
from src.clients import LocalBlobStore, SqliteClient
from src.config import AppConfig, configure_logging, get_config
from src.services import ProductRepository, ProductService, ProductValidator, UserService

logger = logging.getLogger(__name__)


def create_app(config: Optional[AppConfig] = None) -> FastAPI:
    """Create and configure the FastAPI application."""
    config = config or get_config()
    configure_logging(config.logging.level)

    sqlite_client = SqliteClient(config.database.path)
    blob_store = LocalBlobStore(config.storage.root, public_prefix=config.storage.public_prefix)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        sqlite_client.close()

    app = FastAPI(
        lifespan=lifespan,
        title="Product Listings API",
        description="Per-user product listings with image uploads",
        version="1.0.0",
    )

    app.add_middleware(
        SessionMiddleware,
        secret_key=config.session.secret_key,
        session_cookie=config.session.cookie_name,
    )

    app.state.sqlite_client = sqlite_client
    app.state.blob_store = blob_store
    app.state.user_service = UserService(sqlite_client)
    app.state.product_validator = ProductValidator(
        max_image_kb=config.uploads.max_image_kb,
        allowed_image_types=config.uploads.allowed_image_types,
    )
    app.state.product_service = ProductService(
        ProductRepository(sqlite_client),
        blob_store,
        image_area=config.storage.area,
        update_requires_image=config.products.update_requires_image,
        delete_replaced_image=config.products.delete_replaced_image,
    )

    register_exception_handlers(app)

    # Include routers
    app.include_router(auth_router)
    app.include_router(product_router)
    app.include_router(create_storage_router(config.storage.public_prefix))

    @app.get("/health")
    async def health_check() -> dict:
        """Health check endpoint."""
        return {"status": "healthy"}

    logger.info(f"Application created with database {config.database.path}")
    return app
