"""Maps service exceptions to HTTP responses."""

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from src.services import (
    ProductAuthorizationError,
    ProductNotFoundError,
    ProductStorageError,
    ProductValidationError,
)

logger = logging.getLogger(__name__)


async def _validation_error(request: Request, exc: ProductValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=422,
        content={"errors": exc.errors},
    )


async def _not_found(request: Request, exc: ProductNotFoundError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_404_NOT_FOUND,
        content={"detail": "Anuncio no encontrado"},
    )


async def _forbidden(request: Request, exc: ProductAuthorizationError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_403_FORBIDDEN,
        content={"detail": str(exc)},
    )


async def _storage_error(request: Request, exc: ProductStorageError) -> JSONResponse:
    logger.exception(f"Storage failure on {request.method} {request.url.path}: {exc}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "No se pudo completar la operación. Inténtalo de nuevo más tarde."},
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ProductValidationError, _validation_error)
    app.add_exception_handler(ProductNotFoundError, _not_found)
    app.add_exception_handler(ProductAuthorizationError, _forbidden)
    app.add_exception_handler(ProductStorageError, _storage_error)
