"""
Application factory.

Builds the FastAPI app: middleware, error handlers and routes. The reference
catalog is loaded at startup so a bad data directory fails fast.
"""
from contextlib import asynccontextmanager
from typing import Callable

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from billharmony import __version__
from billharmony.api.middleware.audit import AuditMiddleware
from billharmony.config.settings import get_settings
from billharmony.services.catalog import get_default_catalog
from billharmony.utils.errors import (
    AppError,
    app_error_handler,
    general_exception_handler,
    validation_error_handler,
)
from billharmony.utils.logger import get_logger

logger = get_logger(__name__)


def create_lifespan(preload_catalog: bool = True) -> Callable:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Starting application...")
        if preload_catalog:
            get_default_catalog()
        logger.info("Application started successfully")
        yield
        logger.info("Shutting down application...")

    return lifespan


def setup_middleware(app: FastAPI) -> None:
    """
    Register middleware. Starlette runs them in reverse order of
    registration, so CORS runs first and audit logging wraps the handler.
    """
    app.add_middleware(AuditMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=get_settings().get_cors_origins(),
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
    )


def setup_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(Exception, general_exception_handler)


def register_routes(app: FastAPI) -> None:
    from billharmony.api.routes import ai_search, catalog, eligibility, health, search

    app.include_router(health.router, prefix="/api/v1", tags=["health"])
    app.include_router(ai_search.router, prefix="/api/v1", tags=["search"])
    app.include_router(search.router, prefix="/api/v1", tags=["search"])
    app.include_router(eligibility.router, prefix="/api/v1", tags=["eligibility"])
    app.include_router(catalog.router, prefix="/api/v1", tags=["catalog"])


def create_application(preload_catalog: bool = True) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        preload_catalog: Load the reference catalog at startup. Tests that
            override the catalog dependency turn this off.
    """
    app = FastAPI(
        title="BillHarmony - Medical Price Search",
        description="Procedure price search, insurance cost estimates and charity care screening",
        version=__version__,
        lifespan=create_lifespan(preload_catalog),
    )

    setup_middleware(app)
    setup_error_handlers(app)
    register_routes(app)

    return app
