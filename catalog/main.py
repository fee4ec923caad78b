"""
Catalog Backend: FastAPI Application Factory
=============================================

What:  Creates and configures the FastAPI application instance.
How:   create_app(settings) builds every collaborator (database handle,
       resizer, image pipeline, services), stores them on `app.state`,
       registers middleware, exception handlers and routers.
Who:   uvicorn (`catalog.main:app`), `python -m catalog`, the test suite.

Application Architecture:
    ┌──────────────────────────────────────────────────────┐
    │                    FastAPI App                       │
    │                                                      │
    │  Middleware:  Request ID → Access Log → GZip → CORS  │
    │                                                      │
    │  Routes:                                             │
    │   /            /health        /upload   /images/{f}  │
    │   /categories[/{id}]          /products[/{id}]       │
    │                                                      │
    │  app.state:                                          │
    │   database · image_pipeline · category_service ·     │
    │   product_service · settings                         │
    └──────────────────────────────────────────────────────┘

Lifecycle:
    Startup:  configure logging, create the image directory
    Shutdown: dispose the database engine
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from catalog import __version__
from catalog.config import Settings, settings as default_settings
from catalog.database import Database
from catalog.exceptions import (
    CatalogError,
    ConflictError,
    DatabaseError,
    FileStorageError,
    NotFoundError,
    ReferenceNotFoundError,
    UnprocessableImageError,
    ValidationError,
)
from catalog.middleware.logging import RequestLoggingMiddleware
from catalog.middleware.request_id import (
    REQUEST_ID_HEADER,
    RequestIDMiddleware,
    request_id_var,
)
from catalog.routes import categories, health, images, products
from catalog.services.category_service import CategoryService
from catalog.services.image_pipeline import ImagePipeline
from catalog.services.image_resizer import build_resizer
from catalog.services.product_service import ProductService

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging
# ══════════════════════════════════════════════════════════════════════════

def setup_logging(level: str) -> None:
    """
    Configure the root logger once for the whole process.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s on stdout.
    """
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("PIL").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    app_settings: Settings = app.state.settings

    setup_logging(app_settings.log_level)
    logger.info("=" * 60)
    logger.info("Catalog backend %s starting up...", __version__)

    app.state.image_pipeline.ensure_directory()
    logger.info("Image resizer: %s", app.state.image_pipeline.resizer.name)
    logger.info(
        "Server ready at http://%s:%d", app_settings.backend_host, app_settings.backend_port
    )
    logger.info("=" * 60)

    yield

    logger.info("Catalog backend shutting down...")
    await app.state.database.dispose()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _error_response(exc: CatalogError, include_details: bool, message: Optional[str] = None) -> JSONResponse:
    content = {
        "error": exc.error_code,
        "message": message or exc.message,
        "request_id": request_id_var.get(""),
    }
    if include_details:
        content["details"] = exc.context
    return JSONResponse(status_code=exc.status_code, content=content)


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map exception types to JSON error responses.

    Handler hierarchy (Starlette resolves along the exception's MRO):
        ValidationError / ImageDecodeError → 400
        NotFoundError                      → 404
        ReferenceNotFoundError             → 409
        ConflictError                      → 409
        UnprocessableImageError            → 422
        FileStorageError                   → 500 (context logged only)
        DatabaseError                      → 500 (generic message)
        CatalogError (base)                → 500
        Exception (fallback)               → 500 internal_server_error
    """

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        logger.warning("[%s] Validation error: %s", request_id_var.get(""), exc.message)
        return _error_response(exc, include_details=True)

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        return _error_response(exc, include_details=False)

    @app.exception_handler(ReferenceNotFoundError)
    async def handle_unknown_reference(request: Request, exc: ReferenceNotFoundError):
        logger.warning("[%s] Unknown reference: %s", request_id_var.get(""), exc.message)
        return _error_response(exc, include_details=True)

    @app.exception_handler(ConflictError)
    async def handle_conflict(request: Request, exc: ConflictError):
        logger.warning("[%s] Conflict: %s", request_id_var.get(""), exc.message)
        return _error_response(exc, include_details=True)

    @app.exception_handler(UnprocessableImageError)
    async def handle_unprocessable_image(request: Request, exc: UnprocessableImageError):
        logger.warning(
            "[%s] Unprocessable image: %s | Context: %s",
            request_id_var.get(""), exc.message, exc.context,
        )
        return _error_response(exc, include_details=False)

    @app.exception_handler(FileStorageError)
    async def handle_file_storage_error(request: Request, exc: FileStorageError):
        logger.error(
            "[%s] File storage error: %s | Context: %s",
            request_id_var.get(""), exc.message, exc.context,
        )
        return _error_response(exc, include_details=False)

    @app.exception_handler(DatabaseError)
    async def handle_database_error(request: Request, exc: DatabaseError):
        logger.error(
            "[%s] Database error: %s | Context: %s",
            request_id_var.get(""), exc.message, exc.context,
        )
        return _error_response(
            exc,
            include_details=False,
            message="An internal error occurred. Please try again later.",
        )

    @app.exception_handler(CatalogError)
    async def handle_catalog_error(request: Request, exc: CatalogError):
        logger.error("[%s] Application error: %s", request_id_var.get(""), exc.message)
        return _error_response(exc, include_details=False)

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        rid = request_id_var.get("")
        logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=True)
        return JSONResponse(
            status_code=500,
            content={
                "error": "internal_server_error",
                "message": "An unexpected error occurred. Please try again or contact support.",
                "request_id": rid,
            },
            headers={REQUEST_ID_HEADER: rid} if rid else None,
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        settings: explicit configuration; defaults to the environment-loaded
            `catalog.config.settings`.

    Returns:
        A FastAPI instance whose collaborators live on `app.state`.
    """
    settings = settings or default_settings

    app = FastAPI(
        title="Catalog API",
        description=(
            "Categories and products over HTTP, with a picture upload endpoint that "
            "stores the original and a resized copy."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # ── Collaborators ─────────────────────────────────────────────────────
    resizer = build_resizer(settings.image_resizer, jpeg_quality=settings.resize_jpeg_quality)
    image_pipeline = ImagePipeline(
        image_directory=settings.image_directory,
        resizer=resizer,
        max_width=settings.resize_max_width,
        max_height=settings.resize_max_height,
        max_upload_bytes=settings.max_upload_bytes,
    )
    app.state.settings = settings
    app.state.database = Database(settings)
    app.state.image_pipeline = image_pipeline
    app.state.category_service = CategoryService(image_pipeline)
    app.state.product_service = ProductService()

    # ── Middleware ────────────────────────────────────────────────────────
    # Last added runs first: RequestID → Logging → GZip → CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials="*" not in settings.cors_origins_list,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    app.include_router(health.router)
    app.include_router(categories.router)
    app.include_router(products.router)
    app.include_router(images.router)

    return app


# uvicorn entry point: `uvicorn catalog.main:app`
app = create_app()
