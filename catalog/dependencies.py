"""
Catalog Backend: Request Dependencies
======================================

What:  FastAPI dependency providers for the handles built in `create_app`.
How:   Each provider reads from `request.app.state`, so a test app built with
       its own Settings (temp database, temp image directory) is fully
       isolated from the default one.

    app.state.database         → catalog.database.get_db_session
    app.state.image_pipeline   → get_image_pipeline
    app.state.category_service → get_category_service
    app.state.product_service  → get_product_service
"""

from fastapi import Request

from catalog.services.category_service import CategoryService
from catalog.services.image_pipeline import ImagePipeline
from catalog.services.product_service import ProductService


def get_image_pipeline(request: Request) -> ImagePipeline:
    return request.app.state.image_pipeline


def get_category_service(request: Request) -> CategoryService:
    return request.app.state.category_service


def get_product_service(request: Request) -> ProductService:
    return request.app.state.product_service
