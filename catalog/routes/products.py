"""
Catalog Backend: Product Route Handlers
========================================

What:  GET/POST /products, GET/PUT/DELETE /products/{id}; mirrors categories.
"""

from typing import List

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from catalog.database import get_db_session
from catalog.dependencies import get_product_service
from catalog.schemas.common import ErrorResponse
from catalog.schemas.product import ProductCreate, ProductResponse, ProductUpdate
from catalog.services.product_service import ProductService

router = APIRouter(prefix="/products", tags=["Products"])


@router.get("", response_model=List[ProductResponse], summary="List products")
async def list_products(
    skip: int = Query(default=0, ge=0),
    limit: int = Query(default=100, ge=1, le=500),
    db: AsyncSession = Depends(get_db_session),
    service: ProductService = Depends(get_product_service),
) -> List[ProductResponse]:
    return await service.find_all(db, skip=skip, limit=limit)


@router.get(
    "/{product_id}",
    response_model=ProductResponse,
    responses={404: {"description": "Product not found", "model": ErrorResponse}},
    summary="Get a product by id",
)
async def get_product(
    product_id: int,
    db: AsyncSession = Depends(get_db_session),
    service: ProductService = Depends(get_product_service),
) -> ProductResponse:
    return await service.find_by_id(db, product_id)


@router.post(
    "",
    status_code=201,
    response_model=ProductResponse,
    responses={409: {"description": "Category does not exist", "model": ErrorResponse}},
    summary="Create a product",
)
async def create_product(
    payload: ProductCreate,
    db: AsyncSession = Depends(get_db_session),
    service: ProductService = Depends(get_product_service),
) -> ProductResponse:
    return await service.create(db, payload)


@router.put(
    "/{product_id}",
    response_model=ProductResponse,
    responses={
        404: {"description": "Product not found", "model": ErrorResponse},
        409: {"description": "Category does not exist", "model": ErrorResponse},
    },
    summary="Partially update a product",
)
async def update_product(
    product_id: int,
    payload: ProductUpdate,
    db: AsyncSession = Depends(get_db_session),
    service: ProductService = Depends(get_product_service),
) -> ProductResponse:
    return await service.update(db, product_id, payload)


@router.delete(
    "/{product_id}",
    response_model=ProductResponse,
    responses={404: {"description": "Product not found", "model": ErrorResponse}},
    summary="Delete a product",
)
async def delete_product(
    product_id: int,
    db: AsyncSession = Depends(get_db_session),
    service: ProductService = Depends(get_product_service),
) -> ProductResponse:
    return await service.delete(db, product_id)
