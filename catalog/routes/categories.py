"""
Catalog Backend: Category Route Handlers
=========================================

What:  GET/POST /categories, GET/PUT/DELETE /categories/{id}.
How:   Extracts path/query/body, delegates to CategoryService, returns the
       response model. Errors are raised as catalog exceptions and rendered
       by the global handlers in main.py.
"""

import logging
from typing import List

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from catalog.database import get_db_session
from catalog.dependencies import get_category_service
from catalog.schemas.category import (
    CategoryCreate,
    CategoryResponse,
    CategorySummary,
    CategoryUpdate,
)
from catalog.schemas.common import ErrorResponse
from catalog.services.category_service import CategoryService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/categories", tags=["Categories"])


@router.get(
    "",
    response_model=List[CategorySummary],
    summary="List categories",
    description="Returns id, name, picture, parent_id and created_at for each category, ordered by id.",
)
async def list_categories(
    skip: int = Query(default=0, ge=0, description="Rows to skip"),
    limit: int = Query(default=100, ge=1, le=500, description="Maximum rows returned"),
    db: AsyncSession = Depends(get_db_session),
    service: CategoryService = Depends(get_category_service),
) -> List[CategorySummary]:
    return await service.find_all(db, skip=skip, limit=limit)


@router.get(
    "/{category_id}",
    response_model=CategoryResponse,
    responses={404: {"description": "Category not found", "model": ErrorResponse}},
    summary="Get a category by id",
)
async def get_category(
    category_id: int,
    db: AsyncSession = Depends(get_db_session),
    service: CategoryService = Depends(get_category_service),
) -> CategoryResponse:
    return await service.find_by_id(db, category_id)


@router.post(
    "",
    status_code=201,
    response_model=CategoryResponse,
    responses={
        400: {"description": "Invalid inline picture", "model": ErrorResponse},
        409: {"description": "Parent category does not exist", "model": ErrorResponse},
        422: {"description": "Inline picture is not a readable image", "model": ErrorResponse},
    },
    summary="Create a category",
    description=(
        "Creates a category. `parent` ({id}) or `parent_id` link it under an existing "
        "category. A base64 `picture` is resized and stored; the created row then "
        "references the stored file."
    ),
)
async def create_category(
    payload: CategoryCreate,
    db: AsyncSession = Depends(get_db_session),
    service: CategoryService = Depends(get_category_service),
) -> CategoryResponse:
    return await service.create(db, payload)


@router.put(
    "/{category_id}",
    response_model=CategoryResponse,
    responses={
        400: {"description": "Update would create a cycle", "model": ErrorResponse},
        404: {"description": "Category not found", "model": ErrorResponse},
        409: {"description": "Parent category does not exist", "model": ErrorResponse},
    },
    summary="Partially update a category",
)
async def update_category(
    category_id: int,
    payload: CategoryUpdate,
    db: AsyncSession = Depends(get_db_session),
    service: CategoryService = Depends(get_category_service),
) -> CategoryResponse:
    return await service.update(db, category_id, payload)


@router.delete(
    "/{category_id}",
    response_model=CategoryResponse,
    responses={
        404: {"description": "Category not found", "model": ErrorResponse},
        409: {"description": "Category still has products", "model": ErrorResponse},
    },
    summary="Delete a category",
    description="Deletes the category and returns it. Child categories are detached.",
)
async def delete_category(
    category_id: int,
    db: AsyncSession = Depends(get_db_session),
    service: CategoryService = Depends(get_category_service),
) -> CategoryResponse:
    return await service.delete(db, category_id)
