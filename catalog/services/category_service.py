"""
Catalog Backend: Category Service
==================================

What:  find_all / find_by_id / create / update / delete for categories.
How:   Thin layer over async SQLAlchemy. Each call receives the request's
       session; nothing is committed here (get_db_session commits), but every
       write is flushed so constraint violations surface inside the service
       and can be typed.
Who:   Category route handlers; the seed script.

Rules applied on top of the ORM:
    - Missing rows become NotFoundError (404)
    - A parent that does not exist becomes ReferenceNotFoundError (409)
    - A parent chain that would loop back to the category is a
      ValidationError (400)
    - Deleting a category that still owns products is a ConflictError (409)
    - An inline base64 picture on create goes through the image pipeline and
      the row keeps the stored file name
"""

import logging
from typing import List, Optional, Set

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from catalog.exceptions import (
    CatalogError,
    ConflictError,
    DatabaseError,
    NotFoundError,
    ReferenceNotFoundError,
    ValidationError,
)
from catalog.models.category import Category
from catalog.schemas.category import (
    CategoryCreate,
    CategoryResponse,
    CategorySummary,
    CategoryUpdate,
)
from catalog.services.image_pipeline import ImagePipeline

logger = logging.getLogger(__name__)


class CategoryService:
    """
    Business logic for category operations.

    Stateless apart from the image pipeline handle it was built with.
    """

    def __init__(self, image_pipeline: ImagePipeline):
        self.image_pipeline = image_pipeline

    # ── Reads ─────────────────────────────────────────────────────────────

    async def count(self, db: AsyncSession) -> int:
        try:
            result = await db.execute(select(func.count(Category.id)))
            return result.scalar_one()
        except SQLAlchemyError as e:
            logger.error("Database error counting categories: %s", str(e))
            raise DatabaseError(context={"error_type": type(e).__name__}) from e

    async def find_all(
        self, db: AsyncSession, skip: int = 0, limit: int = 100
    ) -> List[CategorySummary]:
        """
        List categories projected to id, name, picture, parent_id, created_at.

        Query:
            SELECT id, name, picture, parent_id, created_at FROM categories
            ORDER BY id OFFSET :skip LIMIT :limit
        """
        query = (
            select(
                Category.id,
                Category.name,
                Category.picture,
                Category.parent_id,
                Category.created_at,
            )
            .order_by(Category.id)
            .offset(skip)
            .limit(limit)
        )
        try:
            result = await db.execute(query)
            return [CategorySummary.model_validate(row) for row in result.all()]
        except SQLAlchemyError as e:
            logger.error("Database error listing categories: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not retrieve categories. Please try again.",
                context={"error_type": type(e).__name__},
            ) from e

    async def find_by_id(self, db: AsyncSession, category_id: int) -> CategoryResponse:
        """
        Raises:
            NotFoundError: no category with that id (→ 404)
            DatabaseError: query failed (→ 500)
        """
        category = await self._get_or_404(db, category_id)
        return CategoryResponse.model_validate(category)

    # ── Writes ────────────────────────────────────────────────────────────

    async def create(self, db: AsyncSession, payload: CategoryCreate) -> CategoryResponse:
        """
        Insert a category.

        Workflow:
            1. Resolve the parent (`parent.id` wins over `parent_id`) and
               check it exists
            2. INSERT and flush to obtain the id
            3. If a picture was sent: run the image pipeline for the new id
               and store the resized file name in `picture`

        Any failure propagates; the request's transaction is rolled back, so
        a failed picture never leaves a half-created row behind.
        """
        parent_id = payload.parent.id if payload.parent is not None else payload.parent_id

        try:
            if parent_id is not None:
                await self._ensure_exists(db, parent_id, field="parent_id")

            category = Category(
                name=payload.name,
                parent_id=parent_id,
                products_count=payload.products_count,
            )
            db.add(category)
            await self._flush(db, parent_id=parent_id)
            logger.info("Category created: id=%s name=%r", category.id, category.name)

            if payload.picture:
                await self.image_pipeline.ingest(payload.picture, category.id)
                category.picture = self.image_pipeline.resized_name(category.id)
                await self._flush(db, parent_id=parent_id)

            await db.refresh(category)
            return CategoryResponse.model_validate(category)

        except CatalogError:
            raise
        except SQLAlchemyError as e:
            logger.error("Database error creating category: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not create the category. Please try again.",
                context={"error_type": type(e).__name__},
            ) from e

    async def update(
        self, db: AsyncSession, category_id: int, payload: CategoryUpdate
    ) -> CategoryResponse:
        """
        Apply a partial update.

        Only keys present in the request body are touched. A present `parent`
        object (or explicit null) takes precedence over `parent_id`.

        Raises:
            NotFoundError: category does not exist
            ReferenceNotFoundError: new parent does not exist
            ValidationError: null name, or the new parent is the category
                itself or one of its descendants
        """
        fields = payload.model_fields_set

        try:
            category = await self._get_or_404(db, category_id)

            if "name" in fields and payload.name is None:
                raise ValidationError(message="Category name cannot be null", field="name")

            parent_changed = False
            new_parent_id: Optional[int] = None
            if "parent" in fields:
                parent_changed = True
                new_parent_id = payload.parent.id if payload.parent is not None else None
            elif "parent_id" in fields:
                parent_changed = True
                new_parent_id = payload.parent_id

            if parent_changed and new_parent_id is not None:
                await self._ensure_exists(db, new_parent_id, field="parent_id")
                await self._ensure_acyclic(db, category_id, new_parent_id)

            for field in fields & {"name", "picture", "products_count"}:
                setattr(category, field, getattr(payload, field))
            if parent_changed:
                category.parent_id = new_parent_id

            await self._flush(db, parent_id=new_parent_id)
            await db.refresh(category)
            logger.info("Category updated: id=%s fields=%s", category_id, sorted(fields))
            return CategoryResponse.model_validate(category)

        except CatalogError:
            raise
        except SQLAlchemyError as e:
            logger.error("Database error updating category %s: %s", category_id, str(e))
            raise DatabaseError(
                message="Could not update the category. Please try again.",
                context={"category_id": category_id, "error_type": type(e).__name__},
            ) from e

    async def delete(self, db: AsyncSession, category_id: int) -> CategoryResponse:
        """
        Delete a category and return the row as it was.

        Children are detached by the database (SET NULL). Products block the
        delete (RESTRICT), reported as ConflictError.
        """
        try:
            category = await self._get_or_404(db, category_id)
            deleted = CategoryResponse.model_validate(category)

            await db.delete(category)
            try:
                await db.flush()
            except IntegrityError as e:
                logger.warning("Delete of category %s blocked: %s", category_id, str(e.orig))
                raise ConflictError(
                    message=f"Category with ID '{category_id}' still has products and cannot be deleted",
                    context={"category_id": category_id},
                ) from e

            logger.info("Category deleted: id=%s", category_id)
            return deleted

        except CatalogError:
            raise
        except SQLAlchemyError as e:
            logger.error("Database error deleting category %s: %s", category_id, str(e))
            raise DatabaseError(
                message="Could not delete the category. Please try again.",
                context={"category_id": category_id, "error_type": type(e).__name__},
            ) from e

    # ── Helpers ───────────────────────────────────────────────────────────

    async def _get_or_404(self, db: AsyncSession, category_id: int) -> Category:
        try:
            category = await db.get(Category, category_id)
        except SQLAlchemyError as e:
            logger.error("Database error fetching category %s: %s", category_id, str(e))
            raise DatabaseError(
                message="Could not retrieve the category. Please try again.",
                context={"category_id": category_id},
            ) from e
        if category is None:
            raise NotFoundError(resource="category", resource_id=category_id)
        return category

    async def _ensure_exists(self, db: AsyncSession, category_id: int, field: str) -> None:
        found = await db.scalar(select(Category.id).where(Category.id == category_id))
        if found is None:
            raise ReferenceNotFoundError(resource="category", resource_id=category_id, field=field)

    async def _ensure_acyclic(self, db: AsyncSession, category_id: int, parent_id: int) -> None:
        """
        Walk up from `parent_id`; reaching `category_id` means the update would
        close a loop. Stops on a pre-existing loop elsewhere in the tree.
        """
        visited: Set[int] = set()
        current: Optional[int] = parent_id
        while current is not None and current not in visited:
            if current == category_id:
                raise ValidationError(
                    message="A category cannot be its own parent or ancestor",
                    field="parent_id",
                    context={"category_id": category_id, "parent_id": parent_id},
                )
            visited.add(current)
            current = await db.scalar(select(Category.parent_id).where(Category.id == current))

    async def _flush(self, db: AsyncSession, parent_id: Optional[int]) -> None:
        # The existence check runs first; an IntegrityError here means the
        # parent vanished between the check and the write.
        try:
            await db.flush()
        except IntegrityError as e:
            logger.warning("Category write rejected by database: %s", str(e.orig))
            raise ReferenceNotFoundError(
                resource="category", resource_id=parent_id, field="parent_id"
            ) from e
