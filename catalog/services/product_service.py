"""
Catalog Backend: Product Service
=================================

What:  find_all / find_by_id / create / update / delete for products.
How:   Same shape as CategoryService: session passed per call, writes
       flushed so the database's verdict is known before the response,
       SQLAlchemy errors wrapped in DatabaseError.
"""

import logging
from typing import List

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from catalog.exceptions import (
    CatalogError,
    DatabaseError,
    NotFoundError,
    ReferenceNotFoundError,
    ValidationError,
)
from catalog.models.category import Category
from catalog.models.product import Product
from catalog.schemas.product import ProductCreate, ProductResponse, ProductUpdate

logger = logging.getLogger(__name__)


class ProductService:
    """Business logic for product operations."""

    async def count(self, db: AsyncSession) -> int:
        try:
            result = await db.execute(select(func.count(Product.id)))
            return result.scalar_one()
        except SQLAlchemyError as e:
            logger.error("Database error counting products: %s", str(e))
            raise DatabaseError(context={"error_type": type(e).__name__}) from e

    async def find_all(
        self, db: AsyncSession, skip: int = 0, limit: int = 100
    ) -> List[ProductResponse]:
        try:
            result = await db.execute(
                select(Product).order_by(Product.id).offset(skip).limit(limit)
            )
            return [ProductResponse.model_validate(p) for p in result.scalars().all()]
        except SQLAlchemyError as e:
            logger.error("Database error listing products: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not retrieve products. Please try again.",
                context={"error_type": type(e).__name__},
            ) from e

    async def find_by_id(self, db: AsyncSession, product_id: int) -> ProductResponse:
        product = await self._get_or_404(db, product_id)
        return ProductResponse.model_validate(product)

    async def create(self, db: AsyncSession, payload: ProductCreate) -> ProductResponse:
        """
        Insert a product under an existing category.

        Raises:
            ReferenceNotFoundError: category_id names no category (→ 409)
        """
        try:
            await self._ensure_category_exists(db, payload.category_id)

            product = Product(
                name=payload.name,
                picture=payload.picture,
                category_id=payload.category_id,
            )
            db.add(product)
            await self._flush(db, payload.category_id)
            await db.refresh(product)
            logger.info("Product created: id=%s category_id=%s", product.id, product.category_id)
            return ProductResponse.model_validate(product)

        except CatalogError:
            raise
        except SQLAlchemyError as e:
            logger.error("Database error creating product: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not create the product. Please try again.",
                context={"error_type": type(e).__name__},
            ) from e

    async def update(
        self, db: AsyncSession, product_id: int, payload: ProductUpdate
    ) -> ProductResponse:
        """Apply the keys present in the body; `id` is ignored."""
        fields = payload.model_fields_set & {"name", "picture", "category_id"}

        try:
            product = await self._get_or_404(db, product_id)

            for required in ("name", "category_id"):
                if required in fields and getattr(payload, required) is None:
                    raise ValidationError(
                        message=f"Product {required} cannot be null", field=required
                    )

            if "category_id" in fields:
                await self._ensure_category_exists(db, payload.category_id)

            for field in fields:
                setattr(product, field, getattr(payload, field))

            await self._flush(db, product.category_id)
            await db.refresh(product)
            logger.info("Product updated: id=%s fields=%s", product_id, sorted(fields))
            return ProductResponse.model_validate(product)

        except CatalogError:
            raise
        except SQLAlchemyError as e:
            logger.error("Database error updating product %s: %s", product_id, str(e))
            raise DatabaseError(
                message="Could not update the product. Please try again.",
                context={"product_id": product_id, "error_type": type(e).__name__},
            ) from e

    async def delete(self, db: AsyncSession, product_id: int) -> ProductResponse:
        try:
            product = await self._get_or_404(db, product_id)
            deleted = ProductResponse.model_validate(product)
            await db.delete(product)
            await db.flush()
            logger.info("Product deleted: id=%s", product_id)
            return deleted

        except CatalogError:
            raise
        except SQLAlchemyError as e:
            logger.error("Database error deleting product %s: %s", product_id, str(e))
            raise DatabaseError(
                message="Could not delete the product. Please try again.",
                context={"product_id": product_id, "error_type": type(e).__name__},
            ) from e

    # ── Helpers ───────────────────────────────────────────────────────────

    async def _get_or_404(self, db: AsyncSession, product_id: int) -> Product:
        try:
            product = await db.get(Product, product_id)
        except SQLAlchemyError as e:
            logger.error("Database error fetching product %s: %s", product_id, str(e))
            raise DatabaseError(
                message="Could not retrieve the product. Please try again.",
                context={"product_id": product_id},
            ) from e
        if product is None:
            raise NotFoundError(resource="product", resource_id=product_id)
        return product

    async def _ensure_category_exists(self, db: AsyncSession, category_id: int) -> None:
        found = await db.scalar(select(Category.id).where(Category.id == category_id))
        if found is None:
            raise ReferenceNotFoundError(
                resource="category", resource_id=category_id, field="category_id"
            )

    async def _flush(self, db: AsyncSession, category_id: int) -> None:
        try:
            await db.flush()
        except IntegrityError as e:
            logger.warning("Product write rejected by database: %s", str(e.orig))
            raise ReferenceNotFoundError(
                resource="category", resource_id=category_id, field="category_id"
            ) from e
