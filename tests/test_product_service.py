"""
Catalog Backend: Product Service Tests
=======================================

What:  Tests for ProductService CRUD and its category reference checks.
"""

import pytest
from sqlalchemy.exc import SQLAlchemyError

from catalog.exceptions import (
    DatabaseError,
    NotFoundError,
    ReferenceNotFoundError,
    ValidationError,
)
from catalog.models.category import Category
from catalog.models.product import Product
from catalog.schemas.product import ProductCreate, ProductUpdate
from catalog.services.product_service import ProductService


class TestProductServiceErrors:

    def setup_method(self):
        self.service = ProductService()

    @pytest.mark.asyncio
    async def test_find_by_id_not_found(self, mock_db_session):
        mock_db_session.get.return_value = None

        with pytest.raises(NotFoundError, match="Product with ID '3' was not found"):
            await self.service.find_by_id(mock_db_session, 3)

    @pytest.mark.asyncio
    async def test_count_database_failure(self, mock_db_session):
        mock_db_session.execute.side_effect = SQLAlchemyError("timeout")

        with pytest.raises(DatabaseError):
            await self.service.count(mock_db_session)

    @pytest.mark.asyncio
    async def test_create_unknown_category(self, mock_db_session):
        mock_db_session.scalar.return_value = None

        with pytest.raises(ReferenceNotFoundError) as exc_info:
            await self.service.create(
                mock_db_session, ProductCreate(name="Cozy Home", category_id=77)
            )

        assert exc_info.value.status_code == 409
        assert exc_info.value.context["field"] == "category_id"
        mock_db_session.add.assert_not_called()

    @pytest.mark.asyncio
    async def test_update_null_category_rejected(self, mock_db_session):
        mock_db_session.get.return_value = Product(id=1, name="Cozy Home", category_id=1)

        with pytest.raises(ValidationError, match="category_id cannot be null"):
            await self.service.update(mock_db_session, 1, ProductUpdate(category_id=None))


class TestProductServiceDatabase:

    async def _category(self, database, name="Residential") -> int:
        async with database.session() as db:
            category = Category(name=name)
            db.add(category)
            await db.flush()
            return category.id

    @pytest.mark.asyncio
    async def test_crud_cycle(self, database):
        service = ProductService()
        category_id = await self._category(database)

        async with database.session() as db:
            created = await service.create(
                db, ProductCreate(name="Cozy Home", category_id=category_id)
            )
        assert created.id > 0
        assert created.picture is None

        async with database.session() as db:
            updated = await service.update(
                db, created.id, ProductUpdate(id=999, name="Luxury Condo")
            )
        assert updated.id == created.id
        assert updated.name == "Luxury Condo"
        assert updated.category_id == category_id

        async with database.session() as db:
            deleted = await service.delete(db, created.id)
        assert deleted.name == "Luxury Condo"

        async with database.session() as db:
            assert await service.count(db) == 0
            with pytest.raises(NotFoundError):
                await service.delete(db, created.id)

    @pytest.mark.asyncio
    async def test_move_to_other_category(self, database):
        service = ProductService()
        first = await self._category(database, "Commercial")
        second = await self._category(database, "Industrial")

        async with database.session() as db:
            created = await service.create(db, ProductCreate(name="Tech Hub", category_id=first))

        async with database.session() as db:
            moved = await service.update(db, created.id, ProductUpdate(category_id=second))
        assert moved.category_id == second

        with pytest.raises(ReferenceNotFoundError):
            async with database.session() as db:
                await service.update(db, created.id, ProductUpdate(category_id=5000))

    @pytest.mark.asyncio
    async def test_find_all_ordered(self, database):
        service = ProductService()
        category_id = await self._category(database)

        async with database.session() as db:
            for name in ("Cozy Home", "Luxury Condo", "Retail Shop"):
                await service.create(db, ProductCreate(name=name, category_id=category_id))

        async with database.session() as db:
            names = [p.name for p in await service.find_all(db, skip=0, limit=2)]
        assert names == ["Cozy Home", "Luxury Condo"]
