"""
Catalog Backend: Demo Data Seeder
==================================

What:  Fills an empty database with a small real-estate catalog: five
       top-level categories, seven subcategories and twelve products.
How:   Goes through the ORM in one session; subcategories are linked by
       the parent ids obtained from the first flush.
Who:   `python -m catalog.seed` / `catalog-seed`, and the test suite.

Seeding a database that already has categories is a no-op, so running
the command twice does not duplicate rows.
"""

import asyncio
import logging
import sys
from typing import Dict, List, Tuple

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from catalog.config import settings
from catalog.database import Database
from catalog.models.category import Category
from catalog.models.product import Product

logger = logging.getLogger(__name__)

PARENT_CATEGORIES: List[str] = [
    "Residential",
    "Commercial",
    "Vacation Homes",
    "Land",
    "Industrial",
]

# (subcategory, parent)
SUBCATEGORIES: List[Tuple[str, str]] = [
    ("Single Family Homes", "Residential"),
    ("Office Buildings", "Commercial"),
    ("Beachfront Villas", "Vacation Homes"),
    ("Residential Land", "Land"),
    ("Commercial Land", "Land"),
    ("Warehouses", "Industrial"),
    ("Manufacturing Plants", "Industrial"),
]

# (product, category)
PRODUCTS: List[Tuple[str, str]] = [
    ("Cozy Home", "Single Family Homes"),
    ("Office Space", "Office Buildings"),
    ("Beachfront Getaway", "Beachfront Villas"),
    ("Residential Plot", "Residential Land"),
    ("Commercial Plot", "Commercial Land"),
    ("Warehouse Facility", "Warehouses"),
    ("Manufacturing Facility", "Manufacturing Plants"),
    ("Luxury Condo", "Single Family Homes"),
    ("Retail Shop", "Office Buildings"),
    ("Mountain Chalet", "Beachfront Villas"),
    ("Agricultural Land", "Residential Land"),
    ("Tech Hub", "Warehouses"),
]


async def seed(db: AsyncSession) -> bool:
    """
    Insert the demo catalog unless categories already exist.

    Returns:
        True when rows were inserted, False when the database was not empty.
    """
    existing = await db.scalar(select(func.count(Category.id)))
    if existing:
        logger.info("Database already holds %d categories; skipping seed", existing)
        return False

    by_name: Dict[str, Category] = {}
    for name in PARENT_CATEGORIES:
        by_name[name] = Category(name=name)
        db.add(by_name[name])
    await db.flush()

    for name, parent in SUBCATEGORIES:
        by_name[name] = Category(name=name, parent_id=by_name[parent].id)
        db.add(by_name[name])
    await db.flush()

    for name, category in PRODUCTS:
        db.add(Product(name=name, category_id=by_name[category].id))
    await db.flush()

    logger.info(
        "Seeded %d categories and %d products",
        len(PARENT_CATEGORIES) + len(SUBCATEGORIES),
        len(PRODUCTS),
    )
    return True


async def run() -> None:
    database = Database(settings)
    try:
        async with database.session() as session:
            await seed(session)
    finally:
        await database.dispose()


def main() -> None:
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    try:
        asyncio.run(run())
    except Exception as e:
        logger.critical("Seeding failed: %s", str(e), exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
