# Models package init
from catalog.models.category import Category
from catalog.models.product import Product

__all__ = ["Category", "Product"]
