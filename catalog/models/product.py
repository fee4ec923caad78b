"""
Catalog Backend: Product SQLAlchemy Model
==========================================

What:  ORM model for the `products` table.
Who:   ProductService for CRUD, Alembic for schema management, seed script.

Every product belongs to exactly one category. The foreign key uses
ON DELETE RESTRICT: a category cannot disappear from under its products.
"""

from datetime import datetime
from typing import TYPE_CHECKING, Optional

from sqlalchemy import DateTime, ForeignKey, Index, Integer, String, Text, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from catalog.database import Base
from catalog.models.category import utcnow

if TYPE_CHECKING:
    from catalog.models.category import Category


class Product(Base):
    """A leaf entry of the catalog."""

    __tablename__ = "products"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    name: Mapped[str] = mapped_column(String(255), nullable=False)

    picture: Mapped[Optional[str]] = mapped_column(Text, nullable=True, default=None)

    category_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("categories.id", ondelete="RESTRICT"),
        nullable=False,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        onupdate=utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )

    category: Mapped["Category"] = relationship("Category", back_populates="products")

    __table_args__ = (
        Index("idx_products_category_id", "category_id"),
    )

    def __repr__(self) -> str:
        return f"<Product(id={self.id}, name='{self.name}', category_id={self.category_id})>"
