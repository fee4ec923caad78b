"""
Catalog Backend: Category SQLAlchemy Model
===========================================

What:  ORM model for the `categories` table.
Who:   CategoryService for CRUD, Alembic for schema management, seed script.

Table Design:
    - Integer primary key assigned by the database
    - parent_id: self-reference; deleting a parent detaches its children
      (ON DELETE SET NULL) instead of deleting them
    - picture: free text, either an inline base64 payload or the file name
      of the stored resized image ("<id>_resized.jpg")
    - products_count: denormalised cache exposed as `productsCount`;
      nothing in this service recomputes it
    - Index on parent_id: children lookups and the ancestor walk
"""

from datetime import datetime, timezone
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import DateTime, ForeignKey, Index, Integer, String, Text, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from catalog.database import Base

if TYPE_CHECKING:
    from catalog.models.product import Product


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Category(Base):
    """
    A node in the category tree.

    Relationships are declared with passive_deletes so that deleting a row
    never lazy-loads collections inside an async session; the database
    enforces SET NULL on children and RESTRICT on products.
    """

    __tablename__ = "categories"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    name: Mapped[str] = mapped_column(String(255), nullable=False)

    picture: Mapped[Optional[str]] = mapped_column(Text, nullable=True, default=None)

    parent_id: Mapped[Optional[int]] = mapped_column(
        Integer,
        ForeignKey("categories.id", ondelete="SET NULL"),
        nullable=True,
        default=None,
    )

    products_count: Mapped[Optional[int]] = mapped_column(
        "products_count",
        Integer,
        nullable=True,
        default=None,
    )

    # ── Timestamps ────────────────────────────────────────────────────────
    # Always UTC; updated_at is refreshed by the ORM on every UPDATE
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

    parent: Mapped[Optional["Category"]] = relationship(
        "Category",
        back_populates="children",
        remote_side="Category.id",
    )
    children: Mapped[List["Category"]] = relationship(
        "Category",
        back_populates="parent",
        passive_deletes=True,
    )
    products: Mapped[List["Product"]] = relationship(
        "Product",
        back_populates="category",
        passive_deletes="all",
    )

    __table_args__ = (
        Index("idx_categories_parent_id", "parent_id"),
    )

    def __repr__(self) -> str:
        return f"<Category(id={self.id}, name='{self.name}', parent_id={self.parent_id})>"
