"""
Catalog Backend: Category Request/Response Schemas
===================================================

What:  Pydantic models defining the category API contract.
How:   FastAPI validates request bodies against the *Create/*Update models
       and serializes ORM rows through the response models (by alias, so
       `products_count` goes out as `productsCount`).

Parent linkage:
    Clients may send either `parent_id` or a `parent` object carrying an
    `id`. The object form is translated into a relational connect by the
    service and wins when both are present.
"""

from datetime import datetime
from typing import Optional

from pydantic import AliasChoices, BaseModel, Field


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class ParentRef(BaseModel):
    """Reference to an existing category, as sent in `parent`."""
    id: int = Field(description="ID of the parent category")


class CategoryCreate(BaseModel):
    """
    What:  Body of POST /categories.
    Note:  `picture` is a base64 image. When present it is resized and stored,
           and the created row keeps the stored file name instead.
    """
    name: str = Field(min_length=1, max_length=255, description="Display name")
    picture: Optional[str] = Field(
        default=None,
        description="Optional base64-encoded image (a data: URL prefix is accepted)",
    )
    parent_id: Optional[int] = Field(default=None, description="ID of the parent category")
    parent: Optional[ParentRef] = Field(
        default=None,
        description="Parent category object; only its id is used",
    )
    products_count: Optional[int] = Field(
        default=None,
        ge=0,
        validation_alias=AliasChoices("productsCount", "products_count"),
        description="Denormalised product counter (null when omitted)",
    )


class CategoryUpdate(BaseModel):
    """
    What:  Body of PUT /categories/{id}; every field is optional.
    How:   Only fields present in the JSON are applied (`model_fields_set`),
           so `"parent_id": null` detaches while an absent key leaves the
           parent untouched. `id` is accepted and ignored.
    """
    id: Optional[int] = Field(default=None, description="Ignored; the path id is authoritative")
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    picture: Optional[str] = None
    parent_id: Optional[int] = None
    parent: Optional[ParentRef] = None
    products_count: Optional[int] = Field(
        default=None,
        ge=0,
        validation_alias=AliasChoices("productsCount", "products_count"),
    )


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class CategorySummary(BaseModel):
    """
    What:  Projection returned by GET /categories.
    Why:   Listing returns only id, name, picture, parent_id and created_at.
    """
    id: int
    name: str
    picture: Optional[str] = None
    parent_id: Optional[int] = None
    created_at: datetime

    model_config = {"from_attributes": True}


class CategoryResponse(BaseModel):
    """Full category row, returned by get/create/update/delete."""
    id: int = Field(description="Server-assigned identifier")
    name: str
    picture: Optional[str] = None
    parent_id: Optional[int] = None
    created_at: datetime
    updated_at: datetime
    products_count: Optional[int] = Field(
        default=None,
        validation_alias=AliasChoices("productsCount", "products_count"),
        serialization_alias="productsCount",
    )

    model_config = {"from_attributes": True}
