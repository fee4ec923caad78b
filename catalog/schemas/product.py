"""
Catalog Backend: Product Request/Response Schemas
==================================================

What:  Pydantic models defining the product API contract.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class ProductCreate(BaseModel):
    """Body of POST /products."""
    name: str = Field(min_length=1, max_length=255)
    picture: Optional[str] = Field(default=None, description="Image reference or base64 payload")
    category_id: int = Field(description="ID of the owning category")


class ProductUpdate(BaseModel):
    """Body of PUT /products/{id}. Only the keys present are applied; `id` is ignored."""
    id: Optional[int] = None
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    picture: Optional[str] = None
    category_id: Optional[int] = None


class ProductResponse(BaseModel):
    id: int
    name: str
    picture: Optional[str] = None
    category_id: int
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
