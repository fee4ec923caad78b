"""
Catalog Backend: Shared Schemas
================================

What:  Error envelope, health report, welcome/counts payload and the
       upload contract.
"""

from typing import Optional

from pydantic import BaseModel, Field


# ══════════════════════════════════════════════════════════════════════════
# Upload
# ══════════════════════════════════════════════════════════════════════════


class UploadRequest(BaseModel):
    """
    What:  Body of POST /upload.

    `picture` is validated by the image pipeline rather than here, so that a
    bad payload comes back as a 400 `invalid_image_payload` and not as a
    schema error.
    """
    picture: str = Field(description="Base64-encoded image (a data: URL prefix is accepted)")
    category_id: int = Field(gt=0, description="Owner id; names the stored files")


class UploadResponse(BaseModel):
    message: str = Field(default="Image uploaded and resized successfully.")


# ══════════════════════════════════════════════════════════════════════════
# Root
# ══════════════════════════════════════════════════════════════════════════


class EntityCount(BaseModel):
    count: int


class CatalogCounts(BaseModel):
    categories: EntityCount
    products: EntityCount


class WelcomeResponse(BaseModel):
    """Returned by GET /: greeting plus row counts of both tables."""
    message: str
    counts: CatalogCounts


# ══════════════════════════════════════════════════════════════════════════
# Errors & Health
# ══════════════════════════════════════════════════════════════════════════


class ErrorResponse(BaseModel):
    """
    What:  Standardized error response format for all API errors.

    Example:
        {
            "error": "not_found",
            "message": "Category with ID '42' was not found",
            "request_id": "1a2b3c4d"
        }
    """
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    uptime_seconds: float = Field(description="Seconds since service started")
