"""
Catalog Backend: Custom Exception Hierarchy
============================================

What:  Application-specific exceptions, one per outward error shape.
How:   Each exception carries a user-facing message and an optional context
       dict. Global handlers (registered in main.py) turn them into JSON
       error bodies with the matching HTTP status.
Who:   Raised by services and the image pipeline; caught by global handlers.

Exception Hierarchy:
    CatalogError (base)                  → 500
    ├── ValidationError                  → 400 Bad Request
    │   └── ImageDecodeError             → 400 (bad base64 / empty / too large)
    ├── NotFoundError                    → 404 Not Found
    ├── ReferenceNotFoundError           → 409 Conflict (dangling foreign key)
    ├── ConflictError                    → 409 Conflict (row still referenced)
    ├── UnprocessableImageError          → 422 (not a decodable image)
    ├── FileStorageError                 → 500
    └── DatabaseError                    → 500

    `context` is logged server-side. Only `ValidationError` and the
    reference/conflict errors echo it back as `details`.
"""

from typing import Any, Dict, Optional


class CatalogError(Exception):
    """
    Base exception for all catalog application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info
    """

    status_code = 500
    error_code = "server_error"

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(CatalogError):
    """
    Raised when client input breaks a business rule the schemas cannot express.

    When:  Cycle in the category tree, category set as its own parent.
    HTTP:  400 Bad Request. Schema-level problems stay FastAPI's 422.

    Example response:
        {
            "error": "validation_error",
            "message": "A category cannot be its own ancestor",
            "details": {"field": "parent_id"}
        }
    """

    status_code = 400
    error_code = "validation_error"

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class ImageDecodeError(ValidationError):
    """
    Raised when the `picture` payload is not usable base64.

    When:  Characters outside the base64 alphabet, bad padding, empty payload,
           decoded size above MAX_UPLOAD_BYTES.
    HTTP:  400 Bad Request
    """

    error_code = "invalid_image_payload"

    def __init__(
        self,
        message: str = "The picture is not valid base64 data",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, field="picture", context=context)


class NotFoundError(CatalogError):
    """
    Raised when a requested resource does not exist.

    When:  GET/PUT/DELETE /categories/{id} or /products/{id} with an unknown id,
           GET /images/{filename} for a file that was never written.
    HTTP:  404 Not Found
    """

    status_code = 404
    error_code = "not_found"

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[Any] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"The requested {resource} was not found"
        if resource_id is not None:
            message = f"{resource.capitalize()} with ID '{resource_id}' was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id is not None:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class ReferenceNotFoundError(CatalogError):
    """
    Raised when a write points a foreign key at a row that does not exist.

    When:  Category parent_id / parent.id or product category_id naming an
           unknown category.
    HTTP:  409 Conflict. The addressed resource exists (or is being created);
           what is missing is the row it refers to, so this is kept apart
           from the 404 of the addressed resource itself.
    """

    status_code = 409
    error_code = "unknown_reference"

    def __init__(
        self,
        resource: str,
        resource_id: Any,
        field: str,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx.update({"field": field, "resource": resource, "resource_id": resource_id})
        super().__init__(
            message=f"Referenced {resource} with ID '{resource_id}' does not exist",
            context=ctx,
        )
        self.field = field


class ConflictError(CatalogError):
    """
    Raised when a delete or write collides with rows that depend on it.

    When:  Deleting a category that still owns products.
    HTTP:  409 Conflict
    """

    status_code = 409
    error_code = "conflict"

    def __init__(
        self,
        message: str = "The operation conflicts with existing data",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class UnprocessableImageError(CatalogError):
    """
    Raised when decoded bytes are not an image the resizer can read.

    When:  Truncated/corrupt files, unsupported formats, decompression bombs.
    HTTP:  422 Unprocessable Entity
    """

    status_code = 422
    error_code = "unprocessable_image"

    def __init__(
        self,
        message: str = "The picture could not be read as an image",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class FileStorageError(CatalogError):
    """
    Raised when file system operations fail.

    When:  Image directory missing, permission denied, disk full, I/O error.
    HTTP:  500 Internal Server Error. Paths stay in the log, not the response.
    """

    def __init__(
        self,
        message: str = "File storage operation failed",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class DatabaseError(CatalogError):
    """
    Raised when database operations fail unexpectedly.

    When:  Connection lost mid-query, unexpected constraint violation, deadlock.
    HTTP:  500 Internal Server Error with a generic message. SQL and
           constraint names are logged server-side only.
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
