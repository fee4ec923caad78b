"""
Catalog Backend: Image Route Handlers
======================================

What:  POST /upload runs the image ingestion pipeline;
       GET /images/{filename} serves what it stored.

Request Flow (POST /upload):
    1. FastAPI validates {picture: str, category_id: int > 0}
    2. ImagePipeline.ingest: decode → write original → resize → write resized
    3. 200 with an acknowledgement; the image itself is not returned

Error responses (global handlers):
    400 invalid_image_payload   bad/empty/oversize base64
    422 unprocessable_image     bytes are not a readable image
    500 server_error            image could not be written
"""

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import FileResponse

from catalog.dependencies import get_image_pipeline
from catalog.schemas.common import ErrorResponse, UploadRequest, UploadResponse
from catalog.services.image_pipeline import ImagePipeline

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Images"])


@router.post(
    "/upload",
    response_model=UploadResponse,
    responses={
        400: {"description": "Picture is not valid base64", "model": ErrorResponse},
        422: {"description": "Picture is not a readable image", "model": ErrorResponse},
        500: {"description": "Image could not be stored", "model": ErrorResponse},
    },
    summary="Upload and resize a picture",
    description=(
        "Decodes a base64 picture, stores it as <category_id>_original.jpg, resizes it "
        "to fit the configured bounding box (3200x3200 by default) and stores the result "
        "as <category_id>_resized.jpg. Existing files for the same id are overwritten."
    ),
)
async def upload_picture(
    payload: UploadRequest,
    pipeline: ImagePipeline = Depends(get_image_pipeline),
) -> UploadResponse:
    logger.info(
        "Received upload: category_id=%d, payload=%d chars",
        payload.category_id,
        len(payload.picture),
    )
    await pipeline.ingest(payload.picture, payload.category_id)
    return UploadResponse()


@router.get(
    "/images/{filename}",
    responses={
        200: {"description": "Image file", "content": {"image/jpeg": {}}},
        404: {"description": "Image not found", "model": ErrorResponse},
    },
    summary="Serve a stored image",
)
async def serve_image(
    filename: str,
    pipeline: ImagePipeline = Depends(get_image_pipeline),
) -> FileResponse:
    path = pipeline.resolve_stored_file(filename)
    return FileResponse(
        path=str(path),
        media_type="image/jpeg",
        headers={"Cache-Control": "no-cache"},
    )
