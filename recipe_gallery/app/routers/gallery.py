# recipe_gallery/app/routers/gallery.py
"""
Gallery routes: list images with their recipes, upload a new image.
"""
from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Query, Request, status
from fastapi.responses import JSONResponse
from starlette.datastructures import UploadFile

from recipe_gallery.app.deps import get_gallery_service
from recipe_gallery.app.domain.errors import BadRequestError, MetadataUnavailableError, StorageError
from recipe_gallery.app.schemas.gallery import (
    ErrorResponse,
    GalleryResponse,
    ImageMetadataResponse,
    UploadResponse,
)
from recipe_gallery.app.services.gallery_service import GalleryService
from recipe_gallery.services.errors import InferenceFailedError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/gallery", tags=["gallery"])


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=ErrorResponse(error=message).model_dump())


@router.get(
    "",
    response_model=GalleryResponse,
    responses={500: {"model": ErrorResponse}},
)
async def load_gallery(service: GalleryService = Depends(get_gallery_service)):
    """
    Every eligible image in the bucket with a freshly inferred recipe.
    All or nothing: a single failed inference fails the whole response.
    """
    try:
        payload = await service.load_gallery()
    except (StorageError, InferenceFailedError) as e:
        logger.error("Loader error: %s", e)
        return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to load data")

    return GalleryResponse(imageUrls=payload.image_urls, recipeData=payload.recipes)


@router.post(
    "",
    response_model=UploadResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def upload_image(
    request: Request,
    service: GalleryService = Depends(get_gallery_service),
):
    """
    Multipart upload with the image under the `file` field.
    Anything other than a non-empty file in that field is a 400.
    """
    form = await request.form()
    file = form.get("file")
    if not isinstance(file, UploadFile) or not file.filename:
        return _error(status.HTTP_400_BAD_REQUEST, "No file uploaded")

    body = await file.read()
    try:
        result = await service.upload_image(
            filename=file.filename,
            content_type=file.content_type,
            body=body,
        )
    except BadRequestError as e:
        return _error(status.HTTP_400_BAD_REQUEST, str(e))
    except (StorageError, InferenceFailedError) as e:
        logger.error("Error uploading file: %s", e)
        return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to upload file")
    finally:
        await file.close()

    return UploadResponse(success=True, fileUrl=result.url, recipeData=result.recipe)


@router.get(
    "/metadata",
    response_model=ImageMetadataResponse,
    responses={500: {"model": ErrorResponse}},
)
async def image_metadata(
    key: str = Query(..., min_length=1, description="Full object key, e.g. food/a.png"),
    service: GalleryService = Depends(get_gallery_service),
):
    try:
        metadata = await service.image_metadata(key)
    except MetadataUnavailableError as e:
        logger.error("Metadata error: %s", e)
        return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Error retrieving image metadata")

    return ImageMetadataResponse(
        contentType=metadata.content_type,
        contentLength=metadata.content_length,
        lastModified=metadata.last_modified,
        eTag=metadata.etag,
    )
