from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from recipe_gallery.app.schemas.recipe import RecipeRecord


class GalleryResponse(BaseModel):
    imageUrls: list[str] = Field(default_factory=list)
    recipeData: list[RecipeRecord] = Field(default_factory=list)


class UploadResponse(BaseModel):
    success: bool = True
    fileUrl: str
    recipeData: RecipeRecord


class ImageMetadataResponse(BaseModel):
    contentType: Optional[str] = None
    contentLength: Optional[int] = None
    lastModified: Optional[datetime] = None
    eTag: Optional[str] = None


class ErrorResponse(BaseModel):
    error: str
